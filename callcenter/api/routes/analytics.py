"""
Tenant call analytics: KPIs, hourly volume and daily trends.

Durations and time buckets are computed in Python so the same code runs on
every database backend.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from callcenter.api.auth import TenantContext, require_tenant
from callcenter.api.deps import get_db
from callcenter.db.models import Action, Call, utcnow
from callcenter.shared.constants import MAX_LOOKBACK_DAYS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

DEFAULT_TREND_DAYS = 7


def _parse_datetime(value: str, name: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(400, f"Invalid {name}: expected ISO date")
    return parsed.replace(tzinfo=None)


def _duration(start: datetime, end: Optional[datetime]) -> Optional[float]:
    if end is None:
        return None
    return (end - start).total_seconds()


@router.get("/kpis")
def get_kpis(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    filters = [Call.client_id == tenant.client_id]
    if start_date:
        filters.append(Call.start_ts >= _parse_datetime(start_date, "start_date"))
    if end_date:
        filters.append(Call.start_ts <= _parse_datetime(end_date, "end_date"))

    total = db.query(func.count(Call.id)).filter(*filters).scalar() or 0
    resolved = db.query(func.count(Call.id)).filter(*filters, Call.resolved.is_(True)).scalar() or 0

    ended = db.query(Call.start_ts, Call.end_ts).filter(*filters, Call.end_ts.isnot(None)).all()
    durations = [_duration(start, end) for start, end in ended]
    avg_handling = sum(durations) / len(durations) if durations else 0

    breakdown = (
        db.query(Action.action_type, Action.status, func.count(Action.id))
        .join(Call, Action.call_id == Call.id)
        .filter(*filters)
        .group_by(Action.action_type, Action.status)
        .order_by(Action.action_type, Action.status)
        .all()
    )

    automation_rate = resolved / total * 100 if total else 0
    return {
        "total_calls": total,
        "resolved_calls": resolved,
        "automation_rate": f"{automation_rate:.2f}%",
        "avg_handling_time_seconds": round(avg_handling),
        "actions_breakdown": [
            {"action_type": action_type, "status": status, "count": count}
            for action_type, status, count in breakdown
        ],
        "period": {"start": start_date or "all_time", "end": end_date or "now"},
    }


@router.get("/hourly")
def get_hourly(
    date: Optional[str] = None,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    query = db.query(Call.start_ts, Call.resolved).filter(Call.client_id == tenant.client_id)
    if date:
        day = _parse_datetime(date, "date").replace(hour=0, minute=0, second=0, microsecond=0)
        query = query.filter(Call.start_ts >= day, Call.start_ts < day + timedelta(days=1))

    buckets = defaultdict(lambda: {"call_count": 0, "resolved_count": 0})
    for start, resolved in query.all():
        bucket = buckets[start.hour]
        bucket["call_count"] += 1
        if resolved:
            bucket["resolved_count"] += 1

    return {"hourly_data": [{"hour": hour, **buckets[hour]} for hour in sorted(buckets)]}


@router.get("/daily")
def get_daily(
    days: int = DEFAULT_TREND_DAYS,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    window = min(max(days, 1), MAX_LOOKBACK_DAYS)
    rows = (
        db.query(Call.start_ts, Call.end_ts, Call.resolved)
        .filter(Call.client_id == tenant.client_id, Call.start_ts >= utcnow() - timedelta(days=window))
        .all()
    )

    buckets = {}
    for start, end, resolved in rows:
        bucket = buckets.setdefault(start.date(), {"call_count": 0, "resolved_count": 0, "durations": []})
        bucket["call_count"] += 1
        if resolved:
            bucket["resolved_count"] += 1
        duration = _duration(start, end)
        if duration is not None:
            bucket["durations"].append(duration)

    trends = []
    for day in sorted(buckets, reverse=True):
        bucket = buckets[day]
        durations = bucket["durations"]
        trends.append({
            "date": day.isoformat(),
            "call_count": bucket["call_count"],
            "resolved_count": bucket["resolved_count"],
            "avg_duration": round(sum(durations) / len(durations), 2) if durations else None,
        })
    return {"daily_trends": trends}
