"""Validation of a tenant's per-sector tuning knobs."""

from callcenter.shared.constants import SECTOR_DISPLAY_NAMES


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _positive_int(value) -> bool:
    return _is_int(value) and value > 0


def _non_negative_number(value) -> bool:
    return _is_number(value) and value >= 0


def _boolean(value) -> bool:
    return isinstance(value, bool)


VALIDATION_RULES = {
    "ecommerce": {
        "return_window_days": _positive_int,
        "refund_threshold": _non_negative_number,
        "cancel_window_hours": _positive_int,
    },
    "healthcare": {
        "appointment_buffer_mins": _positive_int,
        "escalation_wait_time": _positive_int,
        "hipaa_enabled": _boolean,
    },
    "realestate": {
        "followup_window_hours": _positive_int,
        "showing_duration_mins": _positive_int,
    },
    "logistics": {
        "delivery_attempt_limit": _positive_int,
        "address_clarification_threshold": _non_negative_number,
    },
    "fintech": {
        "transaction_verification_timeout": _positive_int,
        "fraud_alert_threshold": _non_negative_number,
    },
}


# Stored config key -> agent data key, where they differ
AGENT_POLICY_KEYS = {
    "ecommerce": {"refund_threshold": "refund_auto_threshold"},
}


def validate_sector_config(sector: str, config: dict) -> tuple[bool, list[str]]:
    """Check only the fields present; sectors without rules accept anything."""
    rules = VALIDATION_RULES.get(sector)
    if not rules:
        return True, []

    errors = [
        f"Invalid value for {field}"
        for field, check in rules.items()
        if field in config and not check(config[field])
    ]
    return not errors, errors


def format_sector_name(sector: str) -> str:
    return SECTOR_DISPLAY_NAMES.get(sector, sector)


def agent_policy(sector: str, config: dict) -> dict:
    """The validated knobs of a stored config, renamed to the keys agents read."""
    rules = VALIDATION_RULES.get(sector, {})
    renames = AGENT_POLICY_KEYS.get(sector, {})
    return {
        renames.get(field, field): config[field]
        for field, check in rules.items()
        if field in config and check(config[field])
    }
