"""
Named constants — replaces magic numbers throughout the codebase.

Sector identifiers, pagination limits and agent policy defaults live here
so routes, agents and the orchestrator agree on them.
"""

# ── Sectors ──────────────────────────────────────────────────

DEFAULT_SECTOR = "ecommerce"
"""Sector used when a tenant has none recorded, and the legacy agent registry."""

SECTOR_DISPLAY_NAMES = {
    "ecommerce": "E-Commerce",
    "healthcare": "Healthcare",
    "realestate": "Real Estate",
    "logistics": "Logistics",
    "fintech": "FinTech",
    "saas": "SaaS",
    "telecom": "Telecom",
    "support": "Customer Support",
    "education": "Education",
    "hospitality": "Hospitality",
    "government": "Government",
    "travel": "Travel & Hospitality",
    "automotive": "Automotive",
    "manufacturing": "Manufacturing",
    "custom": "Custom",
}

DEFAULT_LANGUAGE = "en"

# ── Orchestration ────────────────────────────────────────────

MAX_ACTIVE_AGENTS = 1000
"""Active agents above which the orchestrator reports itself unhealthy."""

AGENT_CACHE_TTL_SECONDS = 3600
"""How long a sector's resolved agent set is reused before reloading."""

INTENT_CACHE_TTL_SECONDS = 3600
"""How long a sector/language pattern set is reused before reloading."""

GREETING_MAX_LENGTH = 20
"""Utterances at or above this length are never classified as a bare greeting."""

# ── Agent policy defaults (overridden per client) ────────────

DEFAULT_RETURN_WINDOW_DAYS = 14
DEFAULT_REFUND_AUTO_THRESHOLD = 2000
DEFAULT_CANCEL_WINDOW_HOURS = 24

# ── Pagination ───────────────────────────────────────────────

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500
MAX_LOOKBACK_DAYS = 365

# ── Teams ────────────────────────────────────────────────────

TEAM_ROLES = ("lead", "senior", "member", "trainee")
DEFAULT_PROFICIENCY = 50
PERFORMANCE_TREND_DAYS = 7

# ── Calls ────────────────────────────────────────────────────

CALL_STATUS_FILTERS = ("completed", "escalated", "failed")
