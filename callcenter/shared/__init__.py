"""Shared cross-cutting concerns: config, errors, interfaces, models, caching, audit."""

__all__ = [
    "config",
    "constants",
    "errors",
    "interfaces",
    "models",
    "cache",
    "audit_log",
]
