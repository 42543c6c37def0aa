"""Tenant-facing services: credential storage and probing, sector requirements and config validation."""

__all__ = [
    "credential_manager",
    "credential_tester",
    "sector_config",
    "sector_requirements",
]
