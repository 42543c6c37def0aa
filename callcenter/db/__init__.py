"""Persistence: ORM models, engine/session factory, catalog seeding."""

__all__ = [
    "models",
    "session",
    "seed",
]
