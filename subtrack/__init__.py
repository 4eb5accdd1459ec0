"""
SubTrack Backend: Application Package Initializer
=================================================

What: Marks the `subtrack` directory as a Python package.
Why:  Enables module imports like `from subtrack.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is split into layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Validation, Aggregation)│  ← Business rules
    ├─────────────────────────────────────┤
    │   Domain (Period, Subscription)     │  ← Pure value types
    ├─────────────────────────────────────┤
    │   Storage (SQLite | PostgreSQL)     │  ← One abstract contract, two backends
    └─────────────────────────────────────┘

    Routes never talk to SQLAlchemy directly. They receive a SubscriptionStorage
    through dependency injection, so the active backend is invisible to them.
"""

__version__ = "1.0.0"
