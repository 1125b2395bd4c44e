"""
SubTrack Backend — Application Package Initializer
===================================================

What: Marks the `subtrack` directory as a Python package.
Who:  Imported by uvicorn (`subtrack.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, billing math, ownership
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The billing calculations (amount normalization, next billing date,
    currency formatting) live in `services.billing` and never touch the
    database, so they are usable from routes, services and tests alike.
"""

__version__ = "1.0.0"
