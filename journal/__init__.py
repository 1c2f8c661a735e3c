"""
Memory Journal Backend — Application Package Initializer
=========================================================

What: Marks the `journal` directory as a Python package.
Why:  Enables module imports like `from journal.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows the same layered architecture throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Group / Post / Comment) │  ← Lookups, secret checks, CRUD
    ├─────────────────────────────────────┤
    │   Engagement Engine (counters)      │  ← Likes, post/comment counts, badges
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The engagement engine is the only place that mutates counters or badges.
    Services call into it; routes never touch counters directly.
"""

__version__ = "1.0.0"
