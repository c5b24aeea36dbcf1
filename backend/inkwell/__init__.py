"""
Inkwell Backend — Application Package Initializer
==================================================

What: Marks the `inkwell` directory as a Python package.
Why:  Enables module imports like `from inkwell.config import settings`.
Who:  Used by uvicorn, Alembic, pytest and the seed command.

Architecture Note:
    The backend is split into layers with one job each:

    ┌─────────────────────────────────────┐
    │     Routes (explicit route table)   │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (posts, users, ownership) │  ← Business rules, error taxonomy
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database handle (Persistence)     │  ← Async engine owned by the app
    └─────────────────────────────────────┘

    Services never import the HTTP layer and never reach for a global
    engine: the session they work with is always passed in by the caller.
"""

__version__ = "1.0.0"
