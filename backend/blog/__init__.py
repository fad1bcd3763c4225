"""
Blog Backend — Application Package Initializer
================================================

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (HTTP Layer)       │  ← render or redirect
    ├─────────────────────────────────────┤
    │   Auth / Services (Business Logic)  │  ← gates, validation, CRUD
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes get a RequestContext (db session, cookie session, notices) and an
    Auth object through FastAPI dependencies rather than inheriting helpers
    from a base controller.
"""

__version__ = "1.0.0"
