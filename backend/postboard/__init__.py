"""
Postboard Backend — Application Package
=========================================

What: A small social-posting API: registration, token login, posts with
      embedded likes and comments.
Who:  Imported by uvicorn (`postboard.main:app`), pytest and the services.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │   Services (Token, Users, Posts)    │  ← Business rules, raise app errors
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
