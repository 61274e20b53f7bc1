"""
Behavior Tracker Backend: Application Package
==============================================

What: Root package for the behavior-tracking API (students, behavior logs,
      organizations, profiles, users).
Who:  Imported by uvicorn (`tracker.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP wiring, envelopes
    ├─────────────────────────────────────┤
    │   Validation + Mappers (Requests)   │  ← camelCase in, snake_case out
    ├─────────────────────────────────────┤
    │   Entities, Schemas, Models (Data)  │  ← invariants, DTOs, tables
    ├─────────────────────────────────────┤
    │    Database client (Persistence)    │  ← hosted Postgres via SQLAlchemy
    └─────────────────────────────────────┘

    Routes call the injected DatabaseClient directly; there is no service
    layer between them except for credentials (hashing and tokens).
"""

__version__ = "1.0.0"
