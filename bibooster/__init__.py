"""
B.I Booster Backend — Application Package
===========================================

Storefront, member LMS and admin console API for the B.I Booster
website-template marketplace.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Accounts, orders, admin, LMS
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes extract request data, call one service method and shape the
    response. Services own the queries and raise exceptions from
    bibooster.exceptions; they never build HTTP responses themselves.
"""

__version__ = "1.0.0"
