"""
B.I Booster Backend — Pydantic Request/Response Schemas
=========================================================

What:  Pydantic models defining the API contract between the frontends
       (storefront, member dashboard, admin console) and this backend.
How:   FastAPI uses these models to validate request bodies, serialize
       responses and generate the OpenAPI docs.

Schemas are kept separate from the SQLAlchemy models so that internal
columns (password_hash, for one) are never serialized by accident.
"""
