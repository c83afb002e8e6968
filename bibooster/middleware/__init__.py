# Middleware package init
"""
B.I Booster Backend — Middleware Package
==========================================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any work
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: one access line per request, tagged with the ID
"""
