# Routes package init
"""
B.I Booster Backend — API Routes Package
==========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one area of the product.

Route Inventory:
    - health.py:   GET  /health
    - catalog.py:  GET  /api/packages, /api/packages/{id}, /api/templates/categories
    - auth.py:     POST /api/auth/register, /api/auth/login; GET /api/auth/me
    - orders.py:   POST /api/orders; GET /api/me/orders
    - admin.py:    POST /api/admin/verify, /api/admin/orders/{id}/template
    - cms.py:      /api/admin/cms/...  (modules, chapters, lessons, media)
    - learning.py: GET  /api/lms/course, /api/lms/summary;
                   POST /api/lms/lessons/{id}/progress
    - files.py:    GET  /api/files/{path}

Routes stay THIN: extract request data, call one service method, shape the
response. Business rules live in services.
"""
