"""
Inkwell Backend — API Routes Package
======================================

What:  HTTP handlers and the route table that mounts them.

Route Inventory (see table.py for the authoritative list):
    - posts.py:   GET/POST /posts, GET/PUT/DELETE /posts/{id}
    - users.py:   GET/PUT/DELETE /users/{id}
    - auth.py:    POST/GET /auth/session
    - health.py:  GET /health (outside the API prefix)

Design Principle:
    Routes are THIN: read the request, call a service, return its result.
    Business logic belongs in services.
"""
