"""
Inkwell Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Timeout] → [GZip/CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation id
    2. Logging: records status and duration, including timed-out requests
    3. Timeout: bounds handler + database time; expiry answers 500
"""
