# Middleware package init
"""
Blog Backend — Middleware Package
===================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Session] → [Method Override] → [GZip] → [CORS] → Route

    1. Request ID first so every later log line carries it
    2. Logging sees the final status, including redirects from failed gates
    3. Session (Starlette SessionMiddleware) wraps the exception handlers, so
       a notice flashed while handling an auth error is still written to the
       cookie
    4. Method override rewrites POST → PATCH/DELETE just before routing
"""
