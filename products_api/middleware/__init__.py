# Middleware package init
"""
Products API — Middleware Package
===================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Origin Gate] → [CORS headers] → Route Handler

    1. Request ID: correlation ID for every log line of the request
    2. Logging: access log, including requests the gate rejects
    3. Origin Gate: 403 for origins outside the allow-list
    4. CORS: Starlette's CORSMiddleware answers preflight and adds headers
"""
