"""
Behavior Tracker Backend: Middleware Package
============================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id stored in a ContextVar before anything logs
    2. Logging: one access line per request with status and duration
    3. CORS: FastAPI's CORSMiddleware, origins from FRONTEND_URL
"""
