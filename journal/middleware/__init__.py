"""
Memory Journal Backend — Middleware Package
=============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: reject floods (like buttons get hammered) before any DB work
    2. Request ID: correlation id for log lines and the X-Request-ID header
    3. Logging: one access line per request with status and duration
"""
