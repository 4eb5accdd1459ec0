# Middleware package init
"""
SubTrack Backend: Middleware Package
====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → Route Handler

    1. Request ID: Generate or accept the correlation ID
    2. Logging: Log request details with that ID once the response is ready

    The order is reversed for responses, so the request ID header is set on
    the way out and logging sees the final status and duration.
"""
