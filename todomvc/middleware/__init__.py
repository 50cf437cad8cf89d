# Middleware package init
"""
TodoMVC — Middleware Package
==============================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

The request id is set before the logging middleware reads it, so every
access log line carries the same id as the X-Request-ID response header.
"""
