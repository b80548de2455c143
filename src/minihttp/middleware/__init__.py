"""
=============================================================================
MIDDLEWARE FRAMEWORK
=============================================================================

Cross-cutting request processing that sits between the parser and the
router.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   parsed request                                                     │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────────────────┐                                           │
    │   │  LoggingMiddleware   │  times the request, logs one line        │
    │   │   ┌──────────────┐   │                                           │
    │   │   │    Router    │   │                                           │
    │   │   └──────────────┘   │                                           │
    │   └──────────────────────┘                                           │
    │        │                                                             │
    │        ▼                                                             │
    │   response (unchanged by the middleware)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Gzip is NOT middleware here. Only /echo compresses, so the echo handler
does it itself.

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",

    # Built-in middleware
    "LoggingMiddleware",
    "RequestLog",
]
