"""
=============================================================================
HANDLERS MODULE
=============================================================================

The request handlers behind each route.

=============================================================================
WHAT IS A HANDLER?
=============================================================================

A handler turns a parsed request into a response. It never sees the
socket.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    Request                 Handler                 Response         │
    │   ┌─────────┐           ┌─────────┐           ┌─────────┐          │
    │   │ GET     │           │         │           │ 200 OK  │          │
    │   │ /echo/  │ ────────▶ │ Logic   │ ────────▶ │         │          │
    │   │ abc     │           │         │           │ abc     │          │
    │   └─────────┘           └─────────┘           └─────────┘          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
BUILT-IN HANDLERS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Route          │ Handler                                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │ /echo/{text}   │ EchoHandler        text back, gzip if accepted     │
    │ /user-agent    │ UserAgentHandler   User-Agent header back          │
    │ /files/{name}  │ FileHandler        GET → FileGetHandler            │
    │                │                    POST → FilePostHandler          │
    └─────────────────────────────────────────────────────────────────────┘

All of them subclass RequestHandler (base.py).

=============================================================================
"""

from .base import RequestHandler
from .echo import EchoHandler
from .user_agent import UserAgentHandler
from .files import FileHandler, FileGetHandler, FilePostHandler

__all__ = [
    "RequestHandler",
    "EchoHandler",
    "UserAgentHandler",
    "FileHandler",
    "FileGetHandler",
    "FilePostHandler",
]
