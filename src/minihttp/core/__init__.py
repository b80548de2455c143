"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates the main TCP listening socket                            │
    │  • Binds to IP:PORT and listens for connections                     │
    │  • Runs the accept() loop                                           │
    │  • Handles graceful shutdown via signals (SIGTERM, SIGINT)         │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One thread per accepted socket
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Buffered readline()/read(n) over recv()                          │
    │  • sendall() of the finished response                               │
    │  • Orderly TCP close                                                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THREAD PER CONNECTION
=============================================================================

    Main Thread                Connection Threads
    ───────────                ──────────────────
    accept() ──► conn A  ───►  Thread-A: read → route → write → close
    accept() ──► conn B  ───►  Thread-B: read → route → write → close
    accept() ──► ...

A thread lives exactly as long as its connection, and a connection
carries exactly one request. Threads share nothing mutable.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Main TCP server - accepts connections
    "Connection",       # Wrapper for client socket - handles I/O
    "ConnectionState",  # Enum for connection lifecycle states
]
