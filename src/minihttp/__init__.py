"""
=============================================================================
MINIHTTP - Minimal HTTP/1.1 Server on Raw Sockets
=============================================================================

A small HTTP/1.1 server: one request per connection, one thread per
connection, a fixed set of routes.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       MINIHTTP ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RAW SOCKET PROGRAMMING                                         │
    │      - TCP socket creation and binding                              │
    │      - Accept loop, one thread per connection                       │
    │      - Buffered line/byte reading                                   │
    │                                                                      │
    │   2. HTTP/1.1 PROTOCOL                                              │
    │      - Request parsing (request line, headers, fixed-length body)   │
    │      - Response building (status, headers, computed length)         │
    │      - gzip content negotiation                                     │
    │                                                                      │
    │   3. ROUTES                                                         │
    │      - /                   200, empty                               │
    │      - /echo/{text}        text back, gzip if accepted              │
    │      - /user-agent         User-Agent header back                   │
    │      - /files/{name}       GET reads, POST writes                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer: route table + connection lifecycle
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Low-level components
    │   ├── socket_server.py # TCP listening socket, accept loop
    │   └── connection.py    # Buffered client connection
    ├── http/                # HTTP protocol components
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response building
    │   ├── router.py        # First-segment routing
    │   ├── encoding.py      # gzip negotiation
    │   └── status_codes.py  # HTTP status enums
    ├── middleware/          # Middleware components
    │   ├── base.py          # Middleware ABC + pipeline
    │   └── logging.py       # Access log
    └── handlers/            # Request handlers
        ├── base.py          # RequestHandler ABC
        ├── echo.py          # /echo/{text}
        ├── user_agent.py    # /user-agent
        └── files.py         # /files/{name}

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
    server.run()

    $ curl -H "Accept-Encoding: gzip" --compressed localhost:4221/echo/abc
    abc

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
