"""
=============================================================================
URL ROUTER
=============================================================================

Dispatches a request to a handler by the FIRST segment of its path.

=============================================================================
ROUTING ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /files/notes.txt                                               │
    │        │                                                             │
    │        ▼                                                             │
    │   split_path() → ["files", "notes.txt"]                              │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTE TABLE (read-only, fixed at startup)                  │   │
    │   │  ┌────────────────────────────────────────────────────────┐ │   │
    │   │  │ "echo"        → EchoHandler                            │ │   │
    │   │  │ "user-agent"  → UserAgentHandler                       │ │   │
    │   │  │ "files"       → FileHandler             ← MATCH!       │ │   │
    │   │  └────────────────────────────────────────────────────────┘ │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   FileHandler.handle(request, ["files", "notes.txt"])                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PATH SEGMENTS
=============================================================================

    "/"                    → []                      → 200 OK, empty body
    ""                     → []                      → 200 OK, empty body
    "/echo/abc"            → ["echo", "abc"]
    "/files/a.txt"         → ["files", "a.txt"]
    "//echo//abc"          → ["echo", "abc"]         (empty segments dropped)
    "//"                   → []                      → 404 (only "/" and "" are the root)
    "/nope"                → ["nope"]                → 404

The whole segment list goes to the handler, so a handler can tell
"/echo" (one segment) from "/echo/abc" (two).

Query strings and percent-encoding are not interpreted. "/echo/a%20b"
echoes "a%20b" verbatim.

=============================================================================
"""

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, List, Mapping

from .request import HTTPRequest
from .response import HTTPResponse, not_found, ok

if TYPE_CHECKING:
    from ..handlers.base import RequestHandler


logger = logging.getLogger(__name__)

# Targets that mean "the root"; any other path must name a segment
ROOT_PATHS = ("", "/")


def split_path(path: str) -> List[str]:
    """
    Split a request target into its non-empty "/"-separated segments.

    Example:
        split_path("/files/notes.txt")  → ["files", "notes.txt"]
        split_path("/")                  → []
    """
    return [segment for segment in path.split("/") if segment]


class Router:
    """
    First-segment router over a fixed route table.

    ==========================================================================
    WHY NOT PATTERN MATCHING?
    ==========================================================================

    Every route here is "/<name>" or "/<name>/<anything>", so one dict
    lookup on the first segment is all the matching there is. Handlers
    interpret the rest of the segments themselves.

    The table is wrapped in a MappingProxyType at construction. Worker
    threads share the router, and nothing can add or remove a route after
    the server starts.

    ==========================================================================
    USAGE
    ==========================================================================

        router = Router({
            "echo": EchoHandler(),
            "user-agent": UserAgentHandler(),
            "files": FileHandler(directory),
        })
        response = router.handle(request)

    ==========================================================================
    """

    def __init__(self, routes: Mapping[str, "RequestHandler"]):
        """
        Args:
            routes: First path segment → handler. Copied, then frozen.
        """
        self._routes = MappingProxyType(dict(routes))

    @property
    def routes(self) -> Mapping[str, "RequestHandler"]:
        """Read-only view of the route table."""
        return self._routes

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        1. "/" or ""                    → 200 with an empty body
        2. No segments otherwise ("//") → 404
        3. First segment in the table   → that handler's response
        4. Anything else                → 404

        The HTTP method plays no part in routing. Handlers that care about
        it (the file handler) check it themselves.
        """
        if request.path in ROOT_PATHS:
            return ok()

        segments = split_path(request.path)
        if not segments:
            logger.debug(f"Empty path {request.path!r} from {request.method}")
            return not_found()

        handler = self._routes.get(segments[0])
        if handler is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found()

        return handler.handle(request, segments)
