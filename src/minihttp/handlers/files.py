"""
=============================================================================
FILE HANDLERS
=============================================================================

Reads and writes files under one root directory.

    GET  /files/{name}  →  200 + file bytes (application/octet-stream)
                           404 if missing, unreadable or a directory
    POST /files/{name}  →  201 after writing the request body to {name}
                           500 if the write fails
    other methods       →  404

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The name comes straight off the request line, so it is untrusted:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /files/.. HTTP/1.1                                              │
    │                                                                      │
    │  root = /srv/files                                                   │
    │  (root / "..").resolve()  →  /srv            ← outside root!        │
    │                                                                      │
    │  Our protection:                                                    │
    │  1. Resolve the full path (follow .. and symlinks)                 │
    │  2. Check it is still inside root                                  │
    │  3. If not, answer 404 and log a warning                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    PYTHON PROTECTION:

        full_path = (root / name).resolve()
        full_path.relative_to(root)  # Raises ValueError if outside root

The answer is 404 rather than 403 so a probe learns nothing about what
exists outside the root.

=============================================================================
CONCURRENCY
=============================================================================

Each connection runs in its own thread and the handlers keep no state
beyond the root path. Two simultaneous POSTs to the same name race in
the filesystem: the last writer wins.

=============================================================================
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    ResponseBuilder,
    created,
    internal_error,
    not_found,
)
from .base import RequestHandler


logger = logging.getLogger(__name__)


class _RootedFileHandler(RequestHandler):
    """Shared root-directory handling for the GET and POST handlers."""

    def __init__(self, directory: Union[str, Path]):
        """
        Args:
            directory: Root directory. It does not have to exist yet; POST
                       creates it on first write.
        """
        self.root = Path(directory).resolve()

    def _resolve(self, segments: List[str]) -> Optional[Path]:
        """
        Map the request's file name to a path inside the root.

        Returns None when there is no name segment or when the name
        resolves outside the root.
        """
        if len(segments) < 2:
            return None

        name = segments[1]

        # resolve() follows symlinks and collapses ".."
        full_path = (self.root / name).resolve()

        try:
            full_path.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name!r}")
            return None

        if full_path == self.root:
            return None  # "." names the root itself, not a file

        return full_path


class FileGetHandler(_RootedFileHandler):
    """GET /files/{name}: send the file's bytes."""

    def handle(self, request: HTTPRequest, segments: List[str]) -> HTTPResponse:
        path = self._resolve(segments)
        if path is None:
            return not_found()

        # ─────────────────────────────────────────────────────────────────
        # READ THE FILE
        # ─────────────────────────────────────────────────────────────────
        # No exists() pre-check: the file can vanish between the check and
        # the read anyway. Missing, directory and permission errors are all
        # OSError, and all of them mean 404 here.
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.debug(f"Cannot read {path}: {e}")
            return not_found()

        return ResponseBuilder().octet_stream(content).build()


class FilePostHandler(_RootedFileHandler):
    """POST /files/{name}: store the request body as the file's content."""

    def handle(self, request: HTTPRequest, segments: List[str]) -> HTTPResponse:
        path = self._resolve(segments)
        if path is None:
            return not_found()

        # ─────────────────────────────────────────────────────────────────
        # WRITE THE FILE
        # ─────────────────────────────────────────────────────────────────
        # An existing file is overwritten. Anything the OS refuses (read-only
        # directory, name is a directory, disk full) is a 500.
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(request.body)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(request.body)} bytes to {path}")
        return created()


class FileHandler(RequestHandler):
    """
    Method dispatcher for the /files route.

        GET   → FileGetHandler
        POST  → FilePostHandler
        other → 404
    """

    def __init__(self, directory: Union[str, Path]):
        self.get = FileGetHandler(directory)
        self.post = FilePostHandler(directory)

    @property
    def root(self) -> Path:
        return self.get.root

    def handle(self, request: HTTPRequest, segments: List[str]) -> HTTPResponse:
        if request.method == "GET":
            return self.get.handle(request, segments)
        if request.method == "POST":
            return self.post.handle(request, segments)
        return not_found()
