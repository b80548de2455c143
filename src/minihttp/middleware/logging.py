"""
=============================================================================
ACCESS LOG
=============================================================================

After each request, one line on the "minihttp.access" logger:

    127.0.0.1 - - [15/Oct/2026:10:00:00 +0000] "GET /echo/abc HTTP/1.1" 200 3 0.41ms

or, with log_format="json":

    {"client_ip": "127.0.0.1", "method": "GET", "path": "/echo/abc", ...}

The response is returned exactly as the router produced it. The access
logger is separate from the "minihttp" diagnostics, so it can be
silenced on its own:

    logging.getLogger("minihttp.access").setLevel(logging.WARNING)

=============================================================================
"""

import time
import json
import logging
from typing import Optional
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")

LOG_FORMATS = ("text", "json")


@dataclass
class RequestLog:
    """
    What gets recorded about one request.

    content_length is the size of the body actually sent, so a gzipped
    echo logs its compressed size. duration_ms covers the handler only.
    """

    client_ip: str
    method: str
    path: str
    version: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Common Log Format, with the duration appended."""
        request_line = f"{self.method} {self.path} {self.version}"
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] "{request_line}" '
            f"{self.status_code} {self.content_length} {self.duration_ms:.2f}ms"
        )


class LoggingMiddleware(Middleware):
    """
    Times the rest of the chain and logs the outcome.

    Put it first, so its timing includes any middleware added after it:

        pipeline.add(LoggingMiddleware())
        pipeline.add(LoggingMiddleware(log_format="json", skip_paths=["/"]))

    A handler exception is logged at ERROR and re-raised unchanged;
    HTTPServer turns it into a 500.
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level for the access lines.
            skip_paths: Request targets (exact match) that are not logged.

        Raises:
            ValueError: Unknown log_format.
        """
        if log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

        self.log_format = log_format
        self.log_level = log_level
        self.skip_paths = frozenset(skip_paths or ())

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        started = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} from "
                f"{request.client_address[0] or '-'} after {elapsed_ms:.2f}ms "
                f"({type(e).__name__}: {e})"
            )
            raise

        if request.path not in self.skip_paths:
            elapsed_ms = (time.perf_counter() - started) * 1000
            self._emit(self.build_entry(request, response, elapsed_ms))

        return response

    def build_entry(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        duration_ms: float,
    ) -> RequestLog:
        return RequestLog(
            client_ip=request.client_address[0],
            method=request.method,
            path=request.path,
            version=request.version,
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def _emit(self, entry: RequestLog):
        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
