"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every knob the server has, in one dataclass.

=============================================================================
WHERE VALUES COME FROM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   --port 3000            CLI flag        (wins)                     │
    │        ▲                                                             │
    │   HTTP_PORT=3000         environment     (CLI default)              │
    │        ▲                                                             │
    │   port: int = 4221       field default   (fallback)                 │
    └─────────────────────────────────────────────────────────────────────┘

__main__.py builds its argparse defaults from ServerConfig.from_env(),
so the chain above falls out naturally.

A ServerConfig is created before the first connection and never changed
afterwards; connection threads read it freely.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Server settings.

        ServerConfig(port=0, directory="/tmp/files", timeout=5.0)

    Network:  host, port, backlog, buffer_size, timeout
    Files:    directory
    Logging:  log_level, access_log
    """

    host: str = "127.0.0.1"
    """Bind address. "0.0.0.0" listens on every interface."""

    port: int = 4221
    """TCP port; 0 lets the OS choose (read it back from HTTPServer.address)."""

    backlog: int = 128
    """listen() queue length."""

    buffer_size: int = 8192
    """Bytes requested per recv()."""

    timeout: Optional[float] = None
    """
    Seconds a client socket may sit idle. With None a client that stops
    mid-request keeps its thread until it disconnects.
    """

    directory: str = "."
    """
    Where /files/{name} reads and writes. Missing directories are
    created by the first POST.
    """

    log_level: str = "INFO"
    """Name of a logging level, one of LOG_LEVELS."""

    access_log: bool = True
    """Install LoggingMiddleware (one "minihttp.access" line per request)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Defaults overridden by HTTP_* environment variables.

            HTTP_HOST        host
            HTTP_PORT        port (integer)
            HTTP_DIRECTORY   directory
            HTTP_TIMEOUT     timeout in seconds; empty means none
            HTTP_LOG_LEVEL   log_level, any case

        Raises:
            ValueError: HTTP_PORT or HTTP_TIMEOUT is not a number.
        """
        defaults = cls()
        timeout = os.environ.get("HTTP_TIMEOUT", "")

        return cls(
            host=os.environ.get("HTTP_HOST", defaults.host),
            port=int(os.environ.get("HTTP_PORT", defaults.port)),
            directory=os.environ.get("HTTP_DIRECTORY", defaults.directory),
            timeout=float(timeout) if timeout.strip() else defaults.timeout,
            log_level=os.environ.get("HTTP_LOG_LEVEL", defaults.log_level).upper(),
        )

    @property
    def log_level_value(self) -> int:
        """log_level as the logging module's integer constant."""
        return logging.getLevelName(self.log_level.upper())

    def validate(self) -> None:
        """
        Reject settings the server could not run with.

        Raises:
            ValueError: Naming the first offending field.
        """
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {self.port}")

        if self.backlog < 1:
            raise ValueError(f"backlog must be at least 1, got {self.backlog}")

        if self.buffer_size < 1024:
            raise ValueError(f"buffer_size must be at least 1024, got {self.buffer_size}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive or None, got {self.timeout}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
