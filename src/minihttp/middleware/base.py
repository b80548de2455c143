"""
=============================================================================
MIDDLEWARE CHAIN
=============================================================================

A middleware is a callable that gets the request plus "the rest of the
chain", and returns a response:

    request ──► LoggingMiddleware ──► Router.handle ──► handler
                      │                                    │
    response ◄────────┴────────────────────────────────────┘

HTTPRequest and HTTPResponse are frozen. A middleware can observe both,
and it can answer instead of the router, but it cannot edit either one
in place.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# Whatever comes after a middleware: another middleware or Router.handle
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    One link in the chain.

        class Stopwatch(Middleware):
            def __call__(self, request, next):
                started = time.monotonic()
                response = next(request)
                log(time.monotonic() - started)
                return response

    Returning without calling next() answers the request here; the
    router is never reached.
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        ...

    @property
    def name(self) -> str:
        return type(self).__name__


class MiddlewarePipeline:
    """
    An ordered list of middleware, folded around a final handler.

    The first one added is the outermost:

        pipeline = MiddlewarePipeline().use(Outer(), Inner())
        handler = pipeline.wrap(router.handle)

        handler(req)  ==  Outer(req, lambda r: Inner(r, router.handle))

    With nothing added, wrap(h) is h.
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Middleware registered: {middleware.name} (position {len(self._middleware)})")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """add() for several at once, in order."""
        for item in middleware:
            self.add(item)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """Build the chain inside out, so the first middleware added runs first."""
        chain = handler
        for middleware in reversed(self._middleware):
            chain = self._bind(middleware, chain)
        return chain

    @staticmethod
    def _bind(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def link(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return link

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
