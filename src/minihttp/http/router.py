"""
=============================================================================
URL ROUTER
=============================================================================

Maps a request path to a handler. Two kinds of route exist:

    EXACT   "/hello"   matches "/hello" and nothing else
    PREFIX  "/echo/"   matches anything starting with "/echo/"; the
                       handler gets the rest of the path as its argument

=============================================================================
MATCHING ORDER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /echo/abc                                                      │
    │        │                                                             │
    │        ▼                                                             │
    │   1. Exact table   { "/", "/hello", "/user-agent" }   no            │
    │        │                                                             │
    │        ▼                                                             │
    │   2. Prefixes, in registration order                                 │
    │        "/echo/"  ← MATCH, remainder = "abc"                         │
    │        "/file/"                                                      │
    │        │                                                             │
    │        ▼                                                             │
    │   echo(request, "abc")                                               │
    │                                                                      │
    │   (nothing matched? → default not-found handler)                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

First match wins. This is fine because the route set is small and the
prefixes do not overlap; it is not meant to be a general router.

Routes are method-agnostic: GET, POST or FOO all reach the same handler.

=============================================================================
IMMUTABILITY
=============================================================================

Routes are registered at startup, then freeze() turns the tables into a
read-only mapping and a tuple. Connection threads only ever read them, so
no locks are needed.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

from .request import HTTPRequest
from .response import HTTPResponse, not_found


# =============================================================================
# TYPE ALIASES
# =============================================================================

ExactHandler = Callable[[HTTPRequest], HTTPResponse]
PrefixHandler = Callable[[HTTPRequest, str], HTTPResponse]
Handler = Union[ExactHandler, PrefixHandler]


class RouteType(Enum):
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class Route:
    """
    A path rule bound to a handler.

        Route("/hello", RouteType.EXACT, hello)
        Route("/file/", RouteType.PREFIX, serve_file)
    """

    pattern: str
    kind: RouteType
    handler: Handler
    name: Optional[str] = None


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of a successful match.

    `argument` is the path remainder for PREFIX routes, None for EXACT.
    """

    route: Route
    argument: Optional[str] = None

    def call(self, request: HTTPRequest) -> HTTPResponse:
        if self.route.kind is RouteType.PREFIX:
            return self.route.handler(request, self.argument)
        return self.route.handler(request)


def _default_not_found(request: HTTPRequest) -> HTTPResponse:
    return not_found()


class Router:
    """
    Exact-then-prefix router with a fallback handler.

    ==========================================================================
    DECORATOR-BASED API
    ==========================================================================

        router = Router()

        @router.exact("/hello")
        def hello(request):
            return html("<html>Hello!</html>")

        @router.prefix("/echo/")
        def echo(request, text):
            return plain(text)

        router.freeze()
        response = router.dispatch(request)

    ==========================================================================
    """

    def __init__(self, fallback: ExactHandler = _default_not_found):
        self._exact: dict[str, Route] | Mapping[str, Route] = {}
        self._prefixes: list[Route] | tuple[Route, ...] = []
        self._fallback = fallback
        self._frozen = False

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        pattern: str,
        handler: Handler,
        kind: RouteType = RouteType.EXACT,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Raises:
            RuntimeError: If the router is already frozen.
            ValueError: If the pattern is already registered.
        """
        if self._frozen:
            raise RuntimeError("Router is frozen; routes are fixed at startup")

        route = Route(pattern=pattern, kind=kind, handler=handler, name=name)

        if kind is RouteType.EXACT:
            if pattern in self._exact:
                raise ValueError(f"Duplicate route: {pattern}")
            self._exact[pattern] = route
        else:
            if any(r.pattern == pattern for r in self._prefixes):
                raise ValueError(f"Duplicate prefix route: {pattern}")
            self._prefixes.append(route)

        return route

    def exact(self, pattern: str, name: Optional[str] = None):
        """Decorator: register an EXACT route."""
        def decorator(handler: ExactHandler) -> ExactHandler:
            self.add_route(pattern, handler, RouteType.EXACT, name or handler.__name__)
            return handler
        return decorator

    def prefix(self, pattern: str, name: Optional[str] = None):
        """Decorator: register a PREFIX route. The handler takes (request, remainder)."""
        def decorator(handler: PrefixHandler) -> PrefixHandler:
            self.add_route(pattern, handler, RouteType.PREFIX, name or handler.__name__)
            return handler
        return decorator

    def set_fallback(self, handler: ExactHandler) -> None:
        if self._frozen:
            raise RuntimeError("Router is frozen; routes are fixed at startup")
        self._fallback = handler

    def freeze(self) -> "Router":
        """Make the route tables read-only. Idempotent."""
        if not self._frozen:
            self._exact = MappingProxyType(dict(self._exact))
            self._prefixes = tuple(self._prefixes)
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # =========================================================================
    # MATCHING
    # =========================================================================

    def match(self, path: str) -> Optional[RouteMatch]:
        """
        Find the route for a path.

        Exact routes are checked first, then prefixes in registration
        order. Returns None when nothing matches.
        """
        route = self._exact.get(path)
        if route is not None:
            return RouteMatch(route)

        for route in self._prefixes:
            if path.startswith(route.pattern):
                return RouteMatch(route, path[len(route.pattern):])

        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Route a request and return the handler's response."""
        match = self.match(request.path)
        if match is None:
            return self._fallback(request)
        return match.call(request)

    @property
    def routes(self) -> list[Route]:
        """All routes in matching order (exact first, then prefixes)."""
        return list(self._exact.values()) + list(self._prefixes)
