"""
=============================================================================
HANDLERS MODULE
=============================================================================

Request handlers: plain functions for the fixed text routes, and a class
for file serving, which needs configuration (the served directory).

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Type              │ Used for                                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ Function handler  │ /, /hello, /user-agent, /echo/{text}, 404      │
    │                   │ def hello(request): return html("...")          │
    ├─────────────────────────────────────────────────────────────────────┤
    │ Class handler     │ /file/{name}                                    │
    │                   │ FileResponder(root).serve(name)                 │
    └─────────────────────────────────────────────────────────────────────┘

Every handler returns an HTTPResponse. None of them raises for an
expected failure; bad input becomes a 4xx, a broken file a 5xx.

=============================================================================
"""

from .files import FileResponder
from .routes import echo, hello, home, page_not_found, register_routes, user_agent

__all__ = [
    "FileResponder",
    "echo",
    "hello",
    "home",
    "page_not_found",
    "register_routes",
    "user_agent",
]
