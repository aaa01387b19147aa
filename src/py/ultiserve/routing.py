from typing import (
    Callable,
    Optional,
    Any,
    Pattern,
    NamedTuple,
    ClassVar,
)
from inspect import iscoroutine

from .decorators import Extra
from .http.model import HTTPRequest, HTTPRequestError, HTTPResponse
from .utils.logging import LogLevel, debug, logged

import re


async def awaited(value: Any) -> Any:
    return (await value) if iscoroutine(value) else value


# -----------------------------------------------------------------------------
#
# ROUTE
#
# -----------------------------------------------------------------------------
#
# A route like `/files/{path:any}` is split into literal chunks and
# parameter chunks, and compiled to one regular expression that must match
# the whole request path.


class RoutePattern(NamedTuple):
    """What a parameter matches, and how the matched text is converted."""

    expr: str
    extractor: Callable[[str], Any]


class TextChunk(NamedTuple):
    text: str


class ParameterChunk(NamedTuple):
    name: str
    pattern: RoutePattern


TChunk = TextChunk | ParameterChunk


class Route:
    """A path template where parameters are written `{name}` (the name is
    then the pattern) or `{name:pattern}`."""

    RE_PARAMETER: ClassVar[Pattern[str]] = re.compile(
        r"\{(?P<name>[A-Za-z_]\w*)(:(?P<pattern>[^}]+))?\}"
    )

    PATTERNS: ClassVar[dict[str, RoutePattern]] = {
        "id": RoutePattern(r"[a-zA-Z0-9\-_]+", str),
        "name": RoutePattern(r"\w[\-\w]*", str),
        "segment": RoutePattern(r"[^/]+", str),
        "int": RoutePattern(r"\-?\d+", int),
        "any": RoutePattern(r".*", str),
        "rest": RoutePattern(r".+", str),
    }

    @classmethod
    def Parse(cls, template: str) -> list[TChunk]:
        chunks: list[TChunk] = []
        end: int = 0
        for m in cls.RE_PARAMETER.finditer(template):
            if m.start() > end:
                chunks.append(TextChunk(template[end : m.start()]))
            name: str = m.group("name")
            kind: str = (m.group("pattern") or name).lower()
            pattern = cls.PATTERNS.get(kind)
            if pattern is None:
                raise ValueError(
                    f"Unknown route pattern '{kind}' in '{template}', expected one of: {', '.join(sorted(cls.PATTERNS))}"
                )
            chunks.append(ParameterChunk(name, pattern))
            end = m.end()
        if end < len(template):
            chunks.append(TextChunk(template[end:]))
        return chunks

    def __init__(self, text: str, handler: Optional["Handler"] = None):
        self.text: str = text
        self.handler: Handler | None = handler
        self.chunks: list[TChunk] = self.Parse(text)
        self.params: dict[str, RoutePattern] = {
            _.name: _.pattern for _ in self.chunks if isinstance(_, ParameterChunk)
        }
        self.regexp: Pattern[str] = re.compile(self.toRegExp())

    @property
    def priority(self) -> int:
        return self.handler.priority if self.handler else 0

    def toRegExp(self) -> str:
        return "".join(
            re.escape(_.text)
            if isinstance(_, TextChunk)
            else f"(?P<{_.name}>{_.pattern.expr})"
            for _ in self.chunks
        )

    def match(self, path: str) -> dict[str, Any] | None:
        """Returns the converted parameters when the route matches the
        whole path, `None` otherwise."""
        m = self.regexp.fullmatch(path)
        if m is None:
            return None
        return {k: p.extractor(m.group(k)) for k, p in self.params.items()}

    def __repr__(self) -> str:
        return f"(Route {self.text!r})"


# -----------------------------------------------------------------------------
#
# HANDLER
#
# -----------------------------------------------------------------------------


class Handler:
    """Wraps a function annotated with `@on`, with the paths it is
    registered for, by HTTP method."""

    @classmethod
    def Get(cls, value: Any) -> Optional["Handler"]:
        """Returns a handler for the value when it was annotated with `@on`"""
        if callable(value) and hasattr(value, Extra.ON):
            return Handler(
                value,
                getattr(value, Extra.ON),
                getattr(value, Extra.ON_PRIORITY, 0),
            )
        return None

    def __init__(
        self,
        functor: Callable[..., Any],
        methods: list[tuple[str, str]],
        priority: int = 0,
    ):
        self.functor = functor
        self.priority = priority
        self.methods: dict[str, list[str]] = {}
        for method, path in methods:
            self.methods.setdefault(method, []).append(path)

    async def __call__(
        self, request: HTTPRequest, params: dict[str, Any]
    ) -> HTTPResponse:
        try:
            return await awaited(self.functor(request, **params))
        except HTTPRequestError as e:
            return request.error(e.status, e.message)

    def __repr__(self) -> str:
        return f"(Handler {self.functor.__name__} {self.methods})"


# -----------------------------------------------------------------------------
#
# DISPATCHER
#
# -----------------------------------------------------------------------------


class Dispatcher:
    """Holds the routes by HTTP method and finds the one to use for a
    request."""

    def __init__(self) -> None:
        self.routes: dict[str, list[Route]] = {}

    def register(self, handler: Handler, prefix: str | None = None) -> "Dispatcher":
        for method, paths in handler.methods.items():
            for path in paths:
                path = f"{prefix or ''}{path}"
                if not path.startswith("/"):
                    path = f"/{path}"
                logged(LogLevel.Debug) and debug(
                    "Registered route", Method=method, Path=path
                )
                self.routes.setdefault(method, []).append(Route(path, handler))
        return self

    def match(
        self, method: str, path: str
    ) -> tuple[Route | None, dict[str, Any] | None]:
        """Returns the matching route with the highest priority, the first
        registered one winning among equals, along with its parameters."""
        best: tuple[Route | None, dict[str, Any] | None] = (None, None)
        for route in self.routes.get(method, ()):
            current = best[0]
            if current is not None and route.priority <= current.priority:
                continue
            params = route.match(path)
            if params is not None:
                best = (route, params)
        return best

    def allowed(self, path: str) -> list[str]:
        """Lists the methods that have a route for the path."""
        return [
            method
            for method, routes in self.routes.items()
            if any(_.match(path) is not None for _ in routes)
        ]


# EOF
