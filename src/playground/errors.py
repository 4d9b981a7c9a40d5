"""Error taxonomy shared by the map and shape-drop pipelines.

Library exceptions (httpx, protobuf, GEOS, svgpathtools) are wrapped at the
boundary where they occur so callers only ever handle these types.
"""

from __future__ import annotations


class PlaygroundError(Exception):
    """Base class for every error raised by this package."""


class FetchError(PlaygroundError):
    """A tile could not be retrieved (network failure or non-2xx status)."""

    def __init__(self, message: str, url: str | None = None,
                 status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(PlaygroundError):
    """A payload could not be parsed as a vector tile."""


class GeometryError(PlaygroundError):
    """Invalid polygon input to a union or triangulation routine."""


class ParseError(PlaygroundError):
    """Malformed SVG document or path data."""


class InsufficientDataError(PlaygroundError):
    """A shape collapsed to fewer than three usable vertices."""

    def __init__(self, message: str, vertex_count: int = 0) -> None:
        super().__init__(message)
        self.vertex_count = vertex_count
