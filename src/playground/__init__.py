"""tile-playground - vector-tile building union and SVG shape-drop physics.

Two independent pipelines share this package:

  tiles    grid -> fetch -> decode -> merge (union + rewind)
  physics  SVG paths -> scaled, simplified outlines -> rigid bodies

Geometry primitives live in ``playground.geo`` and output stages in
``playground.render``.
"""

from playground.errors import (
    DecodeError,
    FetchError,
    GeometryError,
    InsufficientDataError,
    ParseError,
    PlaygroundError,
)

__all__ = [
    "PlaygroundError",
    "FetchError",
    "DecodeError",
    "GeometryError",
    "ParseError",
    "InsufficientDataError",
]
