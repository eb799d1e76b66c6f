"""Turn a user's artifact reference into full Maven coordinates."""

from mpm.resolver.coordinate import Coordinate, PartialCoordinate, parse_coordinate
from mpm.resolver.resolve import Resolution, resolve_coordinate
from mpm.resolver.selector import Selection, select_candidate

__all__ = [
    "Coordinate",
    "PartialCoordinate",
    "Resolution",
    "Selection",
    "parse_coordinate",
    "resolve_coordinate",
    "select_candidate",
]
