# Model/annotations.py
import json
import math
from typing import Iterable, List, Sequence, Tuple

Point = Tuple[float, float]
Polygon = Tuple[Point, ...]

# Wire format of the "polygons" form field: [[[x, y], [x, y], ...], ...] with integer pixel coordinates
PolygonPayload = List[List[List[int]]]


def round_half_up(v: float) -> int:
    # 2.5 -> 3, -2.5 -> -2 (Python's round() would give 2 / -2)
    return int(math.floor(v + 0.5))


def polygons_to_payload(polygons: Iterable[Sequence[Point]]) -> PolygonPayload:
    return [[[round_half_up(x), round_half_up(y)] for (x, y) in poly] for poly in polygons]


def serialize_polygons(polygons: Iterable[Sequence[Point]]) -> str:
    """
    Encodes the completed polygons for the /compress endpoint.
    Compact separators, so a single square reads "[[[10,10],[100,10],[100,100],[10,100]]]".
    """
    return json.dumps(polygons_to_payload(polygons), separators=(",", ":"))
