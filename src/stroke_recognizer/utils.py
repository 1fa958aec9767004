import math

from .types import Point


def subtract(point1: Point, point2: Point) -> Point:
    return (point1[0] - point2[0], point1[1] - point2[1])


def norm2(point: Point) -> float:
    return point[0] * point[0] + point[1] * point[1]


def distance2(point1: Point, point2: Point) -> float:
    return norm2(subtract(point1, point2))


def clone(point: Point) -> Point:
    return (float(point[0]), float(point[1]))


def round_point(point: Point) -> Point:
    # halves round towards +inf; round() would round them to even
    return (float(math.floor(point[0] + 0.5)), float(math.floor(point[1] + 0.5)))
