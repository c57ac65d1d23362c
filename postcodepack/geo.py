# -*- coding: utf-8 -*-
# Copyright (c) 2016 Civic Knowledge. This file is licensed under the terms of the
# MIT License, included in this distribution as LICENSE.txt

"""

Coordinate quantization and great circle distances. Points are (longitude, latitude)
pairs, in degrees.

"""

from collections import namedtuple
from math import asin, cos, radians, sin, sqrt
from numbers import Real

from .base import QUANTIZE_STEPS

EARTH_RADIUS_KM = 6371.0

Ranked = namedtuple('Ranked', 'item distance')


class BoundingBox(namedtuple('BoundingBox', 'min_lon max_lon min_lat max_lat')):
    """The envelope of every point in a pack. Stored coordinates are 16 bit fractions
    of its width and height"""

    __slots__ = ()

    @classmethod
    def from_points(cls, points):
        lons, lats = zip(*points)
        return cls(min(lons), max(lons), min(lats), max(lats))

    def dequantize(self, lat, lon):
        """Convert a quantized (lat, lon) to a real (lon, lat) point"""
        real_lat = self.min_lat + (self.max_lat - self.min_lat) * (lat / float(QUANTIZE_STEPS))
        real_lon = self.min_lon + (self.max_lon - self.min_lon) * (lon / float(QUANTIZE_STEPS))
        return real_lon, real_lat

    def quantize(self, lon, lat):
        """Convert a real point to a quantized (lat, lon), as stored in the file"""

        def q(v, lo, hi):
            if hi <= lo:
                return 0
            return min(QUANTIZE_STEPS, max(0, int(round((v - lo) / (hi - lo) * QUANTIZE_STEPS))))

        return q(lat, self.min_lat, self.max_lat), q(lon, self.min_lon, self.max_lon)

    @property
    def step(self):
        """Size of one quantization step, as (lon, lat) degrees"""
        return ((self.max_lon - self.min_lon) / QUANTIZE_STEPS,
                (self.max_lat - self.min_lat) / QUANTIZE_STEPS)


def distance_between(point_a, point_b):
    """Haversine distance between two (lon, lat) points, in kilometres"""
    lon1, lat1 = point_a
    lon2, lat2 = point_b

    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2

    return 2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, a)))


def is_point(point):
    try:
        return len(point) == 2 and all(isinstance(v, Real) and not isinstance(v, bool) for v in point)
    except TypeError:
        return False


def sort_by_distance(items, point, coords_of):
    """Return a new list of Ranked(item, distance), nearest to point first. Items at
    equal distances keep their input order."""

    if not is_point(point):
        raise ValueError('point should be a pair of numbers: (lon, lat)')

    ranked = [Ranked(item, distance_between(point, coords_of(item))) for item in items]

    return sorted(ranked, key=lambda r: r.distance)
