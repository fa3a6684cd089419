# This file is part of the GridCache project.
# Copyright (C) 2026 GridCache contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Axis-aligned bounding boxes.
"""

import math
from collections import namedtuple

EQUALITY_THRESHOLD = 0.03


class TransformationError(Exception):
    pass


def calculate_bbox(points):
    """
    Calculates the bbox of a list of points.

    >>> calculate_bbox([(-5, 20), (3, 8), (99, 0)])
    (-5, 0, 99, 20)

    @param points: list of points [(x0, y0), (x1, y2), ...]
    @returns: bbox of the input points.
    """
    points = list(points)
    # points can be INF for invalid transformations, filter out
    try:
        minx = min(p[0] for p in points if p[0] != float('inf'))
        miny = min(p[1] for p in points if p[1] != float('inf'))
        maxx = max(p[0] for p in points if p[0] != float('inf'))
        maxy = max(p[1] for p in points if p[1] != float('inf'))
        return (minx, miny, maxx, maxy)
    except ValueError:  # min/max are called with empty list when everything is inf
        raise TransformationError()


def format_coord(value):
    """
    Format a coordinate as plain decimal with at least one and at most
    16 fraction digits. Never uses exponent notation.

    >>> format_coord(-180)
    '-180.0'
    >>> format_coord(20037508.34)
    '20037508.34'
    >>> format_coord(1e-05)
    '0.00001'
    >>> format_coord(1e16)
    '10000000000000000.0'
    """
    value = float(value)
    text = repr(value)
    if 'e' in text or len(text.partition('.')[2]) > 16:
        text = ('%.16f' % value).rstrip('0')
        if text.endswith('.'):
            text += '0'
    return text


class BoundingBox(namedtuple('BoundingBox', 'min_x min_y max_x max_y')):
    """
    Immutable rectangle in map units.

    Operations return new boxes. Comparison uses a small absolute threshold
    (``EQUALITY_THRESHOLD``), so boxes are not hashable.

    >>> bbox = BoundingBox(-180, -90, 180, 90)
    >>> str(bbox)
    '-180.0,-90.0,180.0,90.0'
    >>> bbox.width, bbox.height
    (360.0, 180.0)
    >>> bbox == BoundingBox(-180.01, -90, 180.01, 90)
    True
    """
    __slots__ = ()

    def __new__(cls, min_x, min_y, max_x, max_y):
        return super(BoundingBox, cls).__new__(
            cls, float(min_x), float(min_y), float(max_x), float(max_y))

    @classmethod
    def from_string(cls, value):
        """
        >>> BoundingBox.from_string('0.0,1.5,10,20')
        BoundingBox(min_x=0.0, min_y=1.5, max_x=10.0, max_y=20.0)
        """
        coords = bbox_tuple(value)
        if len(coords) != 4:
            raise ValueError('bbox requires four coordinates, got %r' % (value, ))
        return cls(*coords)

    @classmethod
    def null(cls):
        """
        Return the empty box, the result of non overlapping intersections.
        """
        return cls(0, 0, -1, -1)

    @property
    def width(self):
        return self.max_x - self.min_x

    @property
    def height(self):
        return self.max_y - self.min_y

    @property
    def coords(self):
        """
        >>> BoundingBox(0, 1, 2, 3).coords
        (0.0, 1.0, 2.0, 3.0)
        """
        return tuple(self)

    @property
    def center(self):
        return (self.min_x + self.width / 2, self.min_y + self.height / 2)

    def is_sane(self):
        """
        >>> BoundingBox(0, 0, 0, 0).is_sane()
        True
        >>> BoundingBox.null().is_sane()
        False
        >>> BoundingBox(0, float('nan'), 1, 1).is_sane()
        False
        """
        if any(math.isnan(c) for c in self):
            return False
        return self.min_x <= self.max_x and self.min_y <= self.max_y

    def is_null(self):
        """
        >>> BoundingBox.null().is_null()
        True
        >>> BoundingBox(0, 0, 0, 0).is_null()
        False
        """
        return self.min_x > self.max_x or self.min_y > self.max_y

    def scale(self, x_factor, y_factor=None):
        """
        Scale the box about its own center.

        >>> BoundingBox(0, 0, 10, 20).scale(2)
        BoundingBox(min_x=-5.0, min_y=-10.0, max_x=15.0, max_y=30.0)
        >>> BoundingBox(0, 0, 10, 20).scale(1.0, 0.5)
        BoundingBox(min_x=0.0, min_y=5.0, max_x=10.0, max_y=15.0)
        """
        if y_factor is None:
            y_factor = x_factor
        x_diff = (self.width * x_factor - self.width) / 2
        y_diff = (self.height * y_factor - self.height) / 2
        return BoundingBox(
            self.min_x - x_diff, self.min_y - y_diff,
            self.max_x + x_diff, self.max_y + y_diff,
        )

    def intersects(self, other):
        """
        Touching boxes intersect, null boxes never do.

        >>> BoundingBox(0, 0, 10, 10).intersects(BoundingBox(10, 0, 20, 10))
        True
        >>> BoundingBox(0, 0, 10, 10).intersects(BoundingBox(11, 0, 20, 10))
        False
        """
        if self.is_null() or other.is_null():
            return False
        return not (
            other.min_x > self.max_x or other.max_x < self.min_x or
            other.min_y > self.max_y or other.max_y < self.min_y
        )

    def intersection(self, other):
        return intersection(self, other)

    def contains(self, other, threshold=EQUALITY_THRESHOLD):
        """
        >>> BoundingBox(0, 0, 10, 10).contains(BoundingBox(2, 2, 10.01, 4))
        True
        >>> BoundingBox(0, 0, 10, 10).contains(BoundingBox(2, 2, 11, 4))
        False
        """
        return (
            self.min_x - threshold <= other[0] and
            self.min_y - threshold <= other[1] and
            self.max_x + threshold >= other[2] and
            self.max_y + threshold >= other[3]
        )

    def equals(self, other, threshold=EQUALITY_THRESHOLD):
        other_width = other[2] - other[0]
        other_height = other[3] - other[1]
        return (
            abs(self.min_x - other[0]) < threshold and
            abs(self.min_y - other[1]) < threshold and
            abs(self.width - other_width) < threshold and
            abs(self.height - other_height) < threshold
        )

    def __eq__(self, other):
        if not isinstance(other, tuple) or len(other) != 4:
            return NotImplemented
        return self.equals(other)

    def __ne__(self, other):
        equal_result = self.__eq__(other)
        if equal_result is NotImplemented:
            return NotImplemented
        return not equal_result

    __hash__ = None

    def __str__(self):
        return ','.join(format_coord(c) for c in self)

    def to_kml_lat_lon_box(self):
        """
        >>> BoundingBox(-90, 0, 0, 90).to_kml_lat_lon_box()
        '<LatLonBox><north>90.0</north><south>0.0</south><east>0.0</east><west>-90.0</west></LatLonBox>'
        """
        return '<LatLonBox>%s</LatLonBox>' % self._kml_edges()

    def to_kml_lat_lon_alt_box(self):
        return '<LatLonAltBox>%s</LatLonAltBox>' % self._kml_edges()

    def _kml_edges(self):
        return '<north>%r</north><south>%r</south><east>%r</east><west>%r</west>' % (
            self.max_y, self.min_y, self.max_x, self.min_x)


def intersection(bbox_a, bbox_b):
    """
    Return the overlapping part of both boxes, or the null box.

    >>> intersection(BoundingBox(0, 0, 10, 10), BoundingBox(5, -5, 15, 5))
    BoundingBox(min_x=5.0, min_y=0.0, max_x=10.0, max_y=5.0)
    >>> intersection(BoundingBox(0, 0, 10, 10), BoundingBox(20, 20, 30, 30)).is_null()
    True
    """
    if not bbox_a.intersects(bbox_b):
        return BoundingBox.null()
    return BoundingBox(
        max(bbox_a.min_x, bbox_b.min_x),
        max(bbox_a.min_y, bbox_b.min_y),
        min(bbox_a.max_x, bbox_b.max_x),
        min(bbox_a.max_y, bbox_b.max_y),
    )


WORLD4326 = BoundingBox(-180.0, -90.0, 180.0, 90.0)
WORLD3857 = BoundingBox(-20037508.34, -20037508.34, 20037508.34, 20037508.34)


def bbox_tuple(bbox):
    """
    >>> bbox_tuple('20,-30,40,-10')
    (20.0, -30.0, 40.0, -10.0)
    >>> bbox_tuple([20,-30,40,-10])
    (20.0, -30.0, 40.0, -10.0)

    """
    if isinstance(bbox, str):
        bbox = bbox.split(',')
    bbox = tuple(map(float, bbox))
    return bbox

