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
Spatial reference system identifiers and transformation of coordinates.
"""

import math
import threading

import logging

from pyproj import CRS, Transformer

from gridcache.util.bbox import calculate_bbox

log_proj = logging.getLogger('gridcache.proj')


def get_epsg_num(epsg_code):
    """
    >>> get_epsg_num('ePsG:4326')
    4326
    >>> get_epsg_num(4313)
    4313
    >>> get_epsg_num('31466')
    31466
    >>> get_epsg_num('IGNF:ETRS89UTM28') is None
    True
    """
    if isinstance(epsg_code, str):
        if ':' in epsg_code and epsg_code.upper().startswith('EPSG'):
            epsg_code = int(epsg_code.split(':')[1])
        elif epsg_code.isdigit():
            epsg_code = int(epsg_code)
        else:
            return
    return epsg_code


# codes that historically identified the same system, first one is canonical
WEBMERCATOR_EPSG = (3857, 900913, 102113, 102100)
_ALIAS_GROUPS = {}
for _code in WEBMERCATOR_EPSG:
    _ALIAS_GROUPS[_code] = WEBMERCATOR_EPSG[0]

# union-find over all declared aliases, number -> parent number
_alias_parents = {}
_alias_lock = threading.Lock()


def alias_root(number):
    """
    Return the smallest number of all codes declared as aliases of `number`,
    directly or through other aliases.

    >>> alias_root(102100)
    3857
    """
    parent = _alias_parents.get(number, number)
    while parent != number:
        number = parent
        parent = _alias_parents.get(number, number)
    return number


def declare_aliases(number, aliases):
    """
    Record that `number` and all `aliases` identify the same system.

    Declarations are permanent and apply to all `SRS` with these numbers.
    Declare aliases before SRS objects are used as dict keys or in sets,
    joining two groups changes the hash of their members.
    """
    with _alias_lock:
        for alias in aliases:
            root_a = alias_root(number)
            root_b = alias_root(alias)
            if root_a != root_b:
                _alias_parents[max(root_a, root_b)] = min(root_a, root_b)


declare_aliases(WEBMERCATOR_EPSG[0], WEBMERCATOR_EPSG[1:])


class SRS(object):
    """
    A spatial reference system, identified by its EPSG number.

    Two systems are equal if their numbers are connected by declared
    aliases, see `declare_aliases`. A declaration on one side is enough
    and aliases of aliases are equal too:

    >>> SRS(3857, aliases=[900913]) == SRS(900913)
    True
    >>> SRS(900913) == SRS(3857, aliases=[900913])
    True
    >>> SRS(3308) == SRS(3308)
    True
    >>> SRS(3308) == SRS(4326)
    False
    """

    def __init__(self, number, aliases=()):
        self.number = int(number)
        self.aliases = frozenset(int(a) for a in aliases if int(a) != self.number)
        if self.aliases:
            declare_aliases(self.number, self.aliases)
        self._proj = None
        self._transformers = {}

    @property
    def codes(self):
        return self.aliases | frozenset([self.number])

    @property
    def canonical(self):
        """
        The number identifying the alias group this system belongs to.

        >>> SRS(102100).canonical
        3857
        >>> SRS(31467).canonical
        31467
        """
        for code in sorted(self.codes):
            if code in _ALIAS_GROUPS:
                return _ALIAS_GROUPS[code]
        return self.number

    def __eq__(self, other):
        if not isinstance(other, SRS):
            return NotImplemented
        if self.number == other.number:
            return True
        return alias_root(self.number) == alias_root(other.number)

    def __ne__(self, other):
        equal_result = self.__eq__(other)
        if equal_result is NotImplemented:
            return NotImplemented
        return not equal_result

    def __hash__(self):
        return hash(alias_root(self.number))

    def __lt__(self, other):
        return self.number < other.number

    def __str__(self):
        return 'EPSG:%d' % self.number

    def __repr__(self):
        """
        >>> repr(SRS(4326))
        "SRS('EPSG:4326')"
        """
        return "SRS('EPSG:%d')" % self.number

    @property
    def proj(self):
        if self._proj is None:
            self._proj = CRS.from_epsg(self.canonical)
        return self._proj

    @property
    def is_latlong(self):
        """
        >>> get_srs(4326).is_latlong
        True
        >>> get_srs(900913).is_latlong
        False
        """
        return self.proj.is_geographic

    def _transformer(self, other_srs):
        if other_srs.number in self._transformers:
            return self._transformers[other_srs.number]

        t = Transformer.from_crs(self.proj, other_srs.proj, always_xy=True)
        self._transformers[other_srs.number] = t
        return t

    def transform_to(self, other_srs, points):
        """
        :type points: ``(x, y)`` or ``[(x1, y1), (x2, y2), ...]``

        >>> srs1 = get_srs(4326)
        >>> srs2 = get_srs(900913)
        >>> [str(round(x, 5)) for x in srs1.transform_to(srs2, (8.22, 53.15))]
        ['915046.21432', '7010792.20171']
        >>> srs1.transform_to(srs1, (8.25, 53.5))
        (8.25, 53.5)
        """
        if self == other_srs:
            return points

        transformer = self._transformer(other_srs)
        if isinstance(points[0], (int, float)) and len(points) == 2:
            return transformer.transform(*points)

        x = [p[0] for p in points]
        y = [p[1] for p in points]
        transf_pts = transformer.transform(x, y)
        return zip(transf_pts[0], transf_pts[1])

    def transform_bbox_to(self, other_srs, bbox, with_points=16):
        """
        :param with_points: the number of points to use for the transformation.
            A bbox transformation with only two or four points may cut off some
            parts due to distortions.

        >>> ['%.5f' % x for x in
        ...  get_srs(4326).transform_bbox_to(get_srs(3857), (8.2, 53.1, 8.3, 53.2))]
        ['912819.82450', '7001516.67745', '923951.77358', '7020078.53264']
        >>> get_srs(4326).transform_bbox_to(get_srs(4326), (8.25, 53.0, 8.5, 53.75))
        (8.25, 53.0, 8.5, 53.75)
        """
        if self == other_srs:
            return bbox
        points = generate_envelope_points(bbox, with_points)
        transf_pts = list(self.transform_to(other_srs, points))
        result = calculate_bbox(transf_pts)

        log_proj.debug('transformed from %r to %r (%s -> %s)',
                       self, other_srs, bbox, result)

        # web mercator is only defined within 85.06 N/S, clamp to the
        # square world extent instead of returning inf
        if self.canonical == 4326 and other_srs.canonical == 3857:
            minx, miny, maxx, maxy = result
            if bbox[0] <= -180.0:
                minx = -20037508.342789244
            if bbox[1] <= -85.06:
                miny = -20037508.342789244
            if bbox[2] >= 180.0:
                maxx = 20037508.342789244
            if bbox[3] >= 85.06:
                maxy = 20037508.342789244
            result = (minx, miny, maxx, maxy)
        return result


EPSG4326 = SRS(4326)
EPSG3857 = SRS(3857, aliases=(900913, 102113, 102100))
EPSG900913 = SRS(900913, aliases=(3857, 102113, 102100))

_known_srs = {
    4326: EPSG4326,
    3857: EPSG3857,
    900913: EPSG900913,
    102113: EPSG3857,
    102100: EPSG3857,
}

_thread_local = threading.local()


def get_srs(srs_code):
    """
    Return the SRS for `srs_code`. Known codes resolve to the canonical
    instances.

    >>> get_srs('EPSG:4326') is EPSG4326
    True
    >>> get_srs('CRS:84') is EPSG4326
    True
    >>> get_srs(102100) is EPSG3857
    True
    >>> get_srs('31467')
    SRS('EPSG:31467')
    """
    if isinstance(srs_code, SRS):
        return srs_code
    if isinstance(srs_code, str) and srs_code.upper() == 'CRS:84':
        return EPSG4326

    number = get_epsg_num(srs_code)
    if number is None:
        raise ValueError('unsupported srs code: %r' % (srs_code, ))
    if number in _known_srs:
        return _known_srs[number]

    if not hasattr(_thread_local, 'srs_cache'):
        _thread_local.srs_cache = {}

    if number not in _thread_local.srs_cache:
        _thread_local.srs_cache[number] = SRS(number)
    return _thread_local.srs_cache[number]


def generate_envelope_points(bbox, n):
    """
    Generates points that form a linestring around a given bbox.

    @param bbox: bbox to generate linestring for
    @param n: the number of points to generate around the bbox

    >>> generate_envelope_points((10.0, 5.0, 20.0, 15.0), 4)
    [(10.0, 5.0), (20.0, 5.0), (20.0, 15.0), (10.0, 15.0)]
    >>> generate_envelope_points((10.0, 5.0, 20.0, 15.0), 8)
    ... #doctest: +NORMALIZE_WHITESPACE
    [(10.0, 5.0), (15.0, 5.0), (20.0, 5.0), (20.0, 10.0),\
     (20.0, 15.0), (15.0, 15.0), (10.0, 15.0), (10.0, 10.0)]
    """
    (minx, miny, maxx, maxy) = bbox
    if n <= 4:
        n = 0
    else:
        n = int(math.ceil((n - 4) / 4.0))

    width = maxx - minx
    height = maxy - miny

    minx, maxx = min(minx, maxx), max(minx, maxx)
    miny, maxy = min(miny, maxy), max(miny, maxy)

    n += 1
    xstep = width / n
    ystep = height / n
    result = []
    for i in range(n+1):
        result.append((minx + i*xstep, miny))
    for i in range(1, n):
        result.append((maxx, miny + i*ystep))
    for i in range(n, -1, -1):
        result.append((minx + i*xstep, maxy))
    for i in range(n-1, 0, -1):
        result.append((minx, miny + i*ystep))
    return result
