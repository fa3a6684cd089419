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
Tile ranges for seeding and truncating, and the masks that limit them.
"""

import threading

import shapely.geometry
import shapely.prepared
import shapely.wkt

import logging
log = logging.getLogger(__name__)


class TileRange(object):
    """
    All tiles of one layer, gridset, format and parameter set within
    `range_bounds`.

    :param range_bounds: tile rectangles ``(minx, miny, maxx, maxy, z)``, one
        for each level (``None`` entries are skipped). Levels outside of
        `zoom_start` and `zoom_stop` are ignored.
    :param mask: optional object with a ``lookup(x, y, z)`` method. Only
        tiles where it returns ``True`` are part of the range.
    """

    def __init__(self, layer_name, gridset_id, zoom_start, zoom_stop, range_bounds,
                 mime_type, parameters=None, parameters_id=None, mask=None):
        self.layer_name = layer_name
        self.gridset_id = gridset_id
        self.zoom_start = zoom_start
        self.zoom_stop = zoom_stop
        self.mime_type = mime_type
        self.parameters = parameters or {}
        self.parameters_id = parameters_id
        self.mask = mask

        self._bounds = {}
        for rect in range_bounds:
            if rect is None:
                continue
            z = rect[4]
            if zoom_start <= z <= zoom_stop:
                self._bounds[z] = tuple(rect)

    @property
    def is_filtered(self):
        return self.mask is not None

    @property
    def levels(self):
        return sorted(self._bounds)

    def bounds(self, level):
        """
        Return the rectangle of `level`, or ``None`` if the range has no
        tiles at this level.
        """
        return self._bounds.get(level)

    def contains(self, x, y, z):
        rect = self._bounds.get(z)
        if rect is None:
            return False
        if not (rect[0] <= x <= rect[2] and rect[1] <= y <= rect[3]):
            return False
        if self.mask is not None:
            return self.mask.lookup(x, y, z)
        return True

    def tile_count(self, level=None):
        """
        Number of tiles within the rectangles, ignoring the mask.
        """
        if level is not None:
            levels = [level] if level in self._bounds else []
        else:
            levels = self._bounds
        total = 0
        for z in levels:
            minx, miny, maxx, maxy, _ = self._bounds[z]
            total += (maxx - minx + 1) * (maxy - miny + 1)
        return total

    def __repr__(self):
        return '<%s %s/%s %d-%d %s>' % (
            self.__class__.__name__, self.layer_name, self.gridset_id,
            self.zoom_start, self.zoom_stop, self.mime_type)


class DiscontinuousTileRange(TileRange):
    """
    A TileRange that always carries a mask.
    """

    def __init__(self, layer_name, gridset_id, zoom_start, zoom_stop, range_bounds,
                 mime_type, mask, parameters=None, parameters_id=None):
        if mask is None:
            raise ValueError('DiscontinuousTileRange requires a mask')
        TileRange.__init__(self, layer_name, gridset_id, zoom_start, zoom_stop,
                           range_bounds, mime_type, parameters=parameters,
                           parameters_id=parameters_id, mask=mask)


class CoverageTileMask(object):
    """
    Mask with explicit tile rectangles per level. Levels without a
    rectangle are excluded.
    """

    def __init__(self, rectangles):
        self.rectangles = {}
        for rect in rectangles:
            self.rectangles.setdefault(rect[4], []).append(tuple(rect))

    def lookup(self, x, y, z):
        for minx, miny, maxx, maxy, _ in self.rectangles.get(z, ()):
            if minx <= x <= maxx and miny <= y <= maxy:
                return True
        return False


def bbox_polygon(bbox):
    """
    Create Polygon that covers the given bbox.
    """
    return shapely.geometry.Polygon((
        (bbox[0], bbox[1]),
        (bbox[2], bbox[1]),
        (bbox[2], bbox[3]),
        (bbox[0], bbox[3]),
        ))


def load_mask_geometry(geom):
    """
    Return a shapely geometry for a geometry, a bbox or WKT.

    >>> load_mask_geometry([0, 0, 10, 5]).bounds
    (0.0, 0.0, 10.0, 5.0)
    >>> load_mask_geometry('POLYGON((0 0, 4 0, 4 4, 0 0))').geom_type
    'Polygon'
    """
    if isinstance(geom, shapely.geometry.base.BaseGeometry):
        return geom
    if isinstance(geom, (list, tuple)):
        return bbox_polygon(geom)
    return shapely.wkt.loads(geom)


class GeometryTileMask(object):
    """
    Mask that contains all tiles that intersect a geometry.

    The geometry has to be in the SRS of the grid subset.
    """

    def __init__(self, geom, grid_subset):
        self.geom = load_mask_geometry(geom)
        self.grid_subset = grid_subset
        self._prep_lock = threading.Lock()
        self._prepared_geom = None
        self._prepared_counter = 0
        self._prepared_max = 10000

    @property
    def prepared_geom(self):
        # GEOS internal data structure for prepared geometries grows over time,
        # recreate to limit memory consumption
        if not self._prepared_geom or self._prepared_counter > self._prepared_max:
            self._prepared_geom = shapely.prepared.prep(self.geom)
            self._prepared_counter = 0
        self._prepared_counter += 1
        return self._prepared_geom

    def lookup(self, x, y, z):
        tile_geom = bbox_polygon(self.grid_subset.bounds_from_index((x, y, z)))
        with self._prep_lock:
            return self.prepared_geom.intersects(tile_geom)

    def coverage_bounds(self):
        return self.geom.bounds
