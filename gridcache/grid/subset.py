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
GridSubsets: a GridSet limited to an extent and a range of levels.
"""

from gridcache.grid import (
    GridError,
    GridSetConfigurationError,
    OutsideCoverageError,
    TileDimensionsMismatchError,
)
from gridcache.util.bbox import BoundingBox

NO_TILE = (-1, -1, -1)


def create_grid_subset(gridset, extent=None, zoom_start=None, zoom_stop=None,
                       min_cached_level=None, max_cached_level=None):
    """
    Create a `GridSubset` of `gridset`.

    :param extent: limit the subset to this bbox, the full gridset if ``None``
    :param zoom_start: first level of the subset, defaults to 0
    :param zoom_stop: last level of the subset, defaults to the last level
        of the gridset
    """
    num_levels = gridset.num_levels
    if zoom_start is None:
        zoom_start = 0
    if zoom_stop is None:
        zoom_stop = num_levels - 1

    if not 0 <= zoom_start < num_levels or not 0 <= zoom_stop < num_levels:
        raise GridSetConfigurationError(
            'zoom levels %d-%d outside of gridset %s with %d levels'
            % (zoom_start, zoom_stop, gridset.name, num_levels))
    if zoom_start > zoom_stop:
        raise GridSetConfigurationError(
            'zoom_start %d is larger than zoom_stop %d' % (zoom_start, zoom_stop))

    for cached_level in (min_cached_level, max_cached_level):
        if cached_level is not None and not zoom_start <= cached_level <= zoom_stop:
            raise GridSetConfigurationError(
                'cached level %d outside of zoom levels %d-%d'
                % (cached_level, zoom_start, zoom_stop))

    full_gridset_coverage = False
    if extent is None:
        extent = gridset.extent
        full_gridset_coverage = True
    else:
        extent = BoundingBox(*extent)
        if not extent.is_sane():
            raise GridSetConfigurationError('invalid subset extent %s' % (extent, ))
        if extent.contains(gridset.extent, threshold=0):
            full_gridset_coverage = True

    coverages = []
    for level in range(zoom_start, zoom_stop + 1):
        grid = gridset.grid(level)
        rect = gridset.closest_rectangle_at_level(level, extent)
        coverage = (
            max(rect[0], 0),
            max(rect[1], 0),
            min(rect[2], grid.num_tiles_wide - 1),
            min(rect[3], grid.num_tiles_high - 1),
            level,
        )
        if coverage[0] > coverage[2] or coverage[1] > coverage[3]:
            raise GridSetConfigurationError(
                'subset extent %s does not intersect gridset %s' % (extent, gridset.name))
        coverages.append(coverage)

    return GridSubset(gridset, coverages, extent=extent,
                      full_gridset_coverage=full_gridset_coverage,
                      min_cached_level=min_cached_level,
                      max_cached_level=max_cached_level)


def _rect_intersection(rect, other):
    """
    >>> _rect_intersection((0, 0, 4, 4, 2), (2, 3, 8, 8, 2))
    (2, 3, 4, 4, 2)
    >>> _rect_intersection((0, 0, 4, 4, 2), (5, 0, 8, 8, 2)) is None
    True
    """
    result = (
        max(rect[0], other[0]),
        max(rect[1], other[1]),
        min(rect[2], other[2]),
        min(rect[3], other[3]),
        rect[4],
    )
    if result[0] > result[2] or result[1] > result[3]:
        return None
    return result


class GridSubset(object):
    """
    A GridSet limited to an extent and a range of levels.

    All levels are absolute levels of the gridset. Coverages are tile
    rectangles ``(minx, miny, maxx, maxy, z)`` with inclusive bounds.
    """

    def __init__(self, gridset, coverages, extent=None, full_gridset_coverage=False,
                 min_cached_level=None, max_cached_level=None):
        self.gridset = gridset
        self._coverages = tuple(tuple(c) for c in coverages)
        self.zoom_start = self._coverages[0][4]
        self.zoom_stop = self._coverages[-1][4]
        self._extent = extent
        self.full_gridset_coverage = full_gridset_coverage
        self.min_cached_level = min_cached_level
        self.max_cached_level = max_cached_level
        self._level_names = dict(
            (gridset.grid(z).name, z) for z in range(self.zoom_start, self.zoom_stop + 1))

    @property
    def name(self):
        return self.gridset.name

    @property
    def srs(self):
        return self.gridset.srs

    @property
    def tile_width(self):
        return self.gridset.tile_width

    @property
    def tile_height(self):
        return self.gridset.tile_height

    @property
    def scale_warning(self):
        return self.gridset.scale_warning

    @property
    def dots_per_inch(self):
        return self.gridset.dots_per_inch

    @property
    def original_extent(self):
        if self._extent is None:
            return self.gridset.original_extent
        return self._extent

    @property
    def resolutions(self):
        return self.gridset.resolutions[:self.zoom_stop + 1]

    def num_tiles_wide(self, level):
        return self.gridset.grid(level).num_tiles_wide

    def num_tiles_high(self, level):
        return self.gridset.grid(level).num_tiles_high

    def bounds_from_index(self, tile_index):
        return self.gridset.bounds_from_index(tile_index)

    def bounds_from_rectangle(self, rectangle):
        return self.gridset.bounds_from_rectangle(rectangle)

    def closest_index(self, bbox):
        return self.gridset.closest_index(bbox)

    def closest_rectangle(self, bbox):
        return self.gridset.closest_rectangle(bbox)

    def _has_level(self, level):
        return self.zoom_start <= level <= self.zoom_stop

    def covers(self, tile_index):
        x, y, z = tile_index
        if not self._has_level(z):
            return False
        coverage = self.coverage(z)
        return coverage[0] <= x <= coverage[2] and coverage[1] <= y <= coverage[3]

    def check_coverage(self, tile_index):
        """
        Raise `OutsideCoverageError` if `tile_index` is not covered.
        """
        if self.covers(tile_index):
            return
        z = tile_index[2]
        if not self._has_level(z):
            raise OutsideCoverageError(tile_index, zoom_range=(self.zoom_start, self.zoom_stop))
        raise OutsideCoverageError(tile_index, coverage=self.coverage(z))

    def check_tile_dimensions(self, width, height):
        if (width, height) != self.gridset.tile_size:
            raise TileDimensionsMismatchError((width, height), self.gridset.tile_size)

    def should_cache_at_zoom(self, level):
        if self.min_cached_level is not None and level < self.min_cached_level:
            return False
        if self.max_cached_level is not None and level > self.max_cached_level:
            return False
        return True

    def coverage(self, level):
        """
        Return the coverage rectangle of the absolute `level`.
        """
        if not self._has_level(level):
            raise OutsideCoverageError((0, 0, level), zoom_range=(self.zoom_start, self.zoom_stop))
        return self._coverages[level - self.zoom_start]

    def coverages(self):
        return list(self._coverages)

    def coverage_bounds(self, level):
        return self.gridset.bounds_from_rectangle(self.coverage(level))

    def coverage_best_fit(self):
        """
        Return the coverage of the deepest level that consists of a single
        tile, or the coverage of the first level if there is none.
        """
        for coverage in reversed(self._coverages[1:]):
            if coverage[0] == coverage[2] and coverage[1] == coverage[3]:
                return coverage
        return self._coverages[0]

    def coverage_best_fit_bounds(self):
        return self.bounds_from_rectangle(self.coverage_best_fit())

    def coverage_intersection(self, rectangle):
        """
        Intersect the tile `rectangle` with the coverage of its level.
        Returns ``None`` if they do not overlap.
        """
        return _rect_intersection(self.coverage(rectangle[4]), rectangle)

    def coverage_intersection_at_level(self, level, bbox):
        rectangle = self.gridset.closest_rectangle_at_level(level, bbox)
        return _rect_intersection(self.coverage(level), rectangle)

    def coverage_intersections(self, bbox):
        """
        Return the intersection of `bbox` with the coverage for each level.
        Levels without intersection are ``None``.
        """
        return [
            self.coverage_intersection_at_level(level, bbox)
            for level in range(self.zoom_start, self.zoom_stop + 1)
        ]

    def expand_to_meta_factors(self, coverages, meta_factors):
        """
        Align the coverage rectangles to full meta tiles, limited to the
        tile matrix of each level.
        """
        meta_x, meta_y = meta_factors
        result = []
        for cov in coverages:
            if cov is None:
                result.append(None)
                continue
            minx, miny, maxx, maxy, z = cov
            grid = self.gridset.grid(z)
            minx = minx - minx % meta_x
            miny = miny - miny % meta_y
            maxx = min(maxx - maxx % meta_x + meta_x - 1, grid.num_tiles_wide - 1)
            maxy = min(maxy - maxy % meta_y + meta_y - 1, grid.num_tiles_high - 1)
            result.append((minx, miny, maxx, maxy, z))
        return result

    def wmts_coverages(self):
        """
        Return the coverages with y counted from the top of the matrix,
        as ``(minx, miny, maxx, maxy)`` per level.
        """
        result = []
        for minx, miny, maxx, maxy, z in self._coverages:
            num_high = self.gridset.grid(z).num_tiles_high
            result.append((minx, num_high - 1 - maxy, maxx, num_high - 1 - miny))
        return result

    def grid_names(self):
        return [self.gridset.grid(z).name for z in range(self.zoom_start, self.zoom_stop + 1)]

    def grid_index(self, name):
        """
        Return the level of the grid `name`, or ``None``.
        """
        return self._level_names.get(name)

    def find_level_for_resolution(self, x_res, y_res=None):
        """
        Return the first level that is at least as fine as the requested
        resolution. Levels up to 0.5% coarser still match. Requests finer
        than the last level return the last level.
        """
        if y_res is not None:
            x_res = min(x_res, y_res)
        comp_res = x_res * 1.005
        for level in range(self.zoom_start, self.zoom_stop + 1):
            if self.gridset.grid(level).resolution < comp_res:
                return level
        return self.zoom_stop

    def sub_grid(self, tile_index):
        """
        Return the four tiles of the next level that cover `tile_index`.

        Tiles outside of the subset are ``(-1, -1, -1)``.
        """
        x, y, z = tile_index
        result = [NO_TILE] * 4
        if z + 1 > self.zoom_stop:
            return result

        res = self.gridset.grid(z).resolution
        next_res = self.gridset.grid(z + 1).resolution
        if abs(res / 2 - next_res) > next_res * 0.025:
            raise GridError('the resolution is not decreasing by a factor of two for %s'
                            % self.name)

        coverage = self.coverage(z + 1)
        for i, (x_off, y_off) in enumerate(((0, 0), (1, 0), (0, 1), (1, 1))):
            sub_x = x * 2 + x_off
            sub_y = y * 2 + y_off
            if coverage[0] <= sub_x <= coverage[2] and coverage[1] <= sub_y <= coverage[3]:
                result[i] = (sub_x, sub_y, z + 1)
        return result

    def __repr__(self):
        return '%s(%r, %d-%d)' % (
            self.__class__.__name__, self.name, self.zoom_start, self.zoom_stop)
