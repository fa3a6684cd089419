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

import math

from gridcache.grid import (
    ResolutionMismatchError,
    GridAlignmentMismatchError,
)
from gridcache.grid.resolutions import OGC_PIXEL_SIZE
from gridcache.util.bbox import BoundingBox

# fraction of a tile that closest_rectangle tolerates at tile borders
_BORDER_DELTA = 1e-9


class GridSet(object):
    """
    A named tile pyramid: an ordered sequence of `Grid` levels over
    one SRS and extent.

    Tile indices always count rows from the bottom of the matrix. The
    alignment only selects the corner that anchors the coordinates: the
    bottom-left or the top-left corner of the extent. Matrices that do not
    fit the extent exactly grow away from that corner.

    GridSets are created by `gridcache.grid.factory.create_gridset` and are
    not modified afterwards.

    :ivar extent: the reference extent, possibly enlarged to full tiles of
        the first level
    :ivar original_extent: the extent as configured
    :ivar preserved: ``True`` if the resolutions were configured directly
    """

    def __init__(self, name, srs, grids, extent, tile_size=(256, 256),
                 top_left_aligned=False, preserved=False, meters_per_unit=1.0,
                 pixel_size=OGC_PIXEL_SIZE, y_coordinate_first=False,
                 scale_warning=False, description=None, original_extent=None):
        self.name = name
        self.srs = srs
        self.grids = tuple(grids)
        self.extent = BoundingBox(*extent)
        self.original_extent = BoundingBox(*(original_extent or extent))
        self.tile_width, self.tile_height = tile_size
        self.top_left_aligned = top_left_aligned
        self.preserved = preserved
        self.meters_per_unit = meters_per_unit
        self.pixel_size = pixel_size
        self.y_coordinate_first = y_coordinate_first
        self.scale_warning = scale_warning
        self.description = description

        if top_left_aligned:
            self.base_coords = (self.extent.min_x, self.extent.max_y)
        else:
            self.base_coords = (self.extent.min_x, self.extent.min_y)

    @property
    def tile_size(self):
        return (self.tile_width, self.tile_height)

    @property
    def num_levels(self):
        return len(self.grids)

    @property
    def resolutions(self):
        return [g.resolution for g in self.grids]

    @property
    def dots_per_inch(self):
        return 0.0254 / self.pixel_size

    def grid(self, level):
        return self.grids[level]

    def grid_names(self):
        return [g.name for g in self.grids]

    @property
    def bounds(self):
        """
        The area covered by the complete matrix of the first level.
        """
        grid = self.grids[0]
        return self.bounds_from_rectangle(
            (0, 0, grid.num_tiles_wide - 1, grid.num_tiles_high - 1, 0))

    def _tile_span(self, grid):
        return grid.resolution * self.tile_width, grid.resolution * self.tile_height

    def bounds_from_index(self, tile_index):
        """
        Return the BoundingBox of the tile at ``(x, y, z)``.
        """
        x, y, z = tile_index
        grid = self.grids[z]
        width, height = self._tile_span(grid)

        if self.top_left_aligned:
            y = y - grid.num_tiles_high

        return BoundingBox(
            self.base_coords[0] + width * x,
            self.base_coords[1] + height * y,
            self.base_coords[0] + width * (x + 1),
            self.base_coords[1] + height * (y + 1),
        )

    def bounds_from_rectangle(self, rectangle):
        """
        Return the BoundingBox of all tiles in ``(minx, miny, maxx, maxy, z)``.
        """
        minx, miny, maxx, maxy, z = rectangle[:5]
        grid = self.grids[z]
        width, height = self._tile_span(grid)

        if self.top_left_aligned:
            miny = miny - grid.num_tiles_high
            maxy = maxy - grid.num_tiles_high

        return BoundingBox(
            self.base_coords[0] + width * minx,
            self.base_coords[1] + height * miny,
            self.base_coords[0] + width * (maxx + 1),
            self.base_coords[1] + height * (maxy + 1),
        )

    def closest_index(self, bbox):
        """
        Return the ``(x, y, z)`` index of the tile that matches `bbox`.

        The level is selected by the width of the bbox. Raises
        `ResolutionMismatchError` if no level is within 10% and
        `GridAlignmentMismatchError` if the bbox is not on the tile grid.
        """
        w_res = (bbox[2] - bbox[0]) / self.tile_width

        best_error = float('inf')
        best_level = -1
        best_res = -1.0

        for level, grid in enumerate(self.grids):
            error = abs(w_res - grid.resolution)
            # equal errors continue to the finer level
            if error <= best_error:
                best_error = error
                best_res = grid.resolution
                best_level = level
            else:
                break

        if abs(w_res - best_res) > 0.1 * w_res:
            raise ResolutionMismatchError(w_res, best_res)

        return self.closest_index_at_level(best_level, bbox)

    def closest_index_at_level(self, level, bbox):
        grid = self.grids[level]
        width, height = self._tile_span(grid)

        x = (bbox[0] - self.base_coords[0]) / width
        y = (bbox[1] - self.base_coords[1]) / height

        pos_x = int(round(x))
        pos_y = int(round(y))

        if abs(x - pos_x) > 0.1 or abs(y - pos_y) > 0.1:
            raise GridAlignmentMismatchError(x, pos_x, y, pos_y)

        if self.top_left_aligned:
            pos_y = pos_y + grid.num_tiles_high

        return (pos_x, pos_y, level)

    def closest_rectangle(self, bbox):
        """
        Return the tile rectangle ``(minx, miny, maxx, maxy, z)`` of `bbox` at
        the level where the bbox is closest to a whole number of tiles.
        """
        rect_width = bbox[2] - bbox[0]
        rect_height = bbox[3] - bbox[1]

        best_error = float('inf')
        best_level = -1

        for level, grid in enumerate(self.grids):
            width, height = self._tile_span(grid)
            count_x = rect_width / width
            count_y = rect_height / height

            error = abs(count_x - round(count_x)) + abs(count_y - round(count_y))

            if error < best_error:
                best_error = error
                best_level = level
            else:
                break

        return self.closest_rectangle_at_level(best_level, bbox)

    def closest_rectangle_at_level(self, level, bbox):
        """
        Return the rectangle of all tiles at `level` that touch the
        interior of `bbox`. The result is not limited to the matrix.
        """
        grid = self.grids[level]
        width, height = self._tile_span(grid)

        minx = int(math.floor((bbox[0] - self.base_coords[0]) / width + _BORDER_DELTA))
        miny = int(math.floor((bbox[1] - self.base_coords[1]) / height + _BORDER_DELTA))
        maxx = int(math.ceil((bbox[2] - self.base_coords[0]) / width - _BORDER_DELTA))
        maxy = int(math.ceil((bbox[3] - self.base_coords[1]) / height - _BORDER_DELTA))

        if self.top_left_aligned:
            miny = miny + grid.num_tiles_high
            maxy = maxy + grid.num_tiles_high

        return (minx, miny, maxx - 1, maxy - 1, level)

    def ordered_top_left_corner(self, level):
        """
        Return the top left corner of the matrix at `level` in the axis
        order of the SRS, as used in WMTS capabilities.
        """
        if self.top_left_aligned:
            left, top = self.base_coords
        else:
            grid = self.grids[level]
            left = self.base_coords[0]
            top = self.base_coords[1] + self.tile_height * grid.resolution * grid.num_tiles_high
            # round off within 0.5% of an integer value
            if abs(top - round(top)) < abs(top) / 200:
                top = float(round(top))

        if self.y_coordinate_first:
            return (top, left)
        return (left, top)

    def guess_map_units(self):
        """
        >>> GridSet('g', None, [], (0, 0, 1, 1), meters_per_unit=1.0).guess_map_units()
        'meters'
        """
        mpu = self.meters_per_unit
        if 113000 > mpu > 110000:
            return 'degrees'
        elif 1100 > mpu > 900:
            return 'kilometers'
        elif 1.1 > mpu > 0.9:
            return 'meters'
        elif 0.4 > mpu > 0.28:
            return 'feet'
        elif 0.03 > mpu > 0.02:
            return 'inches'
        elif 0.02 > mpu > 0.005:
            return 'centimeters'
        elif 0.002 > mpu > 0.0005:
            return 'millimeters'
        return 'unknown'

    def __eq__(self, other):
        if not isinstance(other, GridSet):
            return NotImplemented
        if self is other:
            return True
        return (
            self.srs == other.srs and
            self.name == other.name and
            self.tile_size == other.tile_size and
            self.grids == other.grids and
            self.top_left_aligned == other.top_left_aligned
        )

    def __ne__(self, other):
        equal_result = self.__eq__(other)
        if equal_result is NotImplemented:
            return NotImplemented
        return not equal_result

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return '%s(%r, %s, %r, levels=%d)' % (
            self.__class__.__name__, self.name, self.srs, tuple(self.extent), len(self.grids))
