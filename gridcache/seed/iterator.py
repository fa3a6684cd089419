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
Walk a TileRange in steps of meta tiles.
"""

import threading


class TileRangeIterator(object):
    """
    Cursor over the meta tile locations of a `TileRange`.

    Locations are the lower left tile of each meta tile, aligned to
    multiples of the meta tiling factors. They are returned in raster
    order: x first, then y, then level.

    One iterator can be shared by multiple threads, each call of
    `next_meta_grid_location` hands out a location exactly once. Use
    `partition` to give each thread a disjoint part of the range instead.

    :ivar tiles_rendered: number of tiles within the returned locations
    :ivar tiles_skipped: number of tiles within locations that were
        skipped because no tile was accepted by the mask of the range
    """

    def __init__(self, tile_range, meta_tiling_factors=(1, 1), thread_offset=0,
                 thread_count=1):
        if not 0 <= thread_offset < thread_count:
            raise ValueError('thread_offset %d not in 0-%d' % (thread_offset, thread_count - 1))
        self.tile_range = tile_range
        self.meta_x, self.meta_y = meta_tiling_factors
        self.thread_offset = thread_offset
        self.thread_count = thread_count

        self.tiles_rendered = 0
        self.tiles_skipped = 0
        self.last_grid_location = None

        self._lock = threading.Lock()
        self._locations = self._walk()

    def partition(self, thread_offset, thread_count):
        """
        Return a new iterator for the meta tile columns
        ``thread_offset, thread_offset + thread_count, ...`` of each row.

        The partitions for all offsets ``0..thread_count-1`` cover the
        range without overlap.
        """
        return TileRangeIterator(self.tile_range, (self.meta_x, self.meta_y),
                                 thread_offset=thread_offset, thread_count=thread_count)

    def _walk(self):
        x_step = self.meta_x * self.thread_count
        for z in self.tile_range.levels:
            minx, miny, maxx, maxy, _ = self.tile_range.bounds(z)
            start_x = minx - minx % self.meta_x + self.thread_offset * self.meta_x
            start_y = miny - miny % self.meta_y
            for y in range(start_y, maxy + 1, self.meta_y):
                for x in range(start_x, maxx + 1, x_step):
                    yield (x, y, z)

    def _tiles(self, grid_location):
        """
        Yield all tiles of the meta tile at `grid_location` that are
        within the rectangle of the range.
        """
        x, y, z = grid_location
        minx, miny, maxx, maxy, _ = self.tile_range.bounds(z)
        for tile_y in range(max(y, miny), min(y + self.meta_y - 1, maxy) + 1):
            for tile_x in range(max(x, minx), min(x + self.meta_x - 1, maxx) + 1):
                yield tile_x, tile_y, z

    def tile_count(self, grid_location):
        x, y, z = grid_location
        minx, miny, maxx, maxy, _ = self.tile_range.bounds(z)
        width = min(x + self.meta_x - 1, maxx) - max(x, minx) + 1
        height = min(y + self.meta_y - 1, maxy) - max(y, miny) + 1
        return max(width, 0) * max(height, 0)

    def total_tile_count(self):
        """
        Number of tiles within all locations this iterator walks, ignoring
        the mask. For a partition this is only its own share of the range.
        """
        if self.thread_count == 1:
            return self.tile_range.tile_count()
        return sum(self.tile_count(loc) for loc in self._walk())

    def tiles(self, grid_location):
        """
        Return the tiles of the meta tile at `grid_location` that are part
        of the range, including the mask.
        """
        mask = self.tile_range.mask
        return [t for t in self._tiles(grid_location) if mask is None or mask.lookup(*t)]

    def _check_grid_location(self, grid_location):
        mask = self.tile_range.mask
        if mask is None:
            return True
        for tile in self._tiles(grid_location):
            if mask.lookup(*tile):
                return True
        return False

    def next_meta_grid_location(self):
        """
        Return the next meta tile location ``(x, y, z)``, or ``None`` if
        the range is exhausted.
        """
        with self._lock:
            for grid_location in self._locations:
                count = self.tile_count(grid_location)
                if not self._check_grid_location(grid_location):
                    self.tiles_skipped += count
                    continue
                self.tiles_rendered += count
                self.last_grid_location = grid_location
                return grid_location
            return None

    def __iter__(self):
        while True:
            grid_location = self.next_meta_grid_location()
            if grid_location is None:
                return
            yield grid_location
