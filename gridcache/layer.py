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
Tile layers that create tiles from a source and keep them in a store.
"""

from gridcache.cache import TileKey, parameters_id

import logging
log = logging.getLogger(__name__)


class LayerError(Exception):
    pass


class SourceError(Exception):
    pass


class TileLayer(object):
    """
    A cached layer.

    :param grid_subsets: list of `GridSubset` or dict gridset name -> subset,
        `grid_subsets` keeps their order
    :param mime_types: supported tile formats
    :param meta_tiling_factors: number of tiles ``(x, y)`` that are
        rendered with one source request
    :param source: callable ``(layer, grid_subset, meta_location, meta_size)``
        that returns a dict with the data of each tile ``(x, y, z)`` of the
        meta tile
    :param store: `TileStore` for the tiles
    """

    def __init__(self, name, grid_subsets, mime_types=('image/png', ),
                 meta_tiling_factors=(4, 4), source=None, store=None, parameters=None):
        self.name = name
        if isinstance(grid_subsets, dict):
            self.grid_subsets = dict(grid_subsets)
        else:
            self.grid_subsets = dict((s.name, s) for s in grid_subsets)
        self.mime_types = list(mime_types)
        self.meta_tiling_factors = tuple(meta_tiling_factors)
        self.source = source
        self.store = store
        self.parameters = parameters or {}

    def grid_subset(self, gridset_id):
        """
        Return the subset for `gridset_id`, or ``None``.
        """
        return self.grid_subsets.get(gridset_id)

    def supports_mime_type(self, mime_type):
        return mime_type in self.mime_types

    def meta_tiles(self, meta_location, tile_range):
        """
        Return all tiles of the meta tile at `meta_location` that are within
        the `tile_range` and the coverage of the grid subset.
        """
        grid_subset = self.grid_subset(tile_range.gridset_id)
        x0, y0, z = meta_location
        meta_x, meta_y = self.meta_tiling_factors
        tiles = []
        for y in range(y0, y0 + meta_y):
            for x in range(x0, x0 + meta_x):
                if not grid_subset.covers((x, y, z)):
                    continue
                if tile_range.contains(x, y, z):
                    tiles.append((x, y, z))
        return tiles

    def _check(self, tile_range):
        if self.store is None:
            raise LayerError('layer %s has no tile store' % self.name)
        if self.grid_subset(tile_range.gridset_id) is None:
            raise LayerError('layer %s has no grid subset %s' % (self.name, tile_range.gridset_id))

    def _key(self, tile_range, coord):
        key = TileKey.from_range(tile_range, coord)
        if key.parameters_id is None and tile_range.parameters:
            key = key._replace(parameters_id=parameters_id(tile_range.parameters))
        return key

    def seed_tile(self, meta_location, tile_range, try_cache=True):
        """
        Create all tiles of one meta tile and store them.

        :param try_cache: skip the source if all tiles are already stored
        :returns: number of stored tiles
        """
        self._check(tile_range)
        if self.source is None:
            raise LayerError('layer %s has no source' % self.name)

        tiles = self.meta_tiles(meta_location, tile_range)
        if not tiles:
            return 0
        keys = [self._key(tile_range, coord) for coord in tiles]
        if try_cache and all(self.store.exists(key) for key in keys):
            log.debug('skipping cached meta tile %s of %s', meta_location, self.name)
            return 0

        grid_subset = self.grid_subset(tile_range.gridset_id)
        result = self.source(self, grid_subset, meta_location, self.meta_tiling_factors)
        stored = 0
        for key in keys:
            data = result.get(key.coord)
            if data is None:
                raise SourceError('source returned no data for tile %s of %s'
                                  % (key.coord, self.name))
            self.store.put(key, data)
            stored += 1
        return stored

    def truncate_tile(self, meta_location, tile_range):
        """
        Remove all tiles of one meta tile.

        :returns: number of removed tiles
        """
        self._check(tile_range)
        removed = 0
        for coord in self.meta_tiles(meta_location, tile_range):
            if self.store.delete(self._key(tile_range, coord)):
                removed += 1
        return removed

    def __repr__(self):
        return '%s(%r, %r)' % (self.__class__.__name__, self.name, sorted(self.grid_subsets))
