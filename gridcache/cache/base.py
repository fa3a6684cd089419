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

from abc import ABC, abstractmethod
from collections import namedtuple

from gridcache.seed.iterator import TileRangeIterator


class TileKey(namedtuple('TileKey', 'layer gridset_id format parameters_id x y z')):
    """
    Address of a single stored tile.
    """
    __slots__ = ()

    @property
    def coord(self):
        return self.x, self.y, self.z

    @classmethod
    def from_range(cls, tile_range, coord):
        x, y, z = coord
        return cls(tile_range.layer_name, tile_range.gridset_id, tile_range.mime_type,
                   tile_range.parameters_id, x, y, z)


class TileStore(ABC):
    """
    Base implementation of a tile store.

    Stores only keep bytes. Which tiles exist and where they are located
    is decided by the grid subsets of the layer.
    """

    @abstractmethod
    def get(self, key: TileKey):
        """
        Return the data of the tile or ``None``.
        """
        pass

    @abstractmethod
    def put(self, key: TileKey, data: bytes):
        pass

    @abstractmethod
    def delete(self, key: TileKey):
        """
        Remove the tile. Returns ``True`` if the tile was stored.
        """
        pass

    def exists(self, key: TileKey):
        return self.get(key) is not None

    def delete_range(self, tile_range):
        """
        Remove all tiles of `tile_range`. Returns the number of removed tiles.
        """
        removed = 0
        tile_iter = TileRangeIterator(tile_range)
        for location in tile_iter:
            for coord in tile_iter.tiles(location):
                if self.delete(TileKey.from_range(tile_range, coord)):
                    removed += 1
        return removed
