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

import threading

from gridcache.cache.base import TileStore


class MemoryTileStore(TileStore):
    """
    Keeps all tiles in a dict. For tests and dry runs.
    """

    def __init__(self):
        self._tiles = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            return self._tiles.get(key)

    def put(self, key, data):
        with self._lock:
            self._tiles[key] = data

    def delete(self, key):
        with self._lock:
            return self._tiles.pop(key, None) is not None

    def keys(self):
        with self._lock:
            return list(self._tiles)

    def __len__(self):
        with self._lock:
            return len(self._tiles)
