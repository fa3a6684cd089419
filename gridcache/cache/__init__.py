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
Tile storage (keys, stores and the on-disk naming of tiles).

.. digraph:: Schematic Call Graph

    ranksep = 0.1;
    node [shape="box", height="0", width="0"]

    tl  [label="TileLayer" href="<gridcache.layer.TileLayer>"]
    ts  [label="TileStore",  href="<gridcache.cache.base.TileStore>"];
    s   [label="source"];

    {
        tl -> ts [label="get\\nput\\ndelete"];
        tl -> s  [label="render meta tile"]
    }

"""

from gridcache.cache.base import TileKey, TileStore
from gridcache.cache.memory import MemoryTileStore
from gridcache.cache.path import tile_path, parameters_id, format_extension

__all__ = [
    'TileKey', 'TileStore', 'MemoryTileStore',
    'tile_path', 'parameters_id', 'format_extension',
]
