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

import pytest

from gridcache.cache import MemoryTileStore
from gridcache.grid.broker import GridSetBroker
from gridcache.grid.defaults import GLOBAL_GEODETIC_NAME, GLOBAL_MERCATOR_NAME
from gridcache.grid.subset import create_grid_subset


@pytest.fixture
def broker():
    return GridSetBroker()


@pytest.fixture
def geodetic(broker):
    return broker[GLOBAL_GEODETIC_NAME]


@pytest.fixture
def mercator(broker):
    return broker[GLOBAL_MERCATOR_NAME]


@pytest.fixture
def geodetic_subset(geodetic):
    return create_grid_subset(geodetic, zoom_start=0, zoom_stop=10)


@pytest.fixture
def store():
    return MemoryTileStore()
