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

from gridcache.cache import TileKey, parameters_id
from gridcache.grid.subset import create_grid_subset
from gridcache.layer import TileLayer, LayerError, SourceError
from gridcache.seed.range import TileRange


def tile_source(layer, grid_subset, meta_location, meta_size):
    x0, y0, z = meta_location
    return dict(
        ((x, y, z), b'%d/%d/%d' % (z, x, y))
        for y in range(y0, y0 + meta_size[1])
        for x in range(x0, x0 + meta_size[0])
    )


@pytest.fixture
def layer(geodetic, store):
    subset = create_grid_subset(geodetic, zoom_stop=2)
    return TileLayer('test', [subset], meta_tiling_factors=(2, 2), source=tile_source,
                     store=store)


@pytest.fixture
def full_range(layer):
    subset = layer.grid_subset('GlobalCRS84Geometric')
    return TileRange('test', subset.name, 0, 2, subset.coverages(), 'image/png')


class TestTileLayer(object):
    def test_grid_subsets(self, layer, geodetic):
        assert layer.grid_subset('GlobalCRS84Geometric').gridset is geodetic
        assert layer.grid_subset('GoogleMapsCompatible') is None

        by_name = TileLayer('test', {'foo': layer.grid_subset('GlobalCRS84Geometric')})
        assert by_name.grid_subset('foo') is not None

    def test_supports_mime_type(self, layer):
        assert layer.supports_mime_type('image/png')
        assert not layer.supports_mime_type('image/jpeg')

    def test_meta_tiles(self, layer, full_range):
        assert layer.meta_tiles((0, 0, 1), full_range) == [
            (0, 0, 1), (1, 0, 1), (0, 1, 1), (1, 1, 1)]
        # level 0 has only one row
        assert layer.meta_tiles((0, 0, 0), full_range) == [(0, 0, 0), (1, 0, 0)]

    def test_meta_tiles_limited_to_range(self, layer):
        tr = TileRange('test', 'GlobalCRS84Geometric', 1, 1, [(1, 1, 2, 1, 1)], 'image/png')
        assert layer.meta_tiles((0, 0, 1), tr) == [(1, 1, 1)]

    def test_seed_tile(self, layer, full_range, store):
        assert layer.seed_tile((2, 0, 1), full_range) == 4
        assert len(store) == 4
        key = TileKey('test', 'GlobalCRS84Geometric', 'image/png', None, 3, 1, 1)
        assert store.get(key) == b'1/3/1'

    def test_seed_tile_cached(self, layer, full_range):
        calls = []

        def source(*args):
            calls.append(args[2])
            return tile_source(*args)

        layer.source = source
        layer.seed_tile((0, 0, 1), full_range)
        assert layer.seed_tile((0, 0, 1), full_range) == 0
        assert layer.seed_tile((0, 0, 1), full_range, try_cache=False) == 4
        assert calls == [(0, 0, 1), (0, 0, 1)]

    def test_seed_tile_parameters(self, layer, store):
        params = {'style': 'population'}
        tr = TileRange('test', 'GlobalCRS84Geometric', 0, 0, [(0, 0, 1, 0, 0)], 'image/png',
                       parameters=params)
        layer.seed_tile((0, 0, 0), tr)
        assert set(k.parameters_id for k in store.keys()) == set([parameters_id(params)])

    def test_missing_tile_data(self, layer, full_range):
        layer.source = lambda *args: {}
        with pytest.raises(SourceError):
            layer.seed_tile((0, 0, 1), full_range)

    def test_missing_store_and_source(self, layer, full_range):
        layer.source = None
        with pytest.raises(LayerError):
            layer.seed_tile((0, 0, 1), full_range)
        layer.store = None
        with pytest.raises(LayerError):
            layer.truncate_tile((0, 0, 1), full_range)

    def test_unknown_gridset(self, layer):
        tr = TileRange('test', 'GoogleMapsCompatible', 0, 0, [(0, 0, 0, 0, 0)], 'image/png')
        with pytest.raises(LayerError):
            layer.seed_tile((0, 0, 0), tr)

    def test_truncate_tile(self, layer, full_range, store):
        layer.seed_tile((0, 0, 1), full_range)
        layer.seed_tile((2, 0, 1), full_range)
        assert layer.truncate_tile((0, 0, 1), full_range) == 4
        assert layer.truncate_tile((0, 0, 1), full_range) == 0
        assert len(store) == 4
