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

import copy

import pytest

from gridcache.cache import MemoryTileStore
from gridcache.config import load_default_globals
from gridcache.config.loader import (
    ConfigurationError,
    load_configuration,
    load_configuration_dict,
)
from gridcache.config.validator import validate
from gridcache.srs import get_srs

CONF = {
    'globals': {
        'seed': {'thread_count': 2},
    },
    'gridsets': {
        'utm32': {
            'srs': 'EPSG:25832',
            'extent': [0, 5000000, 1024000, 6024000],
            'resolutions': [1000, 500, 250],
            'meters_per_unit': 1,
            'alignment': 'top_left',
        },
    },
    'layers': {
        'roads': {
            'grids': [
                {'gridset': 'utm32'},
                {'gridset': 'GlobalCRS84Geometric', 'zoom_stop': 5},
            ],
            'formats': ['image/png', 'image/jpeg'],
            'meta_tiling_factors': [2, 2],
            'parameters': {'style': 'default'},
        },
        'areas': {
            'grids': [{'gridset': 'GoogleMapsCompatible', 'extent': [0, 0, 1000000, 1000000]}],
        },
    },
}


def conf_with(**sections):
    conf = copy.deepcopy(CONF)
    conf.update(sections)
    return conf


class TestLoadConfiguration(object):
    def test_gridsets(self):
        conf = load_configuration_dict(CONF)
        assert 'utm32' in conf.broker
        assert 'GoogleCRS84Quad' in conf.broker
        gridset = conf.broker['utm32']
        assert gridset.srs == get_srs(25832)
        assert gridset.num_levels == 3
        assert gridset.top_left_aligned
        assert gridset.grid(0).extent == (4, 4)
        assert gridset.grid(2).extent == (16, 16)

    def test_layers(self):
        conf = load_configuration_dict(CONF)
        assert sorted(conf.layers) == ['areas', 'roads']

        roads = conf.layers['roads']
        assert sorted(roads.grid_subsets) == ['GlobalCRS84Geometric', 'utm32']
        assert roads.grid_subset('GlobalCRS84Geometric').zoom_stop == 5
        assert roads.grid_subset('utm32').zoom_stop == 2
        assert roads.mime_types == ['image/png', 'image/jpeg']
        assert roads.meta_tiling_factors == (2, 2)
        assert roads.parameters == {'style': 'default'}

    def test_layer_defaults(self):
        conf = load_configuration_dict(CONF)
        areas = conf.layers['areas']
        assert areas.mime_types == ['image/png']
        assert areas.meta_tiling_factors == (4, 4)
        assert not areas.grid_subset('GoogleMapsCompatible').full_gridset_coverage

    def test_globals(self):
        conf = load_configuration_dict(CONF)
        assert conf.globals.seed.thread_count == 2
        assert conf.globals.seed.tile_failure_retry_count == 0
        assert conf.globals.gridset.tile_size == (256, 256)

    def test_globals_not_modified(self):
        load_configuration_dict(CONF)
        assert load_default_globals().seed.thread_count == 1

    def test_empty(self):
        conf = load_configuration_dict({})
        assert conf.layers == {}
        assert len(conf.broker) == 7

    def test_gwc11x_names(self):
        conf = load_configuration_dict({
            'globals': {'gridsets': {'use_gwc11x_names': True}},
            'layers': {'roads': {'grids': [{'gridset': 'EPSG:4326'}]}},
        })
        assert conf.layers['roads'].grid_subset('EPSG:4326') is not None

    def test_replace_default_gridset(self):
        conf = load_configuration_dict({
            'gridsets': {
                'GlobalCRS84Geometric': {'srs': 'EPSG:4326', 'extent': [-180, -90, 180, 90],
                                         'levels': 4},
            },
        })
        assert conf.broker['GlobalCRS84Geometric'].num_levels == 4

    def test_build_layer(self):
        conf = load_configuration_dict(CONF)
        store = MemoryTileStore()
        source = lambda *args: {}
        layer = conf.build_layer('roads', source, store)
        assert layer.store is store
        assert layer.source is source
        with pytest.raises(ConfigurationError):
            conf.build_layer('unknown', source, store)


class TestInvalidConfiguration(object):
    def test_unknown_gridset(self):
        conf = conf_with(layers={'roads': {'grids': [{'gridset': 'unknown'}]}})
        assert validate(conf) == ["Gridset 'unknown' for layer 'roads' not found in config"]
        with pytest.raises(ConfigurationError):
            load_configuration_dict(conf)

    def test_gridset_twice(self):
        conf = conf_with(layers={'roads': {'grids': [{'gridset': 'utm32'},
                                                     {'gridset': 'utm32'}]}})
        assert validate(conf) == ["Gridset 'utm32' configured twice for layer 'roads'"]

    def test_zoom_order(self):
        conf = conf_with(layers={'roads': {'grids': [
            {'gridset': 'utm32', 'zoom_start': 2, 'zoom_stop': 1}]}})
        assert validate(conf) == [
            "zoom_start 2 is larger than zoom_stop 1 for layer 'roads'"]

    def test_multiple_level_specs(self):
        conf = copy.deepcopy(CONF)
        conf['gridsets']['utm32']['scales'] = [100000, 50000, 25000]
        assert validate(conf) == [
            "Only one of resolutions, scales, levels allowed for gridset 'utm32', "
            "got resolutions, scales"]
        with pytest.raises(ConfigurationError):
            load_configuration_dict(conf)

    def test_scale_names(self):
        conf = copy.deepcopy(CONF)
        conf['gridsets']['utm32']['scale_names'] = ['a', 'b']
        assert validate(conf) == ["Gridset 'utm32' has 2 scale_names but 3 levels"]

    def test_invalid_extent(self):
        conf = copy.deepcopy(CONF)
        conf['gridsets']['utm32']['extent'] = [1024000, 5000000, 0, 6024000]
        assert validate(conf) == [
            "Invalid extent [1024000, 5000000, 0, 6024000] for gridset 'utm32'"]

    @pytest.mark.parametrize('layer_conf,path', [
        ({'grids': []}, 'root.layers.roads.grids'),
        ({'grids': [{'gridset': 'utm32'}], 'foo': 1}, 'root.layers.roads'),
        ({'grids': [{'gridset': 'utm32'}], 'meta_tiling_factors': [0, 2]},
         'root.layers.roads.meta_tiling_factors[0]'),
        ({'grids': [{'gridset': 'utm32', 'zoom_stop': -1}]},
         'root.layers.roads.grids[0].zoom_stop'),
    ])
    def test_schema_errors(self, layer_conf, path):
        conf = conf_with(layers={'roads': layer_conf})
        errors = validate(conf)
        assert len(errors) == 1
        assert errors[0].endswith(' in ' + path)

    def test_unknown_section(self):
        errors = validate({'services': {}})
        assert errors == [
            "Additional properties are not allowed ('services' was unexpected) in root"]

    def test_not_decreasing_resolutions(self):
        conf = copy.deepcopy(CONF)
        conf['gridsets']['utm32']['resolutions'] = [250, 500, 1000]
        assert validate(conf) == []
        with pytest.raises(ConfigurationError) as exc_info:
            load_configuration_dict(conf)
        assert 'invalid gridset utm32' in str(exc_info.value)

    def test_zoom_stop_outside_gridset(self):
        conf = conf_with(layers={'roads': {'grids': [{'gridset': 'utm32', 'zoom_stop': 5}]}})
        with pytest.raises(ConfigurationError) as exc_info:
            load_configuration_dict(conf)
        assert 'invalid grid utm32 for layer roads' in str(exc_info.value)


class TestLoadConfigurationFile(object):
    def test_load(self, tmp_path):
        conf_file = tmp_path / 'gridcache.yaml'
        conf_file.write_text(
            'layers:\n'
            '  roads:\n'
            '    grids:\n'
            '      - gridset: GlobalCRS84Geometric\n'
            '        zoom_stop: 3\n'
        )
        conf = load_configuration(str(conf_file))
        assert conf.conf_base_dir == str(tmp_path)
        assert conf.layers['roads'].grid_subset('GlobalCRS84Geometric').zoom_stop == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_configuration(str(tmp_path / 'missing.yaml'))

    def test_syntax_error(self, tmp_path):
        conf_file = tmp_path / 'gridcache.yaml'
        conf_file.write_text('layers:\n  roads: [\n')
        with pytest.raises(ConfigurationError) as exc_info:
            load_configuration(str(conf_file))
        assert str(conf_file) in str(exc_info.value)
