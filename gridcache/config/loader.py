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
Load the GridCache configuration and create gridsets and layers.
"""

import os

from gridcache.config import Options, load_default_globals, merge_globals
from gridcache.config.validator import validate
from gridcache.grid import GridError, origin_from_string, ORIGIN_UL
from gridcache.grid.broker import GridSetBroker
from gridcache.grid.factory import create_gridset
from gridcache.grid.resolutions import level_spec_from_conf
from gridcache.grid.subset import create_grid_subset
from gridcache.layer import TileLayer
from gridcache.srs import get_srs
from gridcache.util.yaml import load_yaml_file, YAMLError

import logging
log = logging.getLogger('gridcache.config')


class ConfigurationError(Exception):
    pass


class CacheConfiguration(object):
    """
    Gridsets and layers of one cache.

    :ivar broker: `GridSetBroker` with the default and configured gridsets
    :ivar layers: dict with all `TileLayer` by name, without source and store
    :ivar globals: `Options` with the merged ``globals`` section
    """

    def __init__(self, broker, layers, globals_conf, conf_base_dir=None):
        self.broker = broker
        self.layers = layers
        self.globals = globals_conf
        self.conf_base_dir = conf_base_dir

    def build_layer(self, name, source, store):
        """
        Attach `source` and `store` to the layer `name` and return it.
        """
        try:
            layer = self.layers[name]
        except KeyError:
            raise ConfigurationError('unknown layer %s' % name)
        layer.source = source
        layer.store = store
        return layer


def load_configuration(conf_file):
    """
    Load the YAML configuration `conf_file`.

    :raises ConfigurationError: for invalid configurations, all problems
        are logged to ``gridcache.config``
    """
    conf_base_dir = os.path.abspath(os.path.dirname(conf_file))
    log.info('reading: %s', conf_file)
    try:
        conf_dict = load_yaml_file(conf_file)
    except YAMLError as ex:
        raise ConfigurationError(ex)
    except (IOError, OSError) as ex:
        raise ConfigurationError('unable to read %s: %s' % (conf_file, ex))
    return load_configuration_dict(conf_dict, conf_base_dir=conf_base_dir)


def load_configuration_dict(conf_dict, conf_base_dir=None):
    """
    Validate `conf_dict` and create a `CacheConfiguration`.
    """
    errors = validate(conf_dict)
    if errors:
        for error in errors:
            log.warning(error)
        raise ConfigurationError('invalid configuration: %s' % '; '.join(errors))

    globals_conf = merge_globals(load_default_globals(), conf_dict.get('globals'))

    gridsets_globals = globals_conf.gridsets
    broker = GridSetBroker(
        use_epsg900913=gridsets_globals.use_epsg900913,
        use_gwc11x_names=gridsets_globals.use_gwc11x_names,
        default_levels=gridsets_globals.default_levels,
    )

    for name, gridset_conf in (conf_dict.get('gridsets') or {}).items():
        gridset = gridset_from_conf(name, gridset_conf, globals_conf)
        if name in broker:
            log.info('gridset %s replaces the default gridset', name)
        broker.put(gridset)

    layers = {}
    for name, layer_conf in (conf_dict.get('layers') or {}).items():
        layers[name] = layer_from_conf(name, layer_conf, broker, globals_conf)

    return CacheConfiguration(broker, layers, globals_conf, conf_base_dir=conf_base_dir)


def gridset_from_conf(name, conf, globals_conf=None):
    if globals_conf is None:
        globals_conf = load_default_globals()
    defaults = globals_conf.gridset
    conf = Options(conf)
    try:
        levels = level_spec_from_conf(conf, default_levels=globals_conf.gridsets.default_levels)
        origin = origin_from_string(conf.get('alignment', defaults.alignment))
        return create_gridset(
            name,
            get_srs(conf['srs']),
            conf['extent'],
            levels,
            align_top_left=(origin == ORIGIN_UL),
            meters_per_unit=conf.get('meters_per_unit'),
            pixel_size=conf.get('pixel_size', defaults.pixel_size),
            tile_size=tuple(conf.get('tile_size', defaults.tile_size)),
            scale_names=conf.get('scale_names'),
            y_coordinate_first=conf.get('y_coordinate_first', False),
            description=conf.get('description'),
        )
    except (GridError, ValueError) as ex:
        raise ConfigurationError('invalid gridset %s: %s' % (name, ex))


def layer_from_conf(name, conf, broker, globals_conf=None):
    if globals_conf is None:
        globals_conf = load_default_globals()
    grid_subsets = []
    for grid_conf in conf['grids']:
        gridset = broker.get(grid_conf['gridset'])
        if gridset is None:
            raise ConfigurationError('unknown gridset %s for layer %s'
                                     % (grid_conf['gridset'], name))
        try:
            grid_subsets.append(create_grid_subset(
                gridset,
                extent=grid_conf.get('extent'),
                zoom_start=grid_conf.get('zoom_start'),
                zoom_stop=grid_conf.get('zoom_stop'),
                min_cached_level=grid_conf.get('min_cached_level'),
                max_cached_level=grid_conf.get('max_cached_level'),
            ))
        except GridError as ex:
            raise ConfigurationError('invalid grid %s for layer %s: %s'
                                     % (gridset.name, name, ex))

    meta_tiling_factors = conf.get('meta_tiling_factors',
                                   globals_conf.seed.meta_tiling_factors)
    return TileLayer(
        name,
        grid_subsets,
        mime_types=conf.get('formats', globals_conf.layer.formats),
        meta_tiling_factors=tuple(meta_tiling_factors),
        parameters=conf.get('parameters'),
    )
