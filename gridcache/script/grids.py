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
import optparse
import sys

from gridcache.config.loader import load_configuration, ConfigurationError


def format_conf_value(value):
    if isinstance(value, tuple):
        # YAMl only supports lists, convert for clarity
        value = list(value)
    return repr(value)


def gridset_conf(gridset):
    """
    Return the effective configuration of `gridset` as dict.
    """
    conf = {
        'srs': str(gridset.srs),
        'extent': list(gridset.bounds),
        'alignment': 'top_left' if gridset.top_left_aligned else 'bottom_left',
        'tile_size': gridset.tile_size,
        'meters_per_unit': gridset.meters_per_unit,
        'pixel_size': gridset.pixel_size,
    }
    if gridset.y_coordinate_first:
        conf['y_coordinate_first'] = True
    if gridset.scale_warning:
        conf['scale_warning'] = True
    return conf


def display_gridset(gridset, grid_subset=None):
    print('%s:' % (gridset.name,))
    if gridset.description:
        print('    Description: %s' % (gridset.description, ))
    print('    Configuration:')
    conf_dict = gridset_conf(gridset)
    for key in sorted(conf_dict):
        print('        %s: %s' % (key, format_conf_value(conf_dict[key])))

    if grid_subset:
        print('    Levels: Resolutions, Scales, # x * y = total tiles (tiles within subset)')
        levels = range(grid_subset.zoom_start, grid_subset.zoom_stop + 1)
    else:
        print('    Levels: Resolutions, Scales, # x * y = total tiles')
        levels = range(gridset.num_levels)

    max_digits = max([len("%r" % (gridset.grid(level).resolution,)) for level in levels])
    for level in levels:
        grid = gridset.grid(level)
        res = grid.resolution
        tiles_in_x, tiles_in_y = grid.num_tiles_wide, grid.num_tiles_high
        total_tiles = tiles_in_x * tiles_in_y
        spaces = max_digits - len("%r" % (res,)) + 1

        if grid_subset:
            minx, miny, maxx, maxy, _ = grid_subset.coverage(level)
            subset_tiles = (maxx - minx + 1) * (maxy - miny + 1)
            print("        %.2d:  %r,%s%14.2f # %6d * %-6d = %10s (%s)" % (
                level, res, ' '*spaces, grid.scale_denom, tiles_in_x, tiles_in_y,
                human_readable_number(total_tiles), human_readable_number(subset_tiles)))
        else:
            print("        %.2d:  %r,%s%14.2f # %6d * %-6d = %10s" % (
                level, res, ' '*spaces, grid.scale_denom, tiles_in_x, tiles_in_y,
                human_readable_number(total_tiles)))


def human_readable_number(num):
    """
    >>> human_readable_number(2500000)
    '   2.50M'
    >>> human_readable_number(512)
    '512'
    """
    if num > 10**6:
        return '%7.2fM' % (num/10**6)
    if math.isnan(num):
        return '?'
    return '%d' % int(num)


def display_gridsets_list(gridsets):
    for name in sorted(gridsets.keys()):
        print(name)


def display_gridsets(gridsets, grid_subsets=None):
    grid_subsets = grid_subsets or {}
    for i, name in enumerate(sorted(gridsets.keys())):
        if i != 0:
            print()
        display_gridset(gridsets[name], grid_subset=grid_subsets.get(name))


def grids_command(args=None):
    parser = optparse.OptionParser("%prog grids [options] gridcache_conf")
    parser.add_option("-f", "--gridcache-conf", dest="gridcache_conf",
        help="GridCache configuration.")
    parser.add_option("-g", "--gridset", dest="gridset_name",
        help="Display only information about the specified gridset.")
    parser.add_option("--all", dest="show_all", action="store_true", default=False,
        help="Show also gridsets that are not used by any layer.")
    parser.add_option("-l", "--list", dest="list_gridsets", action="store_true", default=False,
        help="List names of configured gridsets, which are used by any layer")
    parser.add_option("--layer", dest="layer_name",
        help="Show the number of tiles within the grid subset of this layer.")
    parser.add_option("--log-config", dest="log_config", default=None,
        help="Logging configuration file, see logging.config.fileConfig.")

    if args:
        args = args[1:] # remove script name

    (options, args) = parser.parse_args(args)
    from gridcache.script.util import setup_logging
    import logging
    setup_logging(logging.WARN, log_config=options.log_config)

    if not options.gridcache_conf:
        if len(args) != 1:
            parser.print_help()
            sys.exit(1)
        else:
            options.gridcache_conf = args[0]
    try:
        configuration = load_configuration(options.gridcache_conf)
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        print('ERROR: invalid configuration (see above)', file=sys.stderr)
        sys.exit(2)

    broker = configuration.broker
    if options.show_all or options.gridset_name:
        gridsets = dict((gs.name, gs) for gs in broker.gridsets())
    else:
        gridsets = {}
        for layer in configuration.layers.values():
            for name in layer.grid_subsets:
                gridsets[name] = broker[name]

    grid_subsets = {}
    if options.layer_name:
        layer = configuration.layers.get(options.layer_name)
        if layer is None:
            print('layer not found: %s' % (options.layer_name,))
            sys.exit(1)
        grid_subsets = layer.grid_subsets
        gridsets = dict((name, broker[name]) for name in grid_subsets)

    if options.gridset_name:
        # ignore case for keys
        gridsets = dict((key.lower(), value) for (key, value) in gridsets.items())
        grid_subsets = dict((key.lower(), value) for (key, value) in grid_subsets.items())
        gridset_name = options.gridset_name.lower()
        if not gridsets.get(gridset_name, False):
            print('gridset not found: %s' % (options.gridset_name,))
            sys.exit(1)
        gridsets = {gridset_name: gridsets[gridset_name]}

    if options.list_gridsets:
        display_gridsets_list(gridsets)
    else:
        display_gridsets(gridsets, grid_subsets=grid_subsets)
