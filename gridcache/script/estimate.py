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

import optparse
import sys

from gridcache.config.loader import load_configuration, ConfigurationError
from gridcache.seed.seeder import (
    TileBreeder,
    SeedEstimator,
    SeedRequest,
    SeedError,
)
from gridcache.seed.util import format_duration
from gridcache.script.grids import human_readable_number
from gridcache.util.bbox import BoundingBox


def estimate_command(args=None):
    parser = optparse.OptionParser("%prog estimate [options] -f gridcache_conf --layer name")
    parser.add_option("-f", "--gridcache-conf", dest="gridcache_conf",
        help="GridCache configuration.")
    parser.add_option("--layer", dest="layer_name",
        help="Layer to estimate.")
    parser.add_option("--gridset", dest="gridset_name",
        help="Gridset of the layer. Defaults to the first gridset of the layer.")
    parser.add_option("--bbox", dest="bbox",
        help="Limit the estimation to minx,miny,maxx,maxy in the SRS of the gridset.")
    parser.add_option("--zoom-start", dest="zoom_start", type=int,
        help="First level to estimate.")
    parser.add_option("--zoom-stop", dest="zoom_stop", type=int,
        help="Last level to estimate.")
    parser.add_option("--rate", dest="rate", type=float, default=None,
        help="Tiles per second and thread, enables the time estimation.")
    parser.add_option("-c", "--concurrency", dest="thread_count", type=int, default=None,
        help="Number of seed threads.")
    parser.add_option("--log-config", dest="log_config", default=None,
        help="Logging configuration file, see logging.config.fileConfig.")

    if args:
        args = args[1:] # remove script name

    (options, args) = parser.parse_args(args)
    from gridcache.script.util import setup_logging
    import logging
    setup_logging(logging.WARN, log_config=options.log_config)

    if not options.gridcache_conf and len(args) == 1:
        options.gridcache_conf = args[0]
    if not options.gridcache_conf or not options.layer_name:
        parser.print_help()
        sys.exit(1)

    try:
        configuration = load_configuration(options.gridcache_conf)
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        print('ERROR: invalid configuration (see above)', file=sys.stderr)
        sys.exit(2)

    layer = configuration.layers.get(options.layer_name)
    if layer is None:
        print('layer not found: %s' % (options.layer_name,), file=sys.stderr)
        sys.exit(1)

    gridset_name = options.gridset_name or next(iter(layer.grid_subsets))
    bounds = None
    if options.bbox:
        try:
            bounds = BoundingBox.from_string(options.bbox)
        except ValueError as e:
            print('ERROR: %s' % (e,), file=sys.stderr)
            sys.exit(1)

    breeder = TileBreeder(configuration.layers, settings=configuration.globals.seed)
    request = SeedRequest(layer.name, gridset_name, bounds=bounds,
                          zoom_start=options.zoom_start, zoom_stop=options.zoom_stop,
                          thread_count=options.thread_count or breeder.settings['thread_count'])
    estimator = SeedEstimator(breeder)
    try:
        levels = estimator.tiles_per_level(request)
    except SeedError as e:
        print('ERROR: %s' % (e,), file=sys.stderr)
        sys.exit(1)

    print('%s/%s:' % (layer.name, gridset_name))
    total = 0
    for level, count in levels:
        total += count
        print('    %.2d: %10s' % (level, human_readable_number(count)))
    print('    total: %s tiles' % (human_readable_number(total).strip(), ))

    if options.rate:
        _, seconds = estimator.estimate(request, options.rate)
        print('    duration: %s with %d thread(s)' % (
            format_duration(seconds), request.thread_count))
