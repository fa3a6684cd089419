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

import itertools
import optparse
import sys

from gridcache.grid.resolutions import (
    OGC_PIXEL_SIZE,
    EPSG4326_TO_METERS,
    ogc_scale_to_res,
    res_to_ogc_scale,
)

DEFAULT_DPIS = {
    'OGC': 0.0254 / OGC_PIXEL_SIZE,
}


def values_from_stdin():
    values = []
    for line in sys.stdin:
        line = line.split('#', 1)[0]
        if not line.strip():
            break
        values.append(float(line))
    return values


def pixel_size_from_dpi(dpi):
    """
    >>> round(pixel_size_from_dpi(DEFAULT_DPIS['OGC']), 5)
    0.00028
    """
    return 0.0254 / dpi


def scale_to_res(scale_denom, dpi, unit_factor):
    return ogc_scale_to_res(scale_denom, unit_factor, pixel_size_from_dpi(dpi))


def res_to_scale(res, dpi, unit_factor):
    return res_to_ogc_scale(res, unit_factor, pixel_size_from_dpi(dpi))


def format_simple(i, scale, res):
    return '%20.10f # %2d %20.8f' % (res, i, scale)


def format_list(i, scale, res):
    return '    %20.10f, # %2d %20.8f' % (res, i, scale)


def repeated_values(values, n):
    """
    >>> repeated_values([1000, 500, 250], 5)
    [1000.0, 500.0, 250.0, 100.0, 50.0]
    """
    current_factor = 1
    step_factor = 10
    result = []
    for i, value in enumerate(itertools.islice(itertools.cycle(values), n)):
        if i != 0 and i % len(values) == 0:
            current_factor *= step_factor
        result.append(value/current_factor)
    return result


def fill_values(values, n):
    """
    >>> fill_values([1000.0], 3)
    [1000.0, 500.0, 250.0]
    """
    return values + [values[-1]/(2**x) for x in range(1, n - len(values) + 1)]


def scales_command(args=None):
    parser = optparse.OptionParser("%prog scales [options] scale/resolution[, ...]")
    parser.add_option("-l", "--levels", default=1, type=int, metavar='1',
        help="number of resolutions/scales to calculate")
    parser.add_option("-d", "--dpi", default='OGC',
        help="DPI to convert scales (use OGC for .28mm based DPI)")
    parser.add_option("--unit", default='m', metavar='m',
        help="use resolutions in meter (m) or degrees (d)")
    parser.add_option("--repeat", default=False, action='store_true',
        help="repeat all values, each time /10. For example: 1000 500 250 results in 1000 500 250 100 50 25 10...")
    parser.add_option("--res-to-scale", default=False, action='store_true',
        help="convert resolutions to scale")
    parser.add_option("--as-res-config", default=False, action='store_true',
        help="output as resolution list for a gridset configuration")

    if args:
        args = args[1:] # remove script name
    (options, args) = parser.parse_args(args)
    options.levels = max(options.levels, len(args))

    if not args:
        parser.print_help()
        sys.exit(1)

    dpi = float(DEFAULT_DPIS.get(options.dpi, options.dpi))

    if args[0] == '-':
        values = values_from_stdin()
    else:
        values = [float(arg) for arg in args]

    if options.repeat:
        values = repeated_values(values, options.levels)

    if len(values) < options.levels:
        values = fill_values(values, options.levels)

    unit_factor = 1.0
    if options.unit == 'd':
        unit_factor = EPSG4326_TO_METERS

    calc = scale_to_res
    if options.res_to_scale:
        calc = res_to_scale

    if options.as_res_config:
        print('    resolutions: [')
        print('         #  res            level        scale')
        format = format_list
    else:
        format = format_simple

    for i, value in enumerate(values):
        print(format(i, value, calc(value, dpi, unit_factor)))

    if options.as_res_config:
        print('    ]')
