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
Resolutions, scale denominators and the level specifications of a pyramid.
"""

import math
from collections import namedtuple

OGC_PIXEL_SIZE = 0.00028  # m/px

EPSG4326_TO_METERS = 6378137.0 * 2.0 * math.pi / 360.0
EPSG3857_TO_METERS = 1.0

DEFAULT_LEVELS = 31


def ogc_scale_to_res(scale, meters_per_unit=1.0, pixel_size=OGC_PIXEL_SIZE):
    """
    >>> round(ogc_scale_to_res(1000000), 6)
    280.0
    """
    return scale * pixel_size / meters_per_unit


def res_to_ogc_scale(res, meters_per_unit=1.0, pixel_size=OGC_PIXEL_SIZE):
    """
    >>> round(res_to_ogc_scale(156543.03390625))
    559082264
    """
    return res * meters_per_unit / pixel_size


def pyramid_res_level(initial_res, factor=2.0, levels=20):
    """
    Return resolutions of an image pyramid.

    :param initial_res: the resolution of the top level (0)
    :param factor: the factor between each level, for tms access 2
    :param levels: number of resolutions to generate

    >>> list(pyramid_res_level(10000, levels=5))
    [10000.0, 5000.0, 2500.0, 1250.0, 625.0]
    >>> [round(x, 4) for x in
    ...     pyramid_res_level(10000, factor=1/0.75, levels=5)]
    [10000.0, 7500.0, 5625.0, 4218.75, 3164.0625]
    """
    return [initial_res/factor**n for n in range(levels)]


def resolutions_from_scales(scales, meters_per_unit=1.0, pixel_size=OGC_PIXEL_SIZE):
    """
    >>> [round(r, 2) for r in resolutions_from_scales([10000, 5000])]
    [2.8, 1.4]
    """
    return [ogc_scale_to_res(s, meters_per_unit, pixel_size) for s in scales]


def is_descending(values):
    """
    >>> is_descending([4, 2, 1])
    True
    >>> is_descending([4, 4, 1])
    False
    """
    return all(a > b for a, b in zip(values, values[1:]))


# The three ways to describe the levels of a pyramid. Exactly one is
# passed to the gridset factory.

class ByResolutions(namedtuple('ByResolutions', 'resolutions')):
    """Resolutions in map units per pixel, coarsest first."""
    __slots__ = ()


class ByScales(namedtuple('ByScales', 'scale_denominators')):
    """Scale denominators, resolutions are derived with the pixel size."""
    __slots__ = ()


class ByLevelCount(namedtuple('ByLevelCount', 'levels')):
    """
    Number of levels only. Level 0 is fitted to the extent and each further
    level halves the resolution.
    """
    __slots__ = ()


def level_spec_from_conf(conf, default_levels=DEFAULT_LEVELS):
    """
    Select the level spec from a gridset configuration dict.

    >>> level_spec_from_conf({'scales': [1000, 500]})
    ByScales(scale_denominators=(1000.0, 500.0))
    >>> level_spec_from_conf({})
    ByLevelCount(levels=31)
    """
    given = [key for key in ('resolutions', 'scales', 'levels') if conf.get(key) is not None]
    if len(given) > 1:
        raise ValueError('only one of resolutions, scales or levels allowed, got %s'
                         % ', '.join(given))
    if 'resolutions' in given:
        return ByResolutions(tuple(float(r) for r in conf['resolutions']))
    if 'scales' in given:
        return ByScales(tuple(float(s) for s in conf['scales']))
    return ByLevelCount(int(conf.get('levels') or default_levels))
