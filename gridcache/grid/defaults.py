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
The well-known gridsets every broker starts with.
"""

import logging

from gridcache.grid.factory import create_gridset
from gridcache.grid.resolutions import (
    OGC_PIXEL_SIZE,
    DEFAULT_LEVELS,
    ByLevelCount,
    ByResolutions,
    ByScales,
    pyramid_res_level,
)
from gridcache.srs import EPSG3857, EPSG4326, EPSG900913
from gridcache.util.bbox import WORLD3857, WORLD4326

log = logging.getLogger(__name__)

GLOBAL_GEODETIC_NAME = 'GlobalCRS84Geometric'
GLOBAL_MERCATOR_NAME = 'GoogleMapsCompatible'

# 156543.03390625 halved 30 times
COMMON_PRACTICE_900913_RESOLUTIONS = tuple(pyramid_res_level(156543.03390625, levels=31))
# the same scale set for 512x512 tiles
COMMON_PRACTICE_900913_X2_RESOLUTIONS = tuple(r / 2 for r in COMMON_PRACTICE_900913_RESOLUTIONS)

GOOGLE_CRS84_QUAD_SCALES = (
    559082264.0287178, 279541132.0143589, 139770566.0071794, 69885283.00358972,
    34942641.50179486, 17471320.75089743, 8735660.375448715, 4367830.187724357,
    2183915.093862179, 1091957.546931089, 545978.7734655447, 272989.3867327723,
    136494.6933663862, 68247.34668319309, 34123.67334159654, 17061.83667079827,
    8530.918335399136, 4265.459167699568, 2132.729583849784,
)

GLOBAL_CRS84_SCALES = (
    500E6, 250E6, 100E6, 50E6, 25E6, 10E6, 5E6, 2.5E6, 1E6, 500E3, 250E3, 100E3,
    50E3, 25E3, 10E3, 5E3, 2.5E3, 1000, 500, 250, 100,
)


def global_crs84_pixel_resolutions():
    """
    Rounded pixel sizes in degrees, from 2 degrees down to 0.01 arc seconds.

    >>> len(global_crs84_pixel_resolutions())
    18
    """
    res = [2.0, 1.0, 0.5]
    res.append(res[2] * (2.0 / 3.0))    # 20'
    res.append(res[2] / 3.0)            # 10'
    res.append(res[4] / 2.0)            # 5'
    res.append(res[4] / 5.0)            # 2'
    res.append(res[4] / 10.0)           # 1'
    res.append((5.0 / 6.0) * 1E-2)      # 30''
    res.append(res[8] / 2.0)            # 15''
    res.append(res[9] / 3.0)            # 5''
    res.append(res[9] / 5.0)            # 3''
    res.append(res[11] / 3.0)           # 1''
    res.append(res[12] / 2.0)           # 0.5''
    res.append(res[13] * (3.0 / 5.0))   # 0.3''
    res.append(res[14] / 3.0)           # 0.1''
    res.append(res[15] * (3.0 / 10.0))  # 0.03''
    res.append(res[16] / 3.0)           # 0.01''
    return tuple(res)


def _world_names(use_epsg900913, use_gwc11x_names):
    mercator_srs = EPSG900913 if use_epsg900913 else EPSG3857
    if use_gwc11x_names:
        return str(EPSG4326), str(mercator_srs), mercator_srs
    return GLOBAL_GEODETIC_NAME, GLOBAL_MERCATOR_NAME, mercator_srs


def default_gridset_names(use_epsg900913=False, use_gwc11x_names=False):
    """
    >>> default_gridset_names(use_gwc11x_names=True)[:2]
    ['EPSG:4326', 'EPSG:3857']
    """
    geodetic_name, mercator_name, _ = _world_names(use_epsg900913, use_gwc11x_names)
    return [geodetic_name, mercator_name, 'GlobalCRS84Pixel', 'GlobalCRS84Scale',
            'GoogleCRS84Quad', geodetic_name + 'x2', mercator_name + 'x2']


def default_gridsets(use_epsg900913=False, use_gwc11x_names=False, levels=DEFAULT_LEVELS):
    """
    Create the default gridsets.

    :param use_epsg900913: use EPSG:900913 instead of EPSG:3857 for the
        mercator gridset
    :param use_gwc11x_names: name the geodetic and mercator gridsets after
        their SRS (``EPSG:4326``, ``EPSG:3857``)
    """
    geodetic_name, mercator_name, mercator_srs = _world_names(use_epsg900913, use_gwc11x_names)

    gridsets = []

    gridsets.append(create_gridset(
        geodetic_name, EPSG4326, WORLD4326, ByLevelCount(levels),
        y_coordinate_first=True,
        description='A default WGS84 tile matrix set where the first zoom level '
                    'covers the world with two tiles on the horizontal axis and one tile '
                    'over the vertical axis and each subsequent zoom level is calculated by '
                    'half the resolution of its previous one.',
    ))

    log.debug('adding %s gridset for spherical mercator', mercator_srs)
    gridsets.append(create_gridset(
        mercator_name, mercator_srs, WORLD3857,
        ByResolutions(COMMON_PRACTICE_900913_RESOLUTIONS),
        meters_per_unit=1.0,
        description='This well-known scale set has been defined to be compatible with '
                    'Google Maps and Microsoft Live Map projections and zoom levels. Level 0 '
                    'allows representing the whole world in a single 256x256 pixels.',
    ))

    gridsets.append(create_gridset(
        'GlobalCRS84Pixel', EPSG4326, WORLD4326,
        ByResolutions(global_crs84_pixel_resolutions()),
        align_top_left=True, y_coordinate_first=True, pixel_size=OGC_PIXEL_SIZE,
        description='This well-known scale set has been defined for global cartographic '
                    'products. Rounded pixel sizes have been chosen for intuitive '
                    'cartographic representation of raster data.',
    ))

    gridsets.append(create_gridset(
        'GlobalCRS84Scale', EPSG4326, WORLD4326, ByScales(GLOBAL_CRS84_SCALES),
        align_top_left=True, y_coordinate_first=True,
        description='This well-known scale set has been defined for global cartographic '
                    'products. Rounded scales have been chosen for intuitive cartographic '
                    'representation of vector data.',
    ))

    gridsets.append(create_gridset(
        'GoogleCRS84Quad', EPSG4326, WORLD4326, ByScales(GOOGLE_CRS84_QUAD_SCALES),
        align_top_left=True, y_coordinate_first=True,
        description='This well-known scale set has been defined to allow quadtree '
                    'pyramids in CRS84. Level 0 allows representing the whole world '
                    'in a single 256x256 pixels.',
    ))

    gridsets.append(create_gridset(
        geodetic_name + 'x2', EPSG4326, WORLD4326, ByLevelCount(levels),
        tile_size=(512, 512), y_coordinate_first=True,
        description='A default WGS84 tile matrix set where the first zoom level '
                    'covers the world with two tiles on the horizontal axis and one tile '
                    'over the vertical axis and each subsequent zoom level is calculated by '
                    'half the resolution of its previous one. Tiles are 512px wide.',
    ))

    gridsets.append(create_gridset(
        mercator_name + 'x2', mercator_srs, WORLD3857,
        ByResolutions(COMMON_PRACTICE_900913_X2_RESOLUTIONS),
        meters_per_unit=1.0, tile_size=(512, 512),
        description='This well-known scale set has been defined to be compatible with '
                    'Google Maps and Microsoft Live Map projections and zoom levels. Level 0 '
                    'allows representing the whole world in a single 512x512 pixels.',
    ))

    return gridsets
