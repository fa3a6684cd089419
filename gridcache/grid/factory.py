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
Construction of GridSets from resolutions, scales or a number of levels.
"""

import math

import logging

from gridcache.grid import Grid, GridSetConfigurationError
from gridcache.grid.gridset import GridSet
from gridcache.grid.resolutions import (
    OGC_PIXEL_SIZE,
    EPSG4326_TO_METERS,
    EPSG3857_TO_METERS,
    ByLevelCount,
    ByResolutions,
    ByScales,
    is_descending,
    pyramid_res_level,
)
from gridcache.srs import EPSG3857, EPSG4326
from gridcache.util.bbox import BoundingBox

log_system = logging.getLogger('gridcache.system')

# allowed deviation of the extent/tile ratio from a whole number
RATIO_SLACK = 0.025


def create_gridset(name, srs, extent, levels, align_top_left=False,
                   meters_per_unit=None, pixel_size=OGC_PIXEL_SIZE,
                   tile_size=(256, 256), scale_names=None,
                   y_coordinate_first=False, description=None):
    """
    Create a new `GridSet`.

    :param extent: the reference extent, as BoundingBox or tuple
    :param levels: one of `ByResolutions`, `ByScales` or `ByLevelCount`
    :param meters_per_unit: defaults to the value for EPSG:4326 and
        EPSG:3857, and to 1.0 for all other systems
    :param scale_names: optional names for each level, defaults to
        ``<name>:<level>``

    >>> gs = create_gridset('test', EPSG4326, (-180, -90, 180, 90), ByLevelCount(4))
    >>> gs.grid(0).resolution == 180 / 256
    True
    >>> gs.grid(3).extent
    (16, 8)
    """
    tile_width, tile_height = tile_size
    if tile_width <= 0 or tile_height <= 0:
        raise GridSetConfigurationError(
            'gridset %s: tile size must be positive, got %r' % (name, tuple(tile_size)))

    extent = BoundingBox(*extent)
    if not extent.is_sane() or extent.width == 0 or extent.height == 0:
        raise GridSetConfigurationError('gridset %s: invalid extent %s' % (name, extent))

    original_extent = extent
    preserved = False
    scale_denoms = None

    if isinstance(levels, ByResolutions):
        resolutions = list(levels.resolutions)
        preserved = True
    elif isinstance(levels, ByScales):
        scale_denoms = list(levels.scale_denominators)
        resolutions = None
    elif isinstance(levels, ByLevelCount):
        if levels.levels < 1:
            raise GridSetConfigurationError(
                'gridset %s: at least one level required' % (name, ))
        res0, extent = fit_first_level(extent, tile_size, align_top_left)
        resolutions = pyramid_res_level(res0, levels=levels.levels)
    else:
        raise TypeError('levels must be ByResolutions, ByScales or ByLevelCount, got %r'
                        % (levels, ))

    num_levels = len(resolutions if resolutions is not None else scale_denoms)
    if num_levels == 0:
        raise GridSetConfigurationError('gridset %s: no levels configured' % (name, ))
    if scale_names is not None and len(scale_names) != num_levels:
        raise GridSetConfigurationError(
            'gridset %s: got %d scale names for %d levels' % (name, len(scale_names), num_levels))

    scale_warning = False
    if meters_per_unit is None:
        if srs == EPSG4326:
            meters_per_unit = EPSG4326_TO_METERS
        elif srs == EPSG3857:
            meters_per_unit = EPSG3857_TO_METERS
        else:
            if resolutions is None:
                log_system.warning('gridset %s was defined without meters_per_unit, '
                                   'assuming 1m/unit. All scales will be off if this '
                                   'is incorrect.', name)
            else:
                log_system.warning('gridset %s was defined without meters_per_unit, '
                                   'assuming 1m/unit for WMTS scale output.', name)
                scale_warning = True
            meters_per_unit = 1.0

    if scale_denoms is not None:
        resolutions = [pixel_size * (s / meters_per_unit) for s in scale_denoms]
    else:
        scale_denoms = [(r * meters_per_unit) / OGC_PIXEL_SIZE for r in resolutions]

    if any(r <= 0 for r in resolutions) or not is_descending(resolutions):
        raise GridSetConfigurationError(
            'gridset %s: resolutions must be positive and strictly decreasing: %r'
            % (name, resolutions))

    grids = []
    for level, (res, scale_denom) in enumerate(zip(resolutions, scale_denoms)):
        tiles_wide, tiles_high = matrix_size(extent, res, tile_size)
        if scale_names is None or scale_names[level] is None:
            level_name = '%s:%d' % (name, level)
        else:
            level_name = scale_names[level]
        grids.append(Grid(res, scale_denom, tiles_wide, tiles_high, level_name))

    extent = _matrix_extent(extent, grids[0], tile_size, align_top_left)

    return GridSet(
        name, srs, grids, extent,
        tile_size=(tile_width, tile_height),
        top_left_aligned=align_top_left,
        preserved=preserved,
        meters_per_unit=meters_per_unit,
        pixel_size=pixel_size,
        y_coordinate_first=y_coordinate_first,
        scale_warning=scale_warning,
        description=description,
        original_extent=original_extent,
    )


def matrix_size(extent, res, tile_size):
    """
    Number of tiles needed to cover `extent` at `res`. One percent of a
    tile is ignored to compensate rounding errors.

    >>> matrix_size(BoundingBox(0, 0, 100, 45), 2.5, (10, 20))
    (4, 1)
    >>> matrix_size(BoundingBox(0, 0, 100.1, 45), 2.5, (10, 20))
    (4, 1)
    >>> matrix_size(BoundingBox(0, 0, 101, 45), 2.5, (10, 20))
    (5, 1)
    """
    map_unit_width = tile_size[0] * res
    map_unit_height = tile_size[1] * res
    tiles_wide = int(math.ceil((extent.width - map_unit_width * 0.01) / map_unit_width))
    tiles_high = int(math.ceil((extent.height - map_unit_height * 0.01) / map_unit_height))
    return max(tiles_wide, 1), max(tiles_high, 1)


def _matrix_extent(extent, grid, tile_size, align_top_left):
    """
    Area of the complete tile matrix of `grid`, anchored at the
    alignment corner of `extent`.
    """
    width = grid.num_tiles_wide * tile_size[0] * grid.resolution
    height = grid.num_tiles_high * tile_size[1] * grid.resolution
    if align_top_left:
        return BoundingBox(extent.min_x, extent.max_y - height,
                           extent.min_x + width, extent.max_y)
    return BoundingBox(extent.min_x, extent.min_y,
                       extent.min_x + width, extent.min_y + height)


def fit_first_level(extent, tile_size, align_top_left=False):
    """
    Find the resolution of level 0 for a pyramid with a given number of
    levels. Level 0 gets a tile matrix with a whole number of tiles in x
    for one row of tiles. The extent is enlarged if the ratio of the
    extent does not match that shape.

    Returns the resolution and the (possibly enlarged) extent.

    >>> fit_first_level(BoundingBox(0, 0, 100, 45), (10, 20))
    (2.5, BoundingBox(min_x=0.0, min_y=0.0, max_x=100.0, max_y=50.0))
    >>> fit_first_level(BoundingBox(-180, -90, 180, 90), (256, 256))[0] == 180 / 256
    True
    """
    tile_width, tile_height = tile_size
    rel_width = extent.width / tile_width
    rel_height = extent.height / tile_height

    ratio = rel_width / rel_height
    rounded_ratio = max(round(ratio), 1)
    ratio_diff = ratio - rounded_ratio

    if abs(ratio_diff) < RATIO_SLACK:
        return rel_width / rounded_ratio, extent

    if ratio < rounded_ratio:
        # widen the extent
        rel_width = rounded_ratio * rel_height
        extent = BoundingBox(extent.min_x, extent.min_y,
                             extent.min_x + rel_width * tile_width, extent.max_y)
    else:
        # heighten the extent, away from the anchor corner
        rel_height = rel_width / rounded_ratio
        if align_top_left:
            extent = BoundingBox(extent.min_x, extent.max_y - rel_height * tile_height,
                                 extent.max_x, extent.max_y)
        else:
            extent = BoundingBox(extent.min_x, extent.min_y,
                                 extent.max_x, extent.min_y + rel_height * tile_height)

    return (extent.width / rounded_ratio) / tile_width, extent
