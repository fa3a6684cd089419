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
Tile pyramids: levels, errors and origin handling.
"""


class GridError(Exception):
    pass


class GridSetConfigurationError(GridError):
    pass


class OutsideCoverageError(GridError):
    """
    Index or bbox outside of the configured zoom levels or extent.

    Carries the offending `level` and either the valid `zoom_range`
    or the `coverage` rectangle of that level.
    """
    def __init__(self, index, zoom_range=None, coverage=None):
        self.index = tuple(index)
        self.level = index[-1]
        self.zoom_range = zoom_range
        self.coverage = coverage
        if coverage is not None:
            msg = 'coverage for level %d is %r, requested %r' % (
                self.level, tuple(coverage[:4]), self.index)
        else:
            msg = 'level %d is outside of zoom range %d-%d' % (
                self.level, zoom_range[0], zoom_range[1])
        GridError.__init__(self, msg)


class GridMismatchError(GridError):
    pass


class ResolutionMismatchError(GridMismatchError):
    def __init__(self, requested, best):
        self.requested = requested
        self.best = best
        GridMismatchError.__init__(
            self, 'requested resolution %r does not match any level, closest is %r' % (
                requested, best))


class GridAlignmentMismatchError(GridMismatchError):
    def __init__(self, x, pos_x, y, pos_y):
        self.position = (x, y)
        self.closest = (pos_x, pos_y)
        GridMismatchError.__init__(
            self, 'bbox is not aligned to the grid, got %r, closest tile is %r' % (
                (x, y), (pos_x, pos_y)))


class TileDimensionsMismatchError(GridError):
    def __init__(self, size, expected):
        self.size = size
        self.expected = expected
        GridError.__init__(self, 'tile size %dx%d does not match %dx%d' % (size + expected))


ORIGIN_UL = 'ul'
ORIGIN_LL = 'll'


def origin_from_string(origin):
    """
    >>> origin_from_string('nw')
    'ul'
    >>> origin_from_string('bottom_left')
    'll'
    """
    if origin is None:
        origin = ORIGIN_LL
    elif origin.lower() in ('ll', 'sw', 'bottom_left'):
        origin = ORIGIN_LL
    elif origin.lower() in ('ul', 'nw', 'top_left'):
        origin = ORIGIN_UL
    else:
        raise ValueError("unknown origin value '%s'" % origin)
    return origin


class Grid(object):
    """
    One level of a tile pyramid.

    `num_tiles_wide` and `num_tiles_high` are the size of the tile matrix.
    """
    __slots__ = ('resolution', 'scale_denom', 'num_tiles_wide', 'num_tiles_high', 'name')

    def __init__(self, resolution, scale_denom, num_tiles_wide, num_tiles_high, name):
        self.resolution = resolution
        self.scale_denom = scale_denom
        self.num_tiles_wide = num_tiles_wide
        self.num_tiles_high = num_tiles_high
        self.name = name

    @property
    def extent(self):
        return (self.num_tiles_wide, self.num_tiles_high)

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        if self.num_tiles_wide != other.num_tiles_wide:
            return False
        if self.num_tiles_high != other.num_tiles_high:
            return False
        return abs(other.resolution - self.resolution) / self.resolution <= 0.005

    def __ne__(self, other):
        equal_result = self.__eq__(other)
        if equal_result is NotImplemented:
            return NotImplemented
        return not equal_result

    def __hash__(self):
        return hash((self.num_tiles_wide, self.num_tiles_high))

    def __repr__(self):
        return 'Grid(%r, res=%r, %dx%d)' % (
            self.name, self.resolution, self.num_tiles_wide, self.num_tiles_high)
