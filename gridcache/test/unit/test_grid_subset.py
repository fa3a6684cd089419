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

from gridcache.grid import (
    GridError,
    GridSetConfigurationError,
    OutsideCoverageError,
    TileDimensionsMismatchError,
)
from gridcache.grid.factory import create_gridset
from gridcache.grid.resolutions import ByResolutions
from gridcache.grid.subset import create_grid_subset, NO_TILE
from gridcache.srs import EPSG4326
from gridcache.util.bbox import BoundingBox, WORLD4326


class TestCoverage(object):
    def test_half_world(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 180, 90), zoom_stop=5)
        assert subset.coverage(1) == (2, 1, 3, 1, 1)
        assert subset.coverage(0) == (1, 0, 1, 0, 0)
        assert not subset.full_gridset_coverage

    def test_full_gridset(self, geodetic):
        subset = create_grid_subset(geodetic, zoom_stop=3)
        assert subset.full_gridset_coverage
        assert subset.coverages() == [
            (0, 0, 1, 0, 0), (0, 0, 3, 1, 1), (0, 0, 7, 3, 2), (0, 0, 15, 7, 3)]

    def test_mercator(self, mercator):
        subset = create_grid_subset(mercator, zoom_stop=4)
        assert subset.coverage(0) == (0, 0, 0, 0, 0)
        assert subset.coverage(2) == (0, 0, 3, 3, 2)
        assert subset.coverage(4) == (0, 0, 15, 15, 4)

    def test_zoom_start(self, geodetic):
        subset = create_grid_subset(geodetic, zoom_start=2, zoom_stop=4)
        assert subset.zoom_start == 2
        assert subset.coverages()[0] == (0, 0, 7, 3, 2)
        with pytest.raises(OutsideCoverageError):
            subset.coverage(1)

    def test_extent_clipped_to_matrix(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(-200, -100, 0, 0), zoom_stop=2)
        assert subset.coverage(1) == (0, 0, 1, 0, 1)

    @pytest.mark.parametrize('kw', [
        dict(zoom_start=3, zoom_stop=2),
        dict(zoom_stop=31),
        dict(zoom_start=-1),
        dict(extent=(10, 10, 0, 0)),
        dict(extent=(200, 0, 300, 10)),
        dict(zoom_start=2, zoom_stop=4, min_cached_level=1),
    ])
    def test_invalid(self, geodetic, kw):
        with pytest.raises(GridSetConfigurationError):
            create_grid_subset(geodetic, **kw)

    def test_wmts_coverages(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 180, 90), zoom_stop=2)
        assert subset.wmts_coverages() == [(1, 0, 1, 0), (2, 0, 3, 0), (4, 0, 7, 1)]

    def test_coverage_intersections(self, geodetic):
        subset = create_grid_subset(geodetic, zoom_stop=2)
        assert subset.coverage_intersections(BoundingBox(0, 0, 90, 90)) == [
            (1, 0, 1, 0, 0), (2, 1, 2, 1, 1), (4, 2, 5, 3, 2)]

    def test_coverage_intersections_outside(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 90, 90), zoom_stop=2)
        assert subset.coverage_intersections(BoundingBox(-90, -90, -45, -45)) == \
            [None, None, None]

    def test_coverage_intersection(self, geodetic_subset):
        assert geodetic_subset.coverage_intersection((2, 2, 10, 10, 2)) == (2, 2, 7, 3, 2)
        assert geodetic_subset.coverage_intersection((9, 0, 10, 1, 2)) is None

    def test_coverage_bounds(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 100, 80), zoom_stop=2)
        assert subset.coverage_bounds(1) == (0, 0, 180, 90)


class TestBestFit(object):
    def test_single_tile(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 90, 90), zoom_stop=6)
        assert subset.coverage_best_fit() == (2, 1, 2, 1, 1)
        assert subset.coverage_best_fit_bounds() == (0, 0, 90, 90)

    def test_fallback_to_zoom_start(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 90, 90), zoom_start=2, zoom_stop=6)
        assert subset.coverage_best_fit() == (4, 2, 5, 3, 2)

    def test_world(self, geodetic_subset):
        assert geodetic_subset.coverage_best_fit() == (0, 0, 1, 0, 0)


class TestSubGrid(object):
    def test_children(self, geodetic_subset):
        assert geodetic_subset.sub_grid((2, 1, 1)) == [
            (4, 2, 2), (5, 2, 2), (4, 3, 2), (5, 3, 2)]

    def test_children_quarter_the_tile(self, geodetic_subset):
        parent = geodetic_subset.bounds_from_index((2, 1, 1))
        children = [geodetic_subset.bounds_from_index(c)
                    for c in geodetic_subset.sub_grid((2, 1, 1))]
        assert sum(c.width * c.height for c in children) == parent.width * parent.height
        for child in children:
            assert parent.contains(child)

    def test_beyond_zoom_stop(self, geodetic):
        subset = create_grid_subset(geodetic, zoom_stop=3)
        assert subset.sub_grid((0, 0, 3)) == [NO_TILE] * 4
        assert all(child[2] == -1 for child in subset.sub_grid((0, 0, 3)))

    def test_outside_of_coverage(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 90, 90), zoom_stop=3)
        assert subset.sub_grid((1, 0, 0)) == [NO_TILE, NO_TILE, (2, 1, 1), NO_TILE]

    def test_non_quadtree_pyramid(self):
        gs = create_gridset('test', EPSG4326, WORLD4326, ByResolutions((1.0, 0.75)))
        subset = create_grid_subset(gs)
        with pytest.raises(GridError):
            subset.sub_grid((0, 0, 0))


class TestConversion(object):
    def test_invertibility(self, mercator):
        subset = create_grid_subset(mercator, zoom_stop=3)
        for minx, miny, maxx, maxy, z in subset.coverages():
            for y in range(miny, maxy + 1):
                for x in range(minx, maxx + 1):
                    assert subset.closest_index(subset.bounds_from_index((x, y, z))) == (x, y, z)

    def test_find_level_for_resolution(self, geodetic_subset):
        res = geodetic_subset.resolutions
        assert geodetic_subset.find_level_for_resolution(res[2]) == 2
        # slightly coarser requests still match the level
        assert geodetic_subset.find_level_for_resolution(res[2] * 1.004) == 2
        assert geodetic_subset.find_level_for_resolution(res[2] * 0.999) == 2
        assert geodetic_subset.find_level_for_resolution(res[2] * 0.99) == 3
        assert geodetic_subset.find_level_for_resolution(res[2] * 2.1) == 1
        assert geodetic_subset.find_level_for_resolution(1e-9) == 10

    def test_find_level_for_resolution_min_of_axes(self, geodetic_subset):
        res = geodetic_subset.resolutions
        assert geodetic_subset.find_level_for_resolution(res[1], res[3]) == 3

    def test_covers(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 90, 90), zoom_stop=3)
        assert subset.covers((2, 1, 1))
        assert not subset.covers((1, 1, 1))
        assert not subset.covers((0, 0, 4))

    def test_check_coverage(self, geodetic):
        subset = create_grid_subset(geodetic, extent=(0, 0, 90, 90), zoom_start=1, zoom_stop=3)
        subset.check_coverage((2, 1, 1))

        with pytest.raises(OutsideCoverageError) as excinfo:
            subset.check_coverage((0, 0, 4))
        assert excinfo.value.level == 4
        assert excinfo.value.zoom_range == (1, 3)

        with pytest.raises(OutsideCoverageError) as excinfo:
            subset.check_coverage((1, 1, 1))
        assert excinfo.value.level == 1
        assert excinfo.value.coverage == (2, 1, 2, 1, 1)

    def test_check_tile_dimensions(self, geodetic_subset):
        geodetic_subset.check_tile_dimensions(256, 256)
        with pytest.raises(TileDimensionsMismatchError):
            geodetic_subset.check_tile_dimensions(512, 256)


class TestLevels(object):
    def test_grid_names(self, geodetic):
        subset = create_grid_subset(geodetic, zoom_start=2, zoom_stop=4)
        assert subset.grid_names() == [
            'GlobalCRS84Geometric:2', 'GlobalCRS84Geometric:3', 'GlobalCRS84Geometric:4']
        assert subset.grid_index('GlobalCRS84Geometric:3') == 3
        assert subset.grid_index('GlobalCRS84Geometric:5') is None

    def test_should_cache_at_zoom(self, geodetic):
        subset = create_grid_subset(geodetic, zoom_stop=10, min_cached_level=2,
                                    max_cached_level=8)
        assert not subset.should_cache_at_zoom(1)
        assert subset.should_cache_at_zoom(2)
        assert subset.should_cache_at_zoom(8)
        assert not subset.should_cache_at_zoom(9)

    def test_expand_to_meta_factors(self, geodetic_subset):
        coverages = [(1, 0, 1, 0, 0), (2, 1, 2, 1, 1), (4, 2, 5, 3, 2), None]
        assert geodetic_subset.expand_to_meta_factors(coverages, (4, 4)) == [
            (0, 0, 1, 0, 0), (0, 0, 3, 1, 1), (4, 0, 7, 3, 2), None]

    def test_expand_to_meta_factors_partial(self, geodetic_subset):
        assert geodetic_subset.expand_to_meta_factors([(5, 5, 9, 6, 4)], (4, 2)) == [
            (4, 4, 11, 7, 4)]

    def test_properties(self, geodetic_subset):
        assert geodetic_subset.name == 'GlobalCRS84Geometric'
        assert geodetic_subset.srs == EPSG4326
        assert len(geodetic_subset.resolutions) == 11
        assert geodetic_subset.num_tiles_wide(3) == 16
        assert geodetic_subset.num_tiles_high(3) == 8
        assert geodetic_subset.dots_per_inch == pytest.approx(90.714, abs=0.001)
