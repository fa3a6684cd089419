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

from gridcache.grid import GridError, OutsideCoverageError
from gridcache.grid.subset import create_grid_subset
from gridcache.kml import SuperOverlay, parse_grid_loc_string, grid_loc_string
from gridcache.layer import TileLayer


@pytest.fixture
def overlay(geodetic):
    subset = create_grid_subset(geodetic, extent=(0, 0, 90, 90), zoom_stop=3)
    layer = TileLayer('states', [subset])
    return SuperOverlay(layer, subset, url_prefix='/kml/states/')


class TestSuperOverlay(object):
    def test_root_index(self, overlay):
        assert overlay.root_index() == (2, 1, 1)

    def test_super_overlay(self, overlay):
        doc = overlay.super_overlay()
        assert doc.count('<NetworkLink>') == 1
        assert '<name>states</name>' in doc
        assert '<href>/kml/states/x2y1z1.kml</href>' in doc
        assert ('<LatLonAltBox><north>90.0</north><south>0.0</south>'
                '<east>90.0</east><west>0.0</west></LatLonAltBox>') in doc

    def test_overlay(self, overlay):
        doc = overlay.overlay((2, 1, 1))
        assert doc.count('<NetworkLink>') == 4
        for child in ('x4y2z2', 'x5y2z2', 'x4y3z2', 'x5y3z2'):
            assert '<href>/kml/states/%s.kml</href>' % child in doc
        assert '<href>/kml/states/x2y1z1.png</href>' in doc
        assert '<maxLodPixels>385</maxLodPixels>' in doc
        assert '<drawOrder>1</drawOrder>' in doc
        assert ('<LatLonBox><north>90.0</north><south>0.0</south>'
                '<east>90.0</east><west>0.0</west></LatLonBox>') in doc

    def test_overlay_last_level(self, overlay):
        doc = overlay.overlay((8, 4, 3))
        assert '<NetworkLink>' not in doc
        assert '<maxLodPixels>-1</maxLodPixels>' in doc
        assert '<maxLodPixels>385</maxLodPixels>' not in doc

    def test_overlay_outside_coverage(self, overlay):
        with pytest.raises(OutsideCoverageError):
            overlay.overlay((0, 0, 1))

    def test_world_root_tiles(self, geodetic):
        subset = create_grid_subset(geodetic, zoom_stop=3)
        overlay = SuperOverlay(TileLayer('world', [subset]), subset, url_prefix='/kml/world')
        assert overlay.root_indices() == [(0, 0, 0), (1, 0, 0)]
        with pytest.raises(GridError):
            overlay.root_index()
        doc = overlay.super_overlay()
        assert doc.count('<NetworkLink>') == 2
        assert 'Super-overlay: world x1y0z0' in doc

    def test_mercator_bbox(self, mercator):
        subset = create_grid_subset(mercator, zoom_stop=3)
        overlay = SuperOverlay(TileLayer('world', [subset]), subset)
        assert tuple(overlay.tile_bbox((0, 0, 0))) == pytest.approx((-180, -90, 180, 90), abs=1e-6)
        bbox = overlay.tile_bbox((1, 1, 1))
        assert bbox[0] == pytest.approx(0, abs=1e-6)
        assert bbox[1] == pytest.approx(0, abs=1e-6)
        assert bbox[3] == 90.0


class TestGridLoc(object):
    @pytest.mark.parametrize('value,expected', [
        ('x0y0z0', (0, 0, 0)),
        ('x123y45z10', (123, 45, 10)),
        ('xy1z2', (-1, -1, -1)),
        ('x1y2', (-1, -1, -1)),
        ('xay1z2', (-1, -1, -1)),
        ('', (-1, -1, -1)),
    ])
    def test_parse(self, value, expected):
        assert parse_grid_loc_string(value) == expected

    def test_format(self):
        assert grid_loc_string((12, 0, 4)) == 'x12y0z4'
