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

from gridcache.util.bbox import (
    BoundingBox,
    WORLD3857,
    WORLD4326,
    intersection,
)


class TestBoundingBox(object):
    @pytest.mark.parametrize('factor', [0.5, 2, 3.7, 0.01, 100])
    def test_scale_round_trip(self, factor):
        bbox = BoundingBox(-12.5, 40.25, 30.0, 55.75)
        assert bbox.scale(factor).scale(1 / factor) == bbox

    def test_scale_identity(self):
        bbox = BoundingBox(-12.5, 40.25, 30.0, 55.75)
        assert tuple(bbox.scale(1.0)) == tuple(bbox)

    def test_scale_keeps_center(self):
        bbox = BoundingBox(0, 0, 10, 20)
        assert bbox.scale(3).center == bbox.center

    def test_scale_xy(self):
        assert tuple(BoundingBox(0, 0, 10, 10).scale(2, 1)) == (-5.0, 0.0, 15.0, 10.0)

    def test_intersection(self):
        result = intersection(BoundingBox(0, 0, 10, 10), BoundingBox(5, 5, 20, 20))
        assert tuple(result) == (5.0, 5.0, 10.0, 10.0)
        assert result.is_sane()

    def test_intersection_null(self):
        result = BoundingBox(0, 0, 10, 10).intersection(BoundingBox(11, 11, 20, 20))
        assert result.is_null()
        assert not result.is_sane()
        assert not result.intersects(BoundingBox(0, 0, 10, 10))

    def test_intersection_touching_is_sane(self):
        result = intersection(BoundingBox(0, 0, 10, 10), BoundingBox(10, 0, 20, 10))
        assert tuple(result) == (10.0, 0.0, 10.0, 10.0)
        assert result.is_sane()
        assert not result.is_null()

    def test_str(self):
        assert str(WORLD4326) == '-180.0,-90.0,180.0,90.0'
        assert str(BoundingBox(0, 0, 20037508.34, 20037508.34)) == \
            '0.0,0.0,20037508.34,20037508.34'
        assert str(BoundingBox(0.1, 1e-7, 1, 2)) == '0.1,0.0000001,1.0,2.0'

    def test_from_string(self):
        assert tuple(BoundingBox.from_string(str(WORLD3857))) == tuple(WORLD3857)
        with pytest.raises(ValueError):
            BoundingBox.from_string('1,2,3')

    def test_from_sequence(self):
        assert tuple(BoundingBox.from_string(['-10', 20, 30.5, '40'])) == (-10.0, 20.0, 30.5, 40.0)

    def test_equals_threshold(self):
        bbox = BoundingBox(0, 0, 10, 10)
        assert bbox == (0.01, 0, 10.01, 10)
        assert bbox != (0.1, 0, 10.1, 10)
        assert not bbox.equals((0.01, 0, 10.01, 10), threshold=0.001)

    def test_not_hashable(self):
        with pytest.raises(TypeError):
            hash(BoundingBox(0, 0, 1, 1))

    def test_contains(self):
        assert WORLD4326.contains(BoundingBox(0, 0, 90, 90))
        assert not BoundingBox(0, 0, 90, 90).contains(WORLD4326)

    def test_kml_boxes(self):
        bbox = BoundingBox(-10, 20, 30, 40)
        assert bbox.to_kml_lat_lon_box() == (
            '<LatLonBox><north>40.0</north><south>20.0</south>'
            '<east>30.0</east><west>-10.0</west></LatLonBox>')
        assert bbox.to_kml_lat_lon_alt_box() == (
            '<LatLonAltBox><north>40.0</north><south>20.0</south>'
            '<east>30.0</east><west>-10.0</west></LatLonAltBox>')
