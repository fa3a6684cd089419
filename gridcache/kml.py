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
KML super-overlays for cached layers.

A super-overlay starts with the best fitting tile of the grid subset.
Each overlay document shows its tile as a GroundOverlay and links to the
documents of the four tiles of the next level.
"""

from importlib import resources as importlib_resources

from jinja2 import Environment, FileSystemLoader, select_autoescape

from gridcache.cache import format_extension
from gridcache.grid import GridError
from gridcache.srs import EPSG3857, EPSG4326
from gridcache.util.bbox import BoundingBox

import logging
log = logging.getLogger(__name__)

KML_MIME_TYPE = 'application/vnd.google-earth.kml+xml'

# pixel sizes for the level of detail of regions
MIN_LOD_PIXELS = 128
MAX_LOD_PIXELS = 385


def _template_env():
    template_dir = importlib_resources.files('gridcache').joinpath('templates')
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(enabled_extensions=('kml', 'xml')),
    )


_env = None


def template(name):
    global _env
    if _env is None:
        _env = _template_env()
    return _env.get_template(name)


def grid_loc_string(tile_index):
    """
    >>> grid_loc_string((3, 1, 2))
    'x3y1z2'
    """
    return 'x%dy%dz%d' % tuple(tile_index)


def parse_grid_loc_string(value):
    """
    Parse ``x<x>y<y>z<z>``. Returns ``(-1, -1, -1)`` for the super-overlay
    and all other values.

    >>> parse_grid_loc_string('x3y1z2')
    (3, 1, 2)
    >>> parse_grid_loc_string('layer')
    (-1, -1, -1)
    """
    y_pos = value.find('y')
    z_pos = value.find('z')
    if not value.startswith('x') or y_pos < 2 or z_pos < y_pos + 2:
        return -1, -1, -1
    try:
        return int(value[1:y_pos]), int(value[y_pos + 1:z_pos]), int(value[z_pos + 1:])
    except ValueError:
        return -1, -1, -1


class KMLTile(object):
    """
    The ``coord``, WGS84 ``bbox`` and ``href`` of a tile in a KML document.
    """
    def __init__(self, coord, bbox, href, name=None):
        self.coord = coord
        self.bbox = bbox
        self.href = href
        self.name = name or grid_loc_string(coord)


class SuperOverlay(object):
    """
    Renders KML super-overlay documents for one layer and grid subset.

    :param url_prefix: URL of the layer, the documents link to
        ``<url_prefix>/x<x>y<y>z<z>.<ext>``
    """

    def __init__(self, layer, grid_subset, url_prefix='', mime_type=None):
        self.layer = layer
        self.grid_subset = grid_subset
        self.url_prefix = url_prefix.rstrip('/')
        self.mime_type = mime_type or layer.mime_types[0]

    def root_indices(self):
        """
        Return the tiles the super-overlay links to. That is the best fitting
        tile, or all tiles of the first level if it is wider than one tile.
        """
        minx, miny, maxx, maxy, z = self.grid_subset.coverage_best_fit()
        if minx == maxx and miny == maxy:
            return [(minx, miny, z)]
        if z > 0:
            raise GridError(
                '%s (%s) is too big for the grid subset %s, allow for smaller zoom levels'
                % (self.layer.name, self.grid_subset.coverage_best_fit_bounds(),
                   self.grid_subset.name))
        return [(x, y, z) for y in range(miny, maxy + 1) for x in range(minx, maxx + 1)]

    def root_index(self):
        indices = self.root_indices()
        if len(indices) != 1:
            raise GridError('%s has %d root tiles' % (self.layer.name, len(indices)))
        return indices[0]

    def wgs84_bbox(self, bbox):
        """
        Transform the `bbox` from the SRS of the grid subset to EPSG:4326.
        """
        srs = self.grid_subset.srs
        if srs == EPSG4326:
            return BoundingBox(*bbox)
        result = list(srs.transform_bbox_to(EPSG4326, bbox, with_points=4))
        if srs != EPSG3857:
            return BoundingBox(*result)
        # mercator tiles at the world border reach to the poles
        world = self.grid_subset.gridset.bounds
        if abs(bbox[1] - world.min_y) < 0.1:
            result[1] = -90.0
        if abs(bbox[3] - world.max_y) < 0.1:
            result[3] = 90.0
        return BoundingBox(*result)

    def tile_bbox(self, tile_index):
        return self.wgs84_bbox(self.grid_subset.bounds_from_index(tile_index))

    def _href(self, tile_index, extension):
        return '%s/%s.%s' % (self.url_prefix, grid_loc_string(tile_index), extension)

    def super_overlay(self):
        """
        Render the super-overlay document with links to the root tiles.
        """
        links = []
        indices = self.root_indices()
        for tile_index in indices:
            name = self.layer.name
            if len(indices) > 1:
                name = '%s %s' % (name, grid_loc_string(tile_index))
            links.append(KMLTile(tile_index, self.tile_bbox(tile_index),
                                 self._href(tile_index, 'kml'), name=name))
        return template('kml_super_overlay.kml').render(
            layer_name=self.layer.name, links=links, min_lod=MIN_LOD_PIXELS)

    def overlay(self, tile_index):
        """
        Render the overlay document for `tile_index`, with the tile itself
        and links to the tiles of the next level.
        """
        self.grid_subset.check_coverage(tile_index)
        tile = KMLTile(tuple(tile_index), self.tile_bbox(tile_index),
                       self._href(tile_index, format_extension(self.mime_type)))

        links = []
        for sub_index in self.grid_subset.sub_grid(tile_index):
            if sub_index[2] == -1:
                continue
            links.append(KMLTile(sub_index, self.tile_bbox(sub_index),
                                 self._href(sub_index, 'kml')))

        if tile_index[2] < self.grid_subset.zoom_stop:
            max_lod = MAX_LOD_PIXELS
        else:
            max_lod = -1
        log.debug('kml overlay for %s of %s with %d links', tile_index, self.layer.name, len(links))
        return template('kml_overlay.kml').render(
            layer_name=self.layer.name, tile=tile, links=links,
            min_lod=MIN_LOD_PIXELS, max_lod=max_lod)
