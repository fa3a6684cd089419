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

import hashlib
import math
import os


_extensions = {
    'image/png': 'png',
    'image/png8': 'png',
    'image/png; mode=8bit': 'png',
    'image/jpeg': 'jpeg',
    'image/gif': 'gif',
    'image/tiff': 'tiff',
    'image/webp': 'webp',
    'application/vnd.mapbox-vector-tile': 'pbf',
    'application/vnd.google-earth.kml+xml': 'kml',
    'application/vnd.google-earth.kmz': 'kmz',
    'application/json': 'json',
}


def format_extension(mime_type):
    """
    >>> format_extension('image/png')
    'png'
    >>> format_extension('jpeg')
    'jpeg'
    >>> format_extension('image/x-custom')
    'x-custom'
    """
    if mime_type in _extensions:
        return _extensions[mime_type]
    return mime_type.split('/')[-1]


def parameters_id(parameters):
    """
    Return a stable id for the request `parameters`, or ``None`` if there
    are none.

    >>> parameters_id({'style': 'population'})
    'ed5fe8dc461f38ece6b67eb7f6e02562283b4b2c'
    >>> parameters_id({}) is None
    True
    """
    if not parameters:
        return None
    kvp = '?' + '&'.join('%s=%s' % (k, parameters[k]) for k in sorted(parameters))
    return hashlib.sha1(kvp.encode('utf-8')).hexdigest()


def _filtered(name):
    return name.replace(':', '_')


def zero_pad(number, digits):
    """
    >>> zero_pad(3, 2)
    '03'
    >>> zero_pad(123, 2)
    '123'
    """
    return '%0*d' % (digits, number)


def tile_path(key, file_ext, cache_dir=None):
    """
    Return the relative location of the tile `key`, or the full location if
    `cache_dir` is given.

    Tiles of one level are split into directories with
    ``2 ** (z // 2 + 1)`` tiles in each direction.

    >>> from gridcache.cache.base import TileKey
    >>> tile_path(TileKey('states', 'EPSG:4326', 'image/png', None, 0, 0, 0), 'png').replace('\\\\', '/')
    'states/EPSG_4326_00/0_0/00_00.png'
    >>> tile_path(TileKey('states', 'EPSG:4326', 'image/png', None, 345, 77, 9), 'png').replace('\\\\', '/')
    'states/EPSG_4326_09/10_02/0345_0077.png'
    """
    x, y, z = key.x, key.y, key.z
    half = 2 << (z // 2)
    digits = 1
    if half > 10:
        digits = int(math.log10(half)) + 1

    gridset_dir = '%s_%s' % (_filtered(key.gridset_id), zero_pad(z, 2))
    if key.parameters_id is not None:
        gridset_dir += '_' + key.parameters_id

    parts = [
        _filtered(key.layer),
        gridset_dir,
        '%s_%s' % (zero_pad(x // half, digits), zero_pad(y // half, digits)),
        '%s_%s.%s' % (zero_pad(x, 2 * digits), zero_pad(y, 2 * digits), file_ext),
    ]
    if cache_dir is not None:
        parts.insert(0, cache_dir)
    return os.path.join(*parts)
