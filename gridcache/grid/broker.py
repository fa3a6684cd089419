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

import threading

import logging

from gridcache.grid import GridError
from gridcache.grid.defaults import default_gridsets
from gridcache.grid.resolutions import DEFAULT_LEVELS
from gridcache.srs import EPSG3857, EPSG4326

log = logging.getLogger(__name__)


class GridSetExistsError(GridError):
    pass


class GridSetBroker(object):
    """
    Registry of the GridSets of one cache, keyed by name.

    The broker starts with the default gridsets (see
    `gridcache.grid.defaults`) unless `defaults` is ``False``.
    All methods are safe to call from multiple threads.
    """

    def __init__(self, defaults=True, use_epsg900913=False, use_gwc11x_names=False,
                 default_levels=DEFAULT_LEVELS):
        self._lock = threading.RLock()
        self._gridsets = {}
        self._embedded = set()
        if defaults:
            for gridset in default_gridsets(use_epsg900913=use_epsg900913,
                                            use_gwc11x_names=use_gwc11x_names,
                                            levels=default_levels):
                self._gridsets[gridset.name] = gridset
                self._embedded.add(gridset.name)

    def get(self, name):
        """
        Return the GridSet `name`, or ``None``.
        """
        with self._lock:
            return self._gridsets.get(name)

    def __getitem__(self, name):
        with self._lock:
            return self._gridsets[name]

    def __contains__(self, name):
        with self._lock:
            return name in self._gridsets

    def __len__(self):
        with self._lock:
            return len(self._gridsets)

    def names(self):
        with self._lock:
            return sorted(self._gridsets)

    def embedded_names(self):
        """
        Names of the default gridsets that are still registered.
        """
        with self._lock:
            return sorted(self._embedded & set(self._gridsets))

    def gridsets(self):
        with self._lock:
            return list(self._gridsets.values())

    def add(self, gridset):
        """
        Register a new GridSet. Raises `GridSetExistsError` if a gridset
        with the same name is already registered.
        """
        if gridset is None:
            raise ValueError('gridset is None')
        with self._lock:
            if gridset.name in self._gridsets:
                raise GridSetExistsError('gridset %s already exists' % gridset.name)
            log.debug('adding gridset %s', gridset.name)
            self._gridsets[gridset.name] = gridset

    def put(self, gridset):
        """
        Register `gridset`, replacing any gridset with the same name.
        """
        if gridset is None:
            raise ValueError('gridset is None')
        with self._lock:
            if gridset.name in self._gridsets:
                log.warning('replacing gridset %s', gridset.name)
                self._embedded.discard(gridset.name)
            self._gridsets[gridset.name] = gridset

    def remove(self, name):
        """
        Remove and return the GridSet `name`, or ``None`` if it is unknown.
        """
        with self._lock:
            self._embedded.discard(name)
            return self._gridsets.pop(name, None)

    def _default_for(self, srs):
        with self._lock:
            for name in sorted(self._embedded):
                gridset = self._gridsets.get(name)
                if gridset is not None and gridset.srs == srs and not gridset.top_left_aligned:
                    return gridset

    @property
    def world_epsg4326(self):
        return self._default_for(EPSG4326)

    @property
    def world_epsg3857(self):
        return self._default_for(EPSG3857)
