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
import json
import os.path
from typing import Iterable

from jsonschema.exceptions import ValidationError
from jsonschema.validators import Draft202012Validator

from gridcache.grid.defaults import default_gridset_names

import logging
log = logging.getLogger('gridcache.config')


with open(os.path.join(os.path.dirname(__file__), 'config-schema.json')) as schema_file:
    schema = json.load(schema_file)


LEVEL_SPEC_KEYS = ('resolutions', 'scales', 'levels')


def get_error_messages(errors: Iterable[ValidationError]) -> list[str]:
    msgs = []
    for error in errors:
        path = error.json_path.replace('$', 'root')
        msg = f'{error.message} in {path}'
        msgs.append(msg)
        if error.context is not None:
            msgs += get_error_messages(error.context)
    return msgs


def validate(conf_dict: dict) -> list[str]:
    """
    Validate the configuration `conf_dict`. Returns a list with all errors.
    """
    validator = Draft202012Validator(schema=schema)
    errors_iter = validator.iter_errors(conf_dict)
    errors = [] if errors_iter is None else get_error_messages(errors_iter)
    if errors:
        # references are only checked for valid options
        return errors

    gridsets_conf: dict = conf_dict.get('gridsets') or {}
    for name, gridset_conf in gridsets_conf.items():
        errors += _validate_gridset(name, gridset_conf)

    known_gridsets = _get_known_gridsets(conf_dict)
    layers_conf: dict = conf_dict.get('layers') or {}
    for name, layer_conf in layers_conf.items():
        errors += _validate_layer(name, layer_conf, known_gridsets)
    return errors


def _validate_gridset(name: str, gridset: dict) -> list[str]:
    errors = []
    given = [key for key in LEVEL_SPEC_KEYS if key in gridset]
    if len(given) > 1:
        errors.append(
            f"Only one of {', '.join(LEVEL_SPEC_KEYS)} allowed for gridset '{name}', got {', '.join(given)}"
        )

    extent = gridset.get('extent')
    if extent and (extent[0] > extent[2] or extent[1] > extent[3]):
        errors.append(f"Invalid extent {extent} for gridset '{name}'")

    scale_names = gridset.get('scale_names')
    if scale_names is not None and len(given) == 1 and given[0] != 'levels':
        num_levels = len(gridset[given[0]])
        if len(scale_names) != num_levels:
            errors.append(
                f"Gridset '{name}' has {len(scale_names)} scale_names but {num_levels} levels"
            )
    return errors


def _validate_layer(name: str, layer: dict, known_gridsets: set[str]) -> list[str]:
    errors = []
    seen = set()
    for grid in layer.get('grids', []):
        gridset = grid['gridset']
        if gridset not in known_gridsets:
            errors.append(f"Gridset '{gridset}' for layer '{name}' not found in config")
        if gridset in seen:
            errors.append(f"Gridset '{gridset}' configured twice for layer '{name}'")
        seen.add(gridset)

        zoom_start = grid.get('zoom_start')
        zoom_stop = grid.get('zoom_stop')
        if zoom_start is not None and zoom_stop is not None and zoom_start > zoom_stop:
            errors.append(
                f"zoom_start {zoom_start} is larger than zoom_stop {zoom_stop} for layer '{name}'"
            )
    return errors


def _get_known_gridsets(conf_dict: dict) -> set[str]:
    globals_conf = (conf_dict.get('globals') or {}).get('gridsets') or {}
    known_gridsets = set(default_gridset_names(
        use_epsg900913=globals_conf.get('use_epsg900913', False),
        use_gwc11x_names=globals_conf.get('use_gwc11x_names', False),
    ))
    gridsets_conf = conf_dict.get('gridsets')
    if gridsets_conf:
        known_gridsets.update(gridsets_conf.keys())
    return known_gridsets
