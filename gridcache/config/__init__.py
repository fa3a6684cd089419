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
Configuration loading and validation.
"""


class Options(dict):
    """
    Dictionary with attribute style access.

    >>> o = Options(bar='foo')
    >>> o.bar
    'foo'
    """
    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, dict.__repr__(self))

    def __getattr__(self, name):
        if name in self:
            return self[name]
        else:
            raise AttributeError(name)

    def __setattr__(self, name, value):
        self[name] = value

    def __delattr__(self, name):
        if name in self:
            del self[name]
        else:
            raise AttributeError(name)


def to_options_map(mapping):
    """
    >>> to_options_map({'a': {'b': [{'c': 1}]}}).a.b[0].c
    1
    """
    if isinstance(mapping, dict):
        opt = Options()
        for key, value in mapping.items():
            opt[key] = to_options_map(value)
        return opt
    elif isinstance(mapping, list):
        return [to_options_map(m) for m in mapping]
    else:
        return mapping


def load_default_globals():
    """
    Return the default ``globals`` section as `Options`.
    """
    from gridcache.config import defaults
    config_dict = {}
    for k, v in defaults.__dict__.items():
        if k.startswith('_'):
            continue
        if isinstance(v, dict):
            config_dict[k] = dict(v)
    return to_options_map(config_dict)


def merge_globals(globals_conf, conf):
    """
    Update the `globals_conf` with the values of the ``globals`` section
    `conf`, section by section.

    >>> g = merge_globals(load_default_globals(), {'seed': {'thread_count': 4}})
    >>> g.seed.thread_count, g.seed.meta_tiling_factors
    (4, (4, 4))
    """
    for key, value in to_options_map(conf or {}).items():
        if key in globals_conf and hasattr(globals_conf[key], 'update'):
            globals_conf[key].update(value)
        else:
            globals_conf[key] = value
    return globals_conf
