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

gridsets = dict(
    use_epsg900913 = False,
    use_gwc11x_names = False,
    default_levels = 31,
)

gridset = dict(
    tile_size = (256, 256),
    pixel_size = 0.00028,
    alignment = 'bottom_left',
)

seed = dict(
    thread_count = 1,
    # retries per failed meta tile, 0 disables retries
    tile_failure_retry_count = 0,
    # seconds before the first retry, doubled for each further retry
    tile_failure_retry_wait = 0.1,
    # shared by all tasks of one request
    total_failures_before_aborting = 1000,
    meta_tiling_factors = (4, 4),
)

layer = dict(
    formats = ['image/png'],
)
