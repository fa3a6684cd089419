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

import sys
import time
from datetime import datetime

import logging
log = logging.getLogger(__name__)


class ProgressLog(object):
    def __init__(self, out=None, silent=False, verbose=True):
        if not out:
            out = sys.stdout
        self.out = out
        self._laststep = time.time()
        self._lastprogress = 0

        self.verbose = verbose
        self.silent = silent

    def log_message(self, msg):
        if self.silent:
            return
        self.out.write('[%s] %s\n' % (
            timestamp(), msg,
        ))
        self.out.flush()

    def log_step(self, task):
        if not self.verbose or self.silent:
            return
        if (self._laststep + .5) < time.time():
            # log progress at most every 500ms
            self.out.write('[%s] %6.2f%%\t%-20s \r' % (
                timestamp(), task.progress * 100, format_location(task.last_location),
            ))
            self.out.flush()
            self._laststep = time.time()

    def log_progress(self, task, force=False):
        progress_interval = 1
        if not self.verbose:
            progress_interval = 30

        if self.silent:
            return

        if force or (self._lastprogress + progress_interval) < time.time():
            self._lastprogress = time.time()
            self.out.write('[%s] %s %6.2f%% %s (%d/%d tiles, %s remaining)\n' % (
                timestamp(), task.id, task.progress * 100,
                format_location(task.last_location), task.tiles_done,
                task.tiles_total, format_duration(task.time_remaining)))
            self.out.flush()


def timestamp():
    return datetime.now().strftime('%H:%M:%S')


def format_location(location):
    """
    >>> format_location((4, 8, 3))
    '3: 4,8'
    >>> format_location(None)
    '-'
    """
    if location is None:
        return '-'
    return '%d: %d,%d' % (location[2], location[0], location[1])


def format_duration(seconds):
    """
    >>> format_duration(3725)
    '1h 2m 5s'
    >>> format_duration(59)
    '59s'
    >>> format_duration(-1)
    '-'
    """
    if seconds is None or seconds < 0:
        return '-'
    seconds = int(round(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    parts = []
    if hours:
        parts.append('%dh' % hours)
    if hours or minutes:
        parts.append('%dm' % minutes)
    parts.append('%ds' % seconds)
    return ' '.join(parts)


class BackoffError(Exception):
    pass


def exp_backoff(func, args=(), kw={}, max_repeat=10, start_backoff_sec=2,
                exceptions=(Exception,), ignore_exceptions=tuple(), max_backoff=60,
                on_error=None):
    """
    Call `func` until it succeeds. Waits `start_backoff_sec` after the first
    failure and doubles the wait after each further failure.

    :param on_error: called with each exception before the retry, can raise
        to stop retrying
    :raises BackoffError: after `max_repeat` retries
    """
    n = 0
    while True:
        try:
            result = func(*args, **kw)
        except ignore_exceptions:
            time.sleep(0.01)
        except exceptions as ex:
            if on_error is not None:
                on_error(ex)
            if n >= max_repeat:
                log.error('an error occurred, giving up: %r', ex)
                raise BackoffError(ex)
            wait_for = start_backoff_sec * 2**n
            if wait_for > max_backoff:
                wait_for = max_backoff
            log.warning('an error occurred, retry in %.2f seconds: %r. retries left: %d',
                        wait_for, ex, (max_repeat - n))
            time.sleep(wait_for)
            n += 1
        else:
            return result


def format_seed_task(task):
    tile_range = task.tile_range
    info = []
    info.append('  %s:' % (task.id, ))
    info.append("    %s layer '%s' with grid '%s' as %s" % (
        task.type.capitalize(), tile_range.layer_name, tile_range.gridset_id,
        tile_range.mime_type))
    if tile_range.is_filtered:
        info.append('    Limited to mask %s' % (type(tile_range.mask).__name__, ))
    info.append('    Levels: %s' % (tile_range.levels, ))
    if task.thread_count > 1:
        info.append('    Thread %d of %d' % (task.thread_offset + 1, task.thread_count))
    return '\n'.join(info)
