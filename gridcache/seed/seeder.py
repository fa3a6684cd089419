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
Seeding and truncating of tile layers with multiple threads.
"""

import itertools
import threading
import time

from gridcache.config.defaults import seed as seed_defaults
from gridcache.layer import SourceError
from gridcache.seed.iterator import TileRangeIterator
from gridcache.seed.range import TileRange
from gridcache.seed.util import exp_backoff, format_seed_task, BackoffError
from gridcache.cache import parameters_id as make_parameters_id

import logging
log = logging.getLogger(__name__)

TYPE_SEED = 'seed'
TYPE_RESEED = 'reseed'
TYPE_TRUNCATE = 'truncate'
TASK_TYPES = (TYPE_SEED, TYPE_RESEED, TYPE_TRUNCATE)

STATE_UNSET = 'UNSET'
STATE_READY = 'READY'
STATE_RUNNING = 'RUNNING'
STATE_DONE = 'DONE'
STATE_INTERRUPTED = 'INTERRUPTED'
STATE_KILLED = 'KILLED'
STATE_DEAD = 'DEAD'


class SeedError(Exception):
    pass


class SeedRequest(object):
    """
    A seed, reseed or truncate request for one layer and gridset.

    :param bounds: limit the request to this bbox in the SRS of the gridset,
        all tiles of the grid subset if ``None``
    """

    def __init__(self, layer_name, gridset_id, bounds=None, zoom_start=None, zoom_stop=None,
                 mime_type=None, type=TYPE_SEED, thread_count=None, parameters=None, mask=None):
        if type not in TASK_TYPES:
            raise SeedError('unknown task type %r, expected one of %s'
                            % (type, ', '.join(TASK_TYPES)))
        self.layer_name = layer_name
        self.gridset_id = gridset_id
        self.bounds = bounds
        self.zoom_start = zoom_start
        self.zoom_stop = zoom_stop
        self.mime_type = mime_type
        self.type = type
        self.thread_count = thread_count
        self.parameters = parameters or {}
        self.mask = mask

    def __repr__(self):
        return '<SeedRequest %s %s/%s %s-%s>' % (
            self.type, self.layer_name, self.gridset_id, self.zoom_start, self.zoom_stop)


class FailureCounter(object):
    """
    Number of failed tiles, shared by all tasks of one request.
    """

    def __init__(self, limit):
        self.limit = limit
        self._count = 0
        self._lock = threading.Lock()

    def increment(self):
        with self._lock:
            self._count += 1
            return self._count

    @property
    def count(self):
        with self._lock:
            return self._count

    @property
    def exceeded(self):
        return self.count > self.limit


class TooManyFailures(Exception):
    pass


class Task(object):
    """
    Base of all seed tasks. Subclasses implement `do_action`.

    Tasks are stopped cooperatively: `terminate` sets a flag that is
    checked before each meta tile.
    """

    type = None
    _ids = itertools.count(1)

    def __init__(self, layer, tile_iter, thread_offset=0, thread_count=1):
        self.id = next(Task._ids)
        self.layer = layer
        self.layer_name = layer.name
        self.tile_iter = tile_iter
        self.tile_range = tile_iter.tile_range
        self.thread_offset = thread_offset
        self.thread_count = thread_count
        self.state = STATE_READY
        self.terminated = False

        self.tiles_done = 0
        self.tiles_total = tile_iter.total_tile_count()
        self.time_spent = 0
        self.time_remaining = -1
        self.last_location = None
        self.progress_logger = None

    @property
    def progress(self):
        if not self.tiles_total:
            return 1.0
        return min(self.tiles_done / self.tiles_total, 1.0)

    def terminate(self):
        self.terminated = True

    def run(self):
        self.state = STATE_RUNNING
        try:
            self.do_action()
        except TooManyFailures as ex:
            log.error('task %s aborted: %s', self.id, ex)
            self.state = STATE_DEAD
            raise
        except Exception:
            log.exception('task %s failed', self.id)
            self.state = STATE_DEAD
            raise
        if self.terminated:
            self.state = STATE_KILLED
        else:
            self.state = STATE_DONE

    def do_action(self):
        raise NotImplementedError()

    def update_status(self, start_time):
        # both counters, the iterator can be shared with other tasks
        self.tiles_done = self.tile_iter.tiles_rendered + self.tile_iter.tiles_skipped
        self.time_spent = time.time() - start_time
        if self.tiles_done:
            time_total = self.time_spent * (self.tiles_total / self.tiles_done)
            self.time_remaining = max(time_total - self.time_spent, 0)
        if self.progress_logger:
            self.progress_logger.log_step(self)

    def __repr__(self):
        return '<%s %d %s %s>' % (self.__class__.__name__, self.id, self.layer_name, self.state)


class SeedTask(Task):
    """
    Create the tiles of a range. Reseed tasks replace tiles that are
    already stored.
    """

    def __init__(self, layer, tile_iter, reseed=False, thread_offset=0, thread_count=1,
                 tile_failure_retry_count=0, tile_failure_retry_wait=0.1,
                 failure_counter=None):
        Task.__init__(self, layer, tile_iter, thread_offset=thread_offset,
                      thread_count=thread_count)
        self.reseed = reseed
        self.type = TYPE_RESEED if reseed else TYPE_SEED
        self.tile_failure_retry_count = tile_failure_retry_count
        self.tile_failure_retry_wait = tile_failure_retry_wait
        if failure_counter is None:
            failure_counter = FailureCounter(seed_defaults['total_failures_before_aborting'])
        self.failure_counter = failure_counter

    def _on_failure(self, ex):
        failures = self.failure_counter.increment()
        log.warning('seeding of %s failed at %s (%d failures): %s',
                    self.layer_name, self.last_location, failures, ex)
        if failures > self.failure_counter.limit:
            raise TooManyFailures('more than %d failed tiles, giving up'
                                  % self.failure_counter.limit)

    def _seed_location(self, location):
        try:
            exp_backoff(self.layer.seed_tile, args=(location, self.tile_range),
                        kw={'try_cache': not self.reseed},
                        max_repeat=self.tile_failure_retry_count,
                        start_backoff_sec=self.tile_failure_retry_wait,
                        exceptions=(SourceError, IOError), on_error=self._on_failure)
        except BackoffError:
            # tile is lost, failure limit not reached yet
            pass

    def do_action(self):
        log.info('task %s begins seeding layer %s', self.id, self.layer_name)
        start_time = time.time()
        while not self.terminated:
            location = self.tile_iter.next_meta_grid_location()
            if location is None:
                break
            self.last_location = location
            if self.failure_counter.exceeded:
                raise TooManyFailures('failure limit of %d reached by other tasks'
                                      % self.failure_counter.limit)
            self._seed_location(location)
            log.debug('task %s seeded %s', self.id, location)
            self.update_status(start_time)

        if self.terminated:
            log.info('task %s was terminated after %d tiles', self.id, self.tiles_done)
        else:
            log.info('task %s completed seeding layer %s after %d tiles',
                     self.id, self.layer_name, self.tiles_done)


class TruncateTask(Task):
    """
    Remove all tiles of a range from the store.
    """
    type = TYPE_TRUNCATE

    def __init__(self, layer, tile_iter):
        Task.__init__(self, layer, tile_iter)
        self.tiles_removed = 0

    def do_action(self):
        log.info('task %s begins truncating layer %s', self.id, self.layer_name)
        start_time = time.time()
        while not self.terminated:
            location = self.tile_iter.next_meta_grid_location()
            if location is None:
                break
            self.last_location = location
            self.tiles_removed += self.layer.truncate_tile(location, self.tile_range)
            self.update_status(start_time)
        log.info('task %s removed %d tiles of layer %s', self.id, self.tiles_removed,
                 self.layer_name)


class TaskWorker(threading.Thread):
    def __init__(self, breeder, task):
        threading.Thread.__init__(self, name='gridcache-task-%d' % task.id)
        self.daemon = True
        self.breeder = breeder
        self.task = task
        self.exception = None

    def run(self):
        try:
            self.task.run()
        except Exception as ex:
            # already logged by the task
            self.exception = ex
        finally:
            self.breeder._task_finished(self.task)


class TileBreeder(object):
    """
    Creates and runs seed tasks for layers.

    :param layers: dict of `TileLayer` by name
    :param settings: seed settings, see `gridcache.config.defaults.seed`
    """

    def __init__(self, layers, settings=None, progress_logger=None):
        self.layers = layers
        self.settings = dict(seed_defaults)
        if settings:
            self.settings.update(settings)
        self.progress_logger = progress_logger
        self._lock = threading.Lock()
        self._running = {}
        self._workers = {}

    def layer(self, name):
        try:
            return self.layers[name]
        except KeyError:
            raise SeedError('unknown layer %s' % name)

    def create_tile_range(self, request):
        """
        Create the TileRange for `request`.

        Seed ranges are expanded to full meta tiles, truncate ranges only
        contain the requested tiles.
        """
        layer = self.layer(request.layer_name)
        grid_subset = layer.grid_subset(request.gridset_id)
        if grid_subset is None:
            raise SeedError('layer %s has no gridset %s' % (layer.name, request.gridset_id))

        zoom_start = request.zoom_start
        zoom_stop = request.zoom_stop
        if zoom_start is None:
            zoom_start = grid_subset.zoom_start
        if zoom_stop is None:
            zoom_stop = grid_subset.zoom_stop
        if zoom_start > zoom_stop:
            raise SeedError('zoom_start %d is larger than zoom_stop %d' % (zoom_start, zoom_stop))
        if zoom_start < grid_subset.zoom_start or zoom_stop > grid_subset.zoom_stop:
            raise SeedError('zoom levels %d-%d outside of %d-%d for %s/%s' % (
                zoom_start, zoom_stop, grid_subset.zoom_start, grid_subset.zoom_stop,
                layer.name, grid_subset.name))

        mime_type = request.mime_type or layer.mime_types[0]
        if not layer.supports_mime_type(mime_type):
            raise SeedError('layer %s does not support %s' % (layer.name, mime_type))

        if request.bounds is not None:
            coverages = grid_subset.coverage_intersections(request.bounds)
        else:
            coverages = grid_subset.coverages()

        if request.type != TYPE_TRUNCATE:
            coverages = grid_subset.expand_to_meta_factors(coverages, layer.meta_tiling_factors)

        return TileRange(layer.name, grid_subset.name, zoom_start, zoom_stop, coverages,
                         mime_type, parameters=request.parameters,
                         parameters_id=make_parameters_id(request.parameters),
                         mask=request.mask)

    def create_tasks(self, tile_range, type=TYPE_SEED, thread_count=1, partitioned=False):
        """
        Create the tasks for `tile_range`. Truncation always uses a single
        task.

        :param partitioned: give each task its own part of the range instead
            of one shared iterator
        """
        layer = self.layer(tile_range.layer_name)
        if type == TYPE_TRUNCATE:
            tile_iter = TileRangeIterator(tile_range, layer.meta_tiling_factors)
            return [TruncateTask(layer, tile_iter)]

        if thread_count < 1:
            raise SeedError('thread_count needs to be positive, got %d' % thread_count)

        failure_counter = FailureCounter(self.settings['total_failures_before_aborting'])
        shared_iter = TileRangeIterator(tile_range, layer.meta_tiling_factors)
        tasks = []
        for i in range(thread_count):
            if partitioned:
                tile_iter = shared_iter.partition(i, thread_count)
            else:
                tile_iter = shared_iter
            tasks.append(SeedTask(
                layer, tile_iter, reseed=(type == TYPE_RESEED),
                thread_offset=i, thread_count=thread_count,
                tile_failure_retry_count=self.settings['tile_failure_retry_count'],
                tile_failure_retry_wait=self.settings['tile_failure_retry_wait'],
                failure_counter=failure_counter,
            ))
        return tasks

    def dispatch_tasks(self, tasks):
        """
        Start each task in its own thread. Returns the worker threads.
        """
        workers = []
        with self._lock:
            for task in tasks:
                log.info('dispatching task\n%s', format_seed_task(task))
                if self.progress_logger:
                    self.progress_logger.log_message('dispatching task\n%s' % format_seed_task(task))
                task.progress_logger = self.progress_logger
                worker = TaskWorker(self, task)
                self._running[task.id] = task
                self._workers[task.id] = worker
                workers.append(worker)
        for worker in workers:
            worker.start()
        return workers

    def _task_finished(self, task):
        with self._lock:
            self._running.pop(task.id, None)
            self._workers.pop(task.id, None)
        if self.progress_logger:
            self.progress_logger.log_progress(task, force=True)

    def seed(self, request, wait=True, partitioned=False):
        """
        Create and dispatch all tasks for `request`. Returns the tasks.

        :param wait: block until all tasks are finished
        """
        tile_range = self.create_tile_range(request)
        thread_count = request.thread_count or self.settings['thread_count']
        tasks = self.create_tasks(tile_range, request.type, thread_count,
                                  partitioned=partitioned)
        workers = self.dispatch_tasks(tasks)
        if wait:
            for worker in workers:
                worker.join()
        return tasks

    def running_tasks(self):
        with self._lock:
            return list(self._running.values())

    def terminate_task(self, task_id):
        """
        Stop the task `task_id`. Returns ``False`` if no such task is running.
        """
        with self._lock:
            task = self._running.get(task_id)
        if task is None:
            return False
        task.terminate()
        return True

    def terminate_all(self):
        for task in self.running_tasks():
            task.terminate()

    def join(self, timeout=None):
        with self._lock:
            workers = list(self._workers.values())
        for worker in workers:
            worker.join(timeout)


class SeedEstimator(object):
    """
    Number of tiles and time needed for a seed request.
    """

    def __init__(self, breeder):
        self.breeder = breeder

    def tiles_per_level(self, request):
        tile_range = self.breeder.create_tile_range(request)
        return [(level, tile_range.tile_count(level)) for level in tile_range.levels]

    def estimate(self, request, tiles_per_second):
        """
        Return the total number of tiles and the estimated seconds.
        """
        if tiles_per_second <= 0:
            raise ValueError('tiles_per_second needs to be positive')
        total = sum(count for _, count in self.tiles_per_level(request))
        thread_count = max(request.thread_count or 1, 1)
        return total, total / (tiles_per_second * thread_count)
