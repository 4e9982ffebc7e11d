# This file is part of the TileProxy project.
# Copyright (C) 2026 TileProxy contributors
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
Background execution of tasks that must not delay the response.
"""
import queue
import threading

import logging
log_system = logging.getLogger('tileproxy.system')


def _task_name(func):
    return getattr(func, '__qualname__', repr(func))


def run_non_blocking(func, args, kw={}):
    """
    Call `func` inline. Exceptions are logged and never propagate
    to the caller.
    """
    try:
        return func(*args, **kw)
    except Exception:
        log_system.exception('background task %s failed', _task_name(func))
        return None


class ThreadWorker(threading.Thread):
    def __init__(self, task_queue, name=None):
        threading.Thread.__init__(self, name=name)
        self.task_queue = task_queue

    def run(self):
        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                func, args = task
                run_non_blocking(func, args)
            finally:
                self.task_queue.task_done()


class BackgroundWorker(object):
    """
    Executes fire-and-forget tasks in daemon threads.

    `submit` never blocks: if `queue_size` tasks are already pending the
    new task is dropped. Results of tasks are discarded, exceptions are
    logged. Tasks never run in the calling thread.
    """
    def __init__(self, size=2, queue_size=1000, name='tileproxy-worker'):
        if size < 1:
            raise ValueError('BackgroundWorker requires at least one thread')
        self.pool_size = size
        self.name = name
        self.task_queue = queue.Queue(maxsize=queue_size)
        self._lock = threading.Lock()
        self.pool = None

    def _init_pool(self):
        pool = []
        for i in range(self.pool_size):
            t = ThreadWorker(self.task_queue, name='%s-%d' % (self.name, i))
            t.daemon = True
            t.start()
            pool.append(t)
        return pool

    def submit(self, func, *args):
        """
        Schedule ``func(*args)``. Returns ``False`` if the task was dropped.
        """
        with self._lock:
            if self.pool is None:
                self.pool = self._init_pool()
        try:
            self.task_queue.put_nowait((func, args))
        except queue.Full:
            log_system.warning('background queue full (%d tasks), dropped %s',
                self.task_queue.maxsize, _task_name(func))
            return False
        return True

    @property
    def pending(self):
        return self.task_queue.unfinished_tasks

    def join(self):
        """
        Wait until all submitted tasks are done.
        """
        self.task_queue.join()

    def shutdown(self):
        """
        Finish all pending tasks and stop the worker threads.
        """
        with self._lock:
            pool, self.pool = self.pool, None
        if not pool:
            return
        for _ in pool:
            self.task_queue.put(None)
        for t in pool:
            t.join()
