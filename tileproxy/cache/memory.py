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

import threading
import time

from tileproxy.cache.tile import TileCoord, TileImage
from tileproxy.cache.base import TileCacheBase


class MemoryCache(TileCacheBase):
    """
    Process local tile cache for development and tests.

    Tiles expire with the same TTL rules as the Redis cache. Expired tiles
    are removed when they are accessed.
    """

    backend_name = 'memory'

    def __init__(self, ttl=None, timer=time.monotonic):
        super(MemoryCache, self).__init__(ttl=ttl)
        self._timer = timer
        self._tiles = {}
        self._lock = threading.Lock()

    def load_tile(self, coord: TileCoord) -> TileImage | None:
        with self._lock:
            entry = self._tiles.get(coord)
            if entry is None:
                return None
            image, expires = entry
            if expires <= self._timer():
                del self._tiles[coord]
                return None
            return image

    def store_tile(self, coord: TileCoord, image: TileImage) -> bool:
        expires = self._timer() + self.ttl_for(coord)
        with self._lock:
            self._tiles[coord] = (image, expires)
        return True

    def remove_tile(self, coord: TileCoord) -> bool:
        with self._lock:
            self._tiles.pop(coord, None)
        return True

    def stats(self) -> dict:
        now = self._timer()
        with self._lock:
            tiles = [image for image, expires in self._tiles.values() if expires > now]
        return {
            'backend': self.backend_name,
            'tiles': len(tiles),
            'memory_usage': '%.1fK' % (sum(image.size for image in tiles) / 1024.0, ),
        }
