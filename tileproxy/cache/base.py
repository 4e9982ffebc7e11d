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

from abc import ABC, abstractmethod

from tileproxy.cache.tile import TileCoord, TileImage
from tileproxy.cache.ttl import tile_ttl


class CacheBackendError(Exception):
    pass


class TileCacheBase(ABC):
    """
    Base implementation of a tile cache.

    Backends raise `CacheBackendError` when the underlying store fails.
    Callers must not depend on the cache for correctness: a failing
    backend is the same as an empty one.

    :param ttl: fixed TTL in seconds for all tiles, or ``None`` for the
        source and zoom dependent TTL of `tileproxy.cache.ttl.tile_ttl`
    """

    backend_name = None

    def __init__(self, ttl=None) -> None:
        self.ttl = ttl

    def ttl_for(self, coord: TileCoord) -> int:
        if self.ttl:
            return int(self.ttl)
        return tile_ttl(coord.source, coord.z)

    @abstractmethod
    def load_tile(self, coord: TileCoord) -> TileImage | None:
        """
        Return the cached tile or ``None`` if it is not cached.
        """
        pass

    @abstractmethod
    def store_tile(self, coord: TileCoord, image: TileImage) -> bool:
        pass

    @abstractmethod
    def remove_tile(self, coord: TileCoord) -> bool:
        pass

    def is_cached(self, coord: TileCoord) -> bool:
        return self.load_tile(coord) is not None

    @abstractmethod
    def stats(self) -> dict:
        """
        Return backend statistics with at least ``backend`` and ``tiles``.
        """
        pass
