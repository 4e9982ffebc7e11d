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

from tileproxy.cache.tile import TileCoord, TileImage
from tileproxy.cache.base import TileCacheBase, CacheBackendError

try:
    import redis  # type: ignore
except ImportError:
    redis = None  # type: ignore


import logging
log = logging.getLogger(__name__)


class RedisCache(TileCacheBase):
    """
    Tile cache in a Redis server shared by all TileProxy processes.

    Each tile is stored as two keys with the same TTL: the raw tile data
    at ``<prefix>:<source>:<z>:<x>:<y>`` and its content type at
    ``<key>:meta``. Both are written and read in one pipeline.
    """

    backend_name = 'redis'

    def __init__(
            self, url=None, host='localhost', port=6379, db=0, prefix='tile:v1', ttl=None,
            username=None, password=None, socket_timeout=2.0):
        super(RedisCache, self).__init__(ttl=ttl)

        if redis is None:
            raise ImportError("Redis backend requires 'redis' package.")

        self.prefix = prefix
        # bounded socket operations, a hanging server must not block requests
        timeouts = dict(socket_timeout=socket_timeout, socket_connect_timeout=socket_timeout)
        if url:
            self.r = redis.StrictRedis.from_url(url, **timeouts)
        else:
            self.r = redis.StrictRedis(
                host=host,
                port=port,
                db=db,
                username=username,
                password=password,
                **timeouts
            )

    def _key(self, coord: TileCoord) -> str:
        return '%s:%s:%d:%d:%d' % (self.prefix, coord.source, coord.z, coord.x, coord.y)

    def load_tile(self, coord: TileCoord) -> TileImage | None:
        key = self._key(coord)
        try:
            log.debug('get_key, key: %s', key)
            pipe = self.r.pipeline()
            pipe.get(key)
            pipe.get(key + ':meta')
            data, content_type = pipe.execute()
        except redis.exceptions.RedisError as e:
            raise CacheBackendError('REDIS:get_key error for %s: %s' % (key, e))

        if not data or not content_type:
            return None
        if isinstance(content_type, bytes):
            content_type = content_type.decode('utf-8')
        return TileImage(data, content_type)

    def store_tile(self, coord: TileCoord, image: TileImage) -> bool:
        key = self._key(coord)
        ttl = self.ttl_for(coord)
        try:
            log.debug('store_key, key: %s, ttl: %d', key, ttl)
            pipe = self.r.pipeline()
            pipe.setex(key, ttl, image.data)
            pipe.setex(key + ':meta', ttl, image.content_type)
            results = pipe.execute()
        except redis.exceptions.RedisError as e:
            raise CacheBackendError('REDIS:store_key error for %s: %s' % (key, e))
        return all(results)

    def remove_tile(self, coord: TileCoord) -> bool:
        key = self._key(coord)
        try:
            self.r.delete(key, key + ':meta')
        except redis.exceptions.RedisError as e:
            raise CacheBackendError('REDIS:delete error for %s: %s' % (key, e))
        return True

    def stats(self) -> dict:
        try:
            tiles = 0
            for key in self.r.scan_iter(match=self.prefix + ':*', count=1000):
                if not key.endswith(b':meta'):
                    tiles += 1
        except redis.exceptions.RedisError as e:
            raise CacheBackendError('REDIS:scan error: %s' % (e, ))

        memory_usage = 'N/A'
        try:
            info = self.r.info('memory')
            memory_usage = info.get('used_memory_human', memory_usage)
        except redis.exceptions.RedisError as e:
            # INFO is often restricted on managed Redis servers
            log.debug('REDIS:info not available: %s', e)

        return {
            'backend': self.backend_name,
            'tiles': tiles,
            'memory_usage': memory_usage,
        }
