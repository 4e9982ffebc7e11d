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

import os
import time

import pytest

try:
    import redis
except ImportError:
    redis = None

from tileproxy.cache.base import CacheBackendError
from tileproxy.cache.tile import TileCoord, TileImage
from tileproxy.cache.ttl import DAY


class FakeRedis(object):
    """
    In-memory stand-in for the few `redis.StrictRedis` calls of `RedisCache`.
    """
    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.fail = False
        self.fail_info = False

    def _check(self):
        if self.fail:
            raise redis.exceptions.ConnectionError('Connection refused')

    def pipeline(self):
        return FakePipeline(self)

    def get(self, key):
        self._check()
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self._check()
        if isinstance(value, str):
            value = value.encode('utf-8')
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        self._check()
        for key in keys:
            self.data.pop(key, None)
        return len(keys)

    def scan_iter(self, match=None, count=None):
        self._check()
        prefix = match.rstrip('*')
        for key in list(self.data):
            if key.startswith(prefix):
                yield key.encode('utf-8')

    def info(self, section=None):
        self._check()
        if self.fail_info:
            raise redis.exceptions.ResponseError('NOPERM this user has no permissions')
        return {'used_memory_human': '1.23M'}


class FakePipeline(object):
    def __init__(self, r):
        self.r = r
        self.calls = []

    def get(self, key):
        self.calls.append(('get', (key, )))

    def setex(self, key, ttl, value):
        self.calls.append(('setex', (key, ttl, value)))

    def execute(self):
        self.r._check()
        return [getattr(self.r, name)(*args) for name, args in self.calls]


@pytest.mark.skipif(not redis, reason="redis package required")
class TestRedisCacheKeys(object):
    def setup_method(self):
        from tileproxy.cache.redis import RedisCache
        self.cache = RedisCache(url='redis://localhost:6379/0')
        self.cache.r = self.fake = FakeRedis()
        self.coord = TileCoord('satellite', 12, 2048, 1361)
        self.image = TileImage(b'\xff\xd8jpeg', 'image/jpeg')

    def test_key(self):
        assert self.cache._key(self.coord) == 'tile:v1:satellite:12:2048:1361'

    def test_store(self):
        assert self.cache.store_tile(self.coord, self.image)
        assert self.fake.data['tile:v1:satellite:12:2048:1361'] == b'\xff\xd8jpeg'
        assert self.fake.data['tile:v1:satellite:12:2048:1361:meta'] == b'image/jpeg'
        assert self.fake.ttls['tile:v1:satellite:12:2048:1361'] == 60 * DAY
        assert self.fake.ttls['tile:v1:satellite:12:2048:1361:meta'] == 60 * DAY

    def test_load(self):
        self.cache.store_tile(self.coord, self.image)
        assert self.cache.load_tile(self.coord) == self.image

    def test_miss(self):
        assert self.cache.load_tile(self.coord) is None

    def test_missing_meta_is_miss(self):
        self.cache.store_tile(self.coord, self.image)
        del self.fake.data['tile:v1:satellite:12:2048:1361:meta']
        assert self.cache.load_tile(self.coord) is None

    def test_missing_data_is_miss(self):
        self.cache.store_tile(self.coord, self.image)
        del self.fake.data['tile:v1:satellite:12:2048:1361']
        assert self.cache.load_tile(self.coord) is None

    def test_remove(self):
        self.cache.store_tile(self.coord, self.image)
        assert self.cache.remove_tile(self.coord)
        assert self.fake.data == {}

    def test_backend_errors(self):
        self.fake.fail = True
        with pytest.raises(CacheBackendError):
            self.cache.load_tile(self.coord)
        with pytest.raises(CacheBackendError):
            self.cache.store_tile(self.coord, self.image)
        with pytest.raises(CacheBackendError):
            self.cache.stats()

    def test_stats(self):
        self.cache.store_tile(self.coord, self.image)
        self.cache.store_tile(TileCoord('streets', 3, 4, 2), TileImage(b'png', 'image/png'))
        self.fake.data['other:key'] = b'foo'
        assert self.cache.stats() == {'backend': 'redis', 'tiles': 2, 'memory_usage': '1.23M'}

    def test_stats_without_info(self):
        self.fake.fail_info = True
        assert self.cache.stats() == {'backend': 'redis', 'tiles': 0, 'memory_usage': 'N/A'}


@pytest.mark.skipif(not redis or not os.environ.get('TILEPROXY_TEST_REDIS'),
                    reason="redis package and TILEPROXY_TEST_REDIS env required")
class TestRedisCache(object):
    def setup_method(self):
        from tileproxy.cache.redis import RedisCache
        redis_host = os.environ['TILEPROXY_TEST_REDIS']
        self.host, self.port = redis_host.split(':')
        self.cache = RedisCache(host=self.host, port=int(self.port), db=1, prefix='tileproxy-test')
        self.coord = TileCoord('streets', 3, 4, 2)
        self.image = TileImage(b'png data', 'image/png')

    def teardown_method(self):
        for k in self.cache.r.scan_iter(match='tileproxy-test:*'):
            self.cache.r.delete(k)

    def test_store_load(self):
        assert self.cache.load_tile(self.coord) is None
        assert self.cache.store_tile(self.coord, self.image)
        assert self.cache.load_tile(self.coord) == self.image
        assert 0 < self.cache.r.ttl('tileproxy-test:streets:3:4:2') <= 14 * DAY
        assert 0 < self.cache.r.ttl('tileproxy-test:streets:3:4:2:meta') <= 14 * DAY

    def test_expire(self):
        from tileproxy.cache.redis import RedisCache
        cache = RedisCache(host=self.host, port=int(self.port), db=1, prefix='tileproxy-test', ttl=1)
        assert cache.store_tile(self.coord, self.image)
        assert cache.is_cached(self.coord)
        time.sleep(1.2)
        assert not cache.is_cached(self.coord)

    def test_stats(self):
        self.cache.store_tile(self.coord, self.image)
        stats = self.cache.stats()
        assert stats['backend'] == 'redis'
        assert stats['tiles'] == 1

    def test_unreachable_server(self):
        from tileproxy.cache.redis import RedisCache
        cache = RedisCache(host='127.0.0.1', port=1, socket_timeout=0.5)
        with pytest.raises(CacheBackendError):
            cache.load_tile(self.coord)
