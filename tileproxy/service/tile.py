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
The tile service: cache-aside proxy for the upstream tile servers.

Request flow::

    validate -> cache read --hit--> response (HIT)
                    |
                   miss / cache error
                    |
                    v
               upstream fetch --error--> 4xx/5xx response
                    |
                    +--> background cache write (not awaited)
                    |
                    v
               response (MISS)
"""
import time

from tileproxy.response import Response, JSONResponse
from tileproxy.request.tile import tile_request, InvalidTileRequest
from tileproxy.service.base import Server
from tileproxy.service.health import utc_timestamp
from tileproxy.source.registry import random_subdomain
from tileproxy.source.tile import TileSource, UpstreamRejected, UpstreamTimeout
from tileproxy.util.async_ import BackgroundWorker

import logging
log = logging.getLogger('tileproxy.tiles')

DEFAULT_MAX_TILE_AGE = 60 * 60 * 24 * 7


def elapsed_ms(start_time):
    return int((time.time() - start_time) * 1000)


class TileServer(Server):
    """
    Serves ``/tiles/{source}/{z}/{x}/{y}`` from the cache or the upstream
    source.

    Cache failures are logged and handled like a cache miss. Fetched tiles
    are stored with the `cache_writer` in the background; the response
    never waits for the cache write and cache write errors never reach
    the client.

    :param registry: the `SourceRegistry` with all valid sources
    :param cache: a `TileCacheBase` implementation
    :param http_client: the `HTTPClient` for upstream requests
    :param cache_writer: `BackgroundWorker` for cache writes
    """
    names = ('tiles', )
    request_parser = staticmethod(tile_request)
    request_methods = ('GET', 'OPTIONS')

    def __init__(self, registry, cache, http_client, cache_writer=None,
                 max_tile_age=DEFAULT_MAX_TILE_AGE, access_control_allow_origin='*',
                 pick_subdomain=random_subdomain):
        Server.__init__(self)
        self.registry = registry
        self.cache = cache
        self.sources = dict(
            (name, TileSource(conf, http_client, pick_subdomain=pick_subdomain))
            for name, conf in registry.items()
        )
        if cache_writer is None:
            cache_writer = BackgroundWorker()
        self.cache_writer = cache_writer
        self.max_tile_age = max_tile_age
        self.access_control_allow_origin = access_control_allow_origin

    def handle(self, req):
        if req.method == 'OPTIONS':
            return self.preflight()
        return Server.handle(self, req)

    def preflight(self):
        resp = Response(b'', status=200)
        resp.cors_headers(self.access_control_allow_origin or '*',
                          methods=self.request_methods, headers=['Content-Type'])
        return resp

    def map(self, tile_request):
        """
        :return: the requested tile
        :rtype: Response
        """
        start_time = time.time()
        try:
            coord = tile_request.validate(self.registry)
        except InvalidTileRequest as e:
            log.info('rejected %s: %s (%dms)', tile_request, e.msg, elapsed_ms(start_time))
            raise

        try:
            return self.serve_tile(coord, start_time)
        except Exception:
            log.exception('unexpected error for %s (%dms)', coord, elapsed_ms(start_time))
            return Response('Internal server error', status=500, mimetype='text/plain')

    def serve_tile(self, coord, start_time):
        image = self.load_cached_tile(coord)
        if image is not None:
            elapsed = elapsed_ms(start_time)
            log.info('HIT %s (%dms)', coord, elapsed)
            return self.tile_response(image, 'HIT', elapsed)

        log.info('MISS %s - fetching from upstream', coord)
        outcome = self.sources[coord.source].fetch(coord)
        if not outcome.ok:
            return self.fetch_error_response(coord, outcome, start_time)

        self.cache_writer.submit(self.store_tile, coord, outcome.image)

        elapsed = elapsed_ms(start_time)
        log.info('FETCHED %s (%dms)', coord, elapsed)
        return self.tile_response(outcome.image, 'MISS', elapsed)

    def load_cached_tile(self, coord):
        try:
            return self.cache.load_tile(coord)
        except Exception as e:
            # the cache is an optimization, fall through to upstream
            log.error('cache error for %s: %s', coord, e)
            return None

    def store_tile(self, coord, image):
        start_time = time.time()
        try:
            stored = self.cache.store_tile(coord, image)
        except Exception as e:
            log.error('failed to cache %s: %s', coord, e)
            return False
        if stored:
            log.debug('STORED %s (%dms)', coord, elapsed_ms(start_time))
        else:
            log.warning('cache did not store %s', coord)
        return stored

    def tile_response(self, image, cache_status, elapsed):
        resp = Response(image.data, content_type=image.content_type)
        resp.cache_headers(max_age=self.max_tile_age, immutable=True)
        resp.headers['X-Cache-Status'] = cache_status
        resp.headers['X-Cache-Time'] = '%dms' % (elapsed, )
        resp.cors_headers(self.access_control_allow_origin)
        return resp

    def fetch_error_response(self, coord, outcome, start_time):
        elapsed = elapsed_ms(start_time)
        if isinstance(outcome, UpstreamRejected):
            log.error('upstream error %d for %s (%dms)', outcome.status, coord, elapsed)
            if outcome.status < 400:
                # redirects, 304 and empty 2xx responses carry no tile
                return Response('Upstream error', status=502, mimetype='text/plain')
            msg = 'Tile not found' if outcome.status == 404 else 'Upstream error'
            return Response(msg, status=outcome.status, mimetype='text/plain')
        if isinstance(outcome, UpstreamTimeout):
            log.error('timeout fetching %s after %dms (limit %ss)', coord, elapsed, outcome.timeout)
            return Response('Tile request timeout', status=504, mimetype='text/plain')
        log.error('fetch error for %s (%dms): %s', coord, elapsed, getattr(outcome, 'cause', outcome))
        return Response('Failed to fetch tile', status=502, mimetype='text/plain')

    def stats(self, tile_request):
        try:
            cache_stats = self.cache.stats()
        except Exception as e:
            log.error('failed to retrieve cache statistics: %s', e)
            return JSONResponse({
                'status': 'error',
                'error': 'Failed to retrieve cache statistics',
            }, status=500)
        return JSONResponse({
            'status': 'ok',
            'cache': cache_stats,
            'sources': sorted(self.registry),
            'timestamp': utc_timestamp(),
        })
