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
Retrieve tiles from the upstream tile servers.
"""
import time

from tileproxy.cache.tile import TileImage
from tileproxy.client.http import HTTPClientError, HTTPClientTimeout
from tileproxy.source.registry import random_subdomain

import logging
log = logging.getLogger('tileproxy.source.tile')


class FetchOutcome(object):
    """
    Result of a single upstream request.
    """
    ok = False
    image = None
    duration = None

    def __repr__(self):
        return '%s()' % (self.__class__.__name__, )


class FetchSuccess(FetchOutcome):
    ok = True

    def __init__(self, image):
        self.image = image

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.image)


class UpstreamRejected(FetchOutcome):
    """
    The upstream server answered with a non-2xx status or without a tile
    (e.g. 204 No Content).
    """
    def __init__(self, status):
        self.status = status

    def __repr__(self):
        return '%s(%d)' % (self.__class__.__name__, self.status)


class UpstreamTimeout(FetchOutcome):
    def __init__(self, timeout):
        self.timeout = timeout

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.timeout)


class UpstreamTransportError(FetchOutcome):
    def __init__(self, cause):
        self.cause = cause

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.cause)


class TileSource(object):
    """
    Fetches tiles of one configured source. Makes exactly one request per
    call and never retries.
    """
    def __init__(self, conf, client, pick_subdomain=random_subdomain):
        self.conf = conf
        self.client = client
        self.pick_subdomain = pick_subdomain

    @property
    def name(self):
        return self.conf.name

    def tile_url(self, coord):
        return self.conf.tile_url(coord.z, coord.x, coord.y, pick_subdomain=self.pick_subdomain)

    def fetch(self, coord):
        """
        Request `coord` from the upstream server.

        :rtype: `FetchOutcome`
        """
        url = self.tile_url(coord)
        start_time = time.time()
        try:
            resp = self.client.open(url, timeout=self.conf.timeout)
        except HTTPClientTimeout as e:
            log.warning('timeout fetching %s: %s', coord, e.full_msg or e)
            outcome = UpstreamTimeout(self.conf.timeout)
        except HTTPClientError as e:
            if e.response_code is not None:
                log.warning('upstream error %d for %s', e.response_code, coord)
                outcome = UpstreamRejected(e.response_code)
            else:
                log.warning('could not retrieve tile %s: %s', coord, e.full_msg or e)
                outcome = UpstreamTransportError(e)
        else:
            if resp.body:
                content_type = resp.content_type or self.conf.content_type
                outcome = FetchSuccess(TileImage(resp.body, content_type))
            else:
                log.warning('empty response (%d) for %s', resp.code, coord)
                outcome = UpstreamRejected(resp.code)
        outcome.duration = time.time() - start_time
        return outcome

    def __repr__(self):
        return '%s(%r, %r)' % (self.__class__.__name__, self.conf, self.client)
