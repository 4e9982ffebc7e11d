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

import pytest

from tileproxy.cache.tile import TileCoord, TileImage
from tileproxy.client.http import HTTPClientError, HTTPClientTimeout, HTTPResult
from tileproxy.source.registry import TileSourceConfig, RoundRobinSubdomains
from tileproxy.source.tile import (
    TileSource,
    FetchSuccess,
    UpstreamRejected,
    UpstreamTimeout,
    UpstreamTransportError,
)


class MockHTTPClient(object):
    """
    Records all requested URLs and returns or raises `result`.
    """
    def __init__(self, result=None):
        self.result = result
        self.requested = []

    def open(self, url, timeout=None):
        self.requested.append((url, timeout))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def result(body=b'tile', content_type='image/png'):
    headers = {'Content-Type': content_type} if content_type else {}
    return HTTPResult('http://localhost/', 200, headers, body)


class TestTileSource(object):
    def setup_method(self):
        self.conf = TileSourceConfig('streets', 'http://localhost/{z}/{x}/{y}.png', timeout=3)
        self.coord = TileCoord('streets', 3, 4, 2)

    def test_success(self):
        client = MockHTTPClient(result(b'png data'))
        outcome = TileSource(self.conf, client).fetch(self.coord)
        assert isinstance(outcome, FetchSuccess)
        assert outcome.ok
        assert outcome.image == TileImage(b'png data', 'image/png')
        assert outcome.duration >= 0
        assert client.requested == [('http://localhost/3/4/2.png', 3.0)]

    def test_upstream_content_type(self):
        client = MockHTTPClient(result(b'jpeg data', content_type='image/jpeg'))
        outcome = TileSource(self.conf, client).fetch(self.coord)
        assert outcome.image.content_type == 'image/jpeg'

    def test_default_content_type(self):
        conf = TileSourceConfig('topo', 'http://localhost/{z}/{y}/{x}', content_type='image/jpeg')
        client = MockHTTPClient(result(b'data', content_type=None))
        outcome = TileSource(conf, client).fetch(self.coord)
        assert outcome.image.content_type == 'image/jpeg'
        assert client.requested[0][0] == 'http://localhost/3/2/4'

    @pytest.mark.parametrize('status', [404, 403, 500, 503])
    def test_rejected(self, status):
        client = MockHTTPClient(HTTPClientError('HTTP Error', response_code=status))
        outcome = TileSource(self.conf, client).fetch(self.coord)
        assert isinstance(outcome, UpstreamRejected)
        assert not outcome.ok
        assert outcome.image is None
        assert outcome.status == status

    @pytest.mark.parametrize('status', [304, 302])
    def test_rejected_without_tile(self, status):
        client = MockHTTPClient(HTTPClientError('HTTP Error', response_code=status))
        outcome = TileSource(self.conf, client).fetch(self.coord)
        assert isinstance(outcome, UpstreamRejected)
        assert outcome.status == status

    @pytest.mark.parametrize('status', [200, 204])
    def test_empty_body(self, status):
        client = MockHTTPClient(HTTPResult('http://localhost/', status, {}, b''))
        outcome = TileSource(self.conf, client).fetch(self.coord)
        assert isinstance(outcome, UpstreamRejected)
        assert outcome.status == status
        assert outcome.image is None
        assert not outcome.ok

    def test_timeout(self):
        client = MockHTTPClient(HTTPClientTimeout('timeout'))
        outcome = TileSource(self.conf, client).fetch(self.coord)
        assert isinstance(outcome, UpstreamTimeout)
        assert outcome.timeout == 3.0
        assert not outcome.ok

    def test_transport_error(self):
        error = HTTPClientError('No response from URL')
        client = MockHTTPClient(error)
        outcome = TileSource(self.conf, client).fetch(self.coord)
        assert isinstance(outcome, UpstreamTransportError)
        assert outcome.cause is error
        assert not outcome.ok

    def test_single_request(self):
        client = MockHTTPClient(HTTPClientError('HTTP Error', response_code=500))
        TileSource(self.conf, client).fetch(self.coord)
        assert len(client.requested) == 1

    def test_subdomains(self):
        conf = TileSourceConfig('dark', 'http://{s}.localhost/{z}/{x}/{y}.png', subdomains=['a', 'b'])
        client = MockHTTPClient(result())
        source = TileSource(conf, client, pick_subdomain=RoundRobinSubdomains())
        source.fetch(self.coord)
        source.fetch(self.coord)
        assert [url for url, _ in client.requested] == [
            'http://a.localhost/3/4/2.png',
            'http://b.localhost/3/4/2.png',
        ]
