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

from tileproxy.response import Response, JSONResponse, status_code


class StartResponse(object):
    def __init__(self):
        self.status = None
        self.headers = None

    def __call__(self, status, headers):
        self.status = status
        self.headers = dict(headers)


def test_status_code():
    assert status_code(200) == '200 OK'
    assert status_code(504) == '504 Gateway Timeout'
    assert status_code(599) == '599 Unknown'


class TestResponse(object):
    def test_defaults(self):
        resp = Response(b'data')
        assert resp.status == '200 OK'
        assert resp.status_code == 200
        assert resp.content_type == 'text/plain'

    def test_text_mimetype(self):
        resp = Response('not found', status=404, mimetype='text/plain')
        assert resp.status == '404 Not Found'
        assert resp.content_type == 'text/plain; charset=utf-8'
        assert resp.data == b'not found'

    def test_cache_headers(self):
        resp = Response(b'')
        resp.cache_headers(max_age=604800, immutable=True)
        assert resp.headers['Cache-Control'] == 'public, max-age=604800, immutable'
        resp.cache_headers(max_age=60)
        assert resp.headers['Cache-Control'] == 'public, max-age=60'

    def test_no_cache(self):
        resp = Response(b'')
        resp.cache_headers(no_cache=True)
        assert resp.headers['Cache-Control'] == 'no-cache, no-store'
        assert resp.headers['Expires'] == '-1'

    def test_cors_headers(self):
        resp = Response(b'')
        resp.cors_headers('*', methods=('GET', 'OPTIONS'), headers=['Content-Type'])
        assert resp.headers['Access-Control-Allow-Origin'] == '*'
        assert resp.headers['Access-Control-Allow-Methods'] == 'GET, OPTIONS'
        assert resp.headers['Access-Control-Allow-Headers'] == 'Content-Type'

    def test_wsgi(self):
        resp = Response(b'tile', content_type='image/png', headers={'X-Cache-Status': 'HIT'})
        start_response = StartResponse()
        body = resp({'REQUEST_METHOD': 'GET'}, start_response)
        assert b''.join(body) == b'tile'
        assert start_response.status == '200 OK'
        assert start_response.headers == {
            'Content-Type': 'image/png',
            'Content-Length': '4',
            'X-Cache-Status': 'HIT',
        }

    def test_wsgi_head(self):
        resp = Response(b'tile', content_type='image/png')
        start_response = StartResponse()
        body = resp({'REQUEST_METHOD': 'HEAD'}, start_response)
        assert list(body) == []
        assert start_response.headers['Content-Length'] == '4'


def test_json_response():
    resp = JSONResponse({'status': 'ok'}, status=500)
    assert resp.status_code == 500
    assert resp.content_type == 'application/json'
    assert resp.data == b'{"status": "ok"}'
