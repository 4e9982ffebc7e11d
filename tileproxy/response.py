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
Service responses.
"""
import json
from http.client import responses as _status_reasons


class Response(object):
    charset = 'utf-8'
    default_content_type = 'text/plain'

    def __init__(self, response, status=None, content_type=None, mimetype=None, headers=None):
        self.response = response
        if status is None:
            status = 200
        self.status = status
        self.headers = {}
        if mimetype:
            if mimetype.startswith('text/'):
                content_type = mimetype + '; charset=' + self.charset
            else:
                content_type = mimetype
        if content_type is None:
            content_type = self.default_content_type
        self.headers['Content-Type'] = content_type
        if headers:
            self.headers.update(headers)

    def _status_set(self, status):
        if isinstance(status, int):
            status = status_code(status)
        self._status = status

    def _status_get(self):
        return self._status

    status = property(_status_get, _status_set)

    @property
    def status_code(self):
        return int(self._status.split(' ', 1)[0])

    def cache_headers(self, max_age=None, immutable=False, no_cache=False):
        """
        Set the ``Cache-Control`` header.

        :param max_age: the maximum cache age in seconds
        :param immutable: clients do not need to revalidate before `max_age`
        """
        if no_cache:
            assert not max_age
            self.headers['Cache-Control'] = 'no-cache, no-store'
            self.headers['Pragma'] = 'no-cache'
            self.headers['Expires'] = '-1'
        elif max_age is not None:
            value = 'public, max-age=%d' % (max_age, )
            if immutable:
                value += ', immutable'
            self.headers['Cache-Control'] = value

    def cors_headers(self, allow_origin='*', methods=None, headers=None):
        if allow_origin:
            self.headers['Access-Control-Allow-Origin'] = allow_origin
        if methods:
            self.headers['Access-Control-Allow-Methods'] = ', '.join(methods)
        if headers:
            self.headers['Access-Control-Allow-Headers'] = ', '.join(headers)

    @property
    def content_type(self):
        return self.headers['Content-Type']

    @property
    def data(self):
        if isinstance(self.response, str):
            return self.response.encode(self.charset)
        return self.response or b''

    def __call__(self, environ, start_response):
        body = self.data
        self.headers['Content-Length'] = str(len(body))
        start_response(self.status, [(k, str(v)) for k, v in self.headers.items()])
        if environ.get('REQUEST_METHOD') == 'HEAD' or not body:
            return iter([])
        return iter([body])


class JSONResponse(Response):
    def __init__(self, doc, status=None, headers=None):
        Response.__init__(self, json.dumps(doc), status=status,
                          content_type='application/json', headers=headers)


def status_code(code):
    return '%d %s' % (code, _status_reasons.get(code, 'Unknown'))
