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
Service handler (tiles, health, etc.).
"""
from tileproxy.exception import RequestError
from tileproxy.response import Response


class Server(object):
    names = tuple()
    request_parser = lambda x: None
    request_methods = ('GET', )

    def handle(self, req):
        if req.method not in self.request_methods:
            return self.method_not_allowed()
        try:
            parsed_req = self.parse_request(req)
            handler = getattr(self, parsed_req.request_handler_name)
            return handler(parsed_req)
        except RequestError as e:
            return e.render()

    def parse_request(self, req):
        return self.request_parser(req)

    def method_not_allowed(self):
        return Response('method not allowed', status=405,
                        headers={'Allow': ', '.join(self.request_methods)})
