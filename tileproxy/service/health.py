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

import datetime

from tileproxy.response import JSONResponse
from tileproxy.service.base import Server


def utc_timestamp():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class HealthRequest(object):
    request_handler_name = 'health'

    def __init__(self, request):
        self.http = request


class HealthServer(Server):
    """
    Liveness check. Does not touch the cache or any upstream server.
    """
    names = ('health', )
    request_parser = staticmethod(HealthRequest)

    def health(self, req):
        return JSONResponse({'status': 'ok', 'timestamp': utc_timestamp()})
