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
Service exception handling.
"""
from tileproxy.response import Response


class RequestError(Exception):
    """
    Exception for all request related errors. Rendered as a short plain
    text response, without any internal details.

    :ivar status: the HTTP status of the rendered response
    """
    default_status = 400

    def __init__(self, message, status=None, request=None):
        Exception.__init__(self, message)
        self.msg = message
        self.request = request
        self.status = status if status is not None else self.default_status

    def render(self):
        """
        Return a response with the rendered exception.

        :rtype: `Response`
        """
        return Response(self.msg, status=self.status, mimetype='text/plain')

    def __str__(self):
        return 'RequestError("%s", status=%r)' % (self.msg, self.status)
