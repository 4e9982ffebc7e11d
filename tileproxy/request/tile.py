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

import re

from tileproxy.cache.tile import TileCoord, MAX_ZOOM
from tileproxy.exception import RequestError

UNKNOWN_SOURCE = 'unknown_source'
NON_NUMERIC_COORDINATE = 'non_numeric_coordinate'
ZOOM_OUT_OF_RANGE = 'zoom_out_of_range'
COORD_OUT_OF_BOUNDS = 'coord_out_of_bounds'

_reason_messages = {
    UNKNOWN_SOURCE: 'Invalid tile source',
    NON_NUMERIC_COORDINATE: 'Invalid tile coordinates',
    ZOOM_OUT_OF_RANGE: 'Invalid zoom level',
    COORD_OUT_OF_BOUNDS: 'Tile coordinates out of bounds',
}

_int_re = re.compile(r'-?[0-9]+')


class InvalidTileRequest(RequestError):
    """
    The tile request is invalid. `reason` is one of ``UNKNOWN_SOURCE``,
    ``NON_NUMERIC_COORDINATE``, ``ZOOM_OUT_OF_RANGE`` or
    ``COORD_OUT_OF_BOUNDS``.
    """
    def __init__(self, reason, request=None):
        RequestError.__init__(self, _reason_messages[reason], status=400, request=request)
        self.reason = reason


def _parse_int(value):
    if not isinstance(value, str) or not _int_re.fullmatch(value):
        return None
    return int(value)


def validate_tile_coord(registry, source, z, x, y):
    """
    Return the `TileCoord` for the raw request parameters.

    Pure function, performs no I/O.

    :raises InvalidTileRequest: for unknown sources, non-numeric values,
        zoom levels outside of 0..22 and tiles outside of the
        ``2**z`` x ``2**z`` grid of that zoom level
    """
    if registry.resolve(source) is None:
        raise InvalidTileRequest(UNKNOWN_SOURCE)

    zoom, tile_x, tile_y = _parse_int(z), _parse_int(x), _parse_int(y)
    if zoom is None or tile_x is None or tile_y is None:
        raise InvalidTileRequest(NON_NUMERIC_COORDINATE)

    if not 0 <= zoom <= MAX_ZOOM:
        raise InvalidTileRequest(ZOOM_OUT_OF_RANGE)

    coord = TileCoord(source, zoom, tile_x, tile_y)
    if not coord.is_valid():
        raise InvalidTileRequest(COORD_OUT_OF_BOUNDS)
    return coord


class TileRequest(object):
    """
    Class for ``/tiles/{source}/{z}/{x}/{y}`` requests. An image file
    extension of ``y`` is ignored.
    """
    request_handler_name = 'map'
    tile_req_re = re.compile(r'''^/tiles/
            (?P<source>[^/]+)/
            (?P<z>[^/]+)/
            (?P<x>[^/]+)/
            (?P<y>[^/]+?)
            (\.(?P<format>png|jpe?g|webp))?
            /?$''', re.VERBOSE | re.IGNORECASE)
    stats_req_re = re.compile(r'^/tiles/stats/?$')

    def __init__(self, request):
        self.http = request
        self.coord = None
        self.params = None
        self._init_request()

    def _init_request(self):
        """
        Sets ``params`` to the raw ``(source, z, x, y)`` strings.
        :raise RequestError: if the path does not address a tile
        """
        path = self.http.path
        if self.stats_req_re.match(path):
            self.request_handler_name = 'stats'
            return
        match = self.tile_req_re.match(path)
        if not match:
            raise RequestError('not found', status=404, request=self)
        self.params = match.group('source', 'z', 'x', 'y')

    def validate(self, registry):
        self.coord = validate_tile_coord(registry, *self.params)
        return self.coord

    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, '/'.join(self.params or ()))


def tile_request(req):
    return TileRequest(req)
