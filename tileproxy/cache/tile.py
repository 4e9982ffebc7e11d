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
Tile coordinates and tile images.

A `TileCoord` addresses one tile of a source in the web mercator tile
pyramid, where zoom level ``z`` has ``2**z`` x ``2**z`` tiles. A `TileImage`
is the encoded tile as returned by the upstream server or the cache.
"""
from collections import namedtuple

MAX_ZOOM = 22


class TileCoord(namedtuple('TileCoord', ['source', 'z', 'x', 'y'])):
    """
    Immutable ``(source, z, x, y)`` tile address.

    >>> TileCoord('streets', 3, 4, 2).is_valid()
    True
    >>> TileCoord('streets', 3, 9, 2).is_valid()
    False
    >>> str(TileCoord('streets', 3, 4, 2))
    'streets/3/4/2'
    """
    __slots__ = ()

    @property
    def max_tile(self):
        return 2 ** self.z

    def is_valid(self):
        if not 0 <= self.z <= MAX_ZOOM:
            return False
        return 0 <= self.x < self.max_tile and 0 <= self.y < self.max_tile

    def neighbours(self, radius=1):
        """
        Return all valid coordinates within `radius` tiles of this tile,
        without the tile itself.

        >>> [(c.x, c.y) for c in TileCoord('streets', 1, 0, 0).neighbours()]
        [(0, 1), (1, 0), (1, 1)]
        """
        result = []
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                if dx == 0 and dy == 0:
                    continue
                coord = self._replace(x=self.x + dx, y=self.y + dy)
                if coord.is_valid():
                    result.append(coord)
        return result

    def __str__(self):
        return '%s/%d/%d/%d' % (self.source, self.z, self.x, self.y)


class TileImage(object):
    """
    Encoded tile data with its content type.
    """
    def __init__(self, data, content_type):
        self.data = data
        self.content_type = content_type

    @property
    def size(self):
        return len(self.data)

    def __eq__(self, other):
        if not isinstance(other, TileImage):
            return NotImplemented
        return self.data == other.data and self.content_type == other.content_type

    def __ne__(self, other):
        equal = self.__eq__(other)
        return equal if equal is NotImplemented else not equal

    def __repr__(self):
        return '%s(<%d bytes>, %r)' % (self.__class__.__name__, self.size, self.content_type)
