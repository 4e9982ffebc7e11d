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
Time-to-live of cached tiles.

Static data (terrain) is kept longest, imagery depends on the zoom level
and street maps and labels expire soonest.
"""

DAY = 60 * 60 * 24

DEFAULT_TTL = 7 * DAY

_source_ttls = [
    (('streets', 'road'), 14 * DAY),
    (('hybrid', 'labels', 'boundaries'), 14 * DAY),
    (('dark', 'voyager', 'stamen'), 30 * DAY),
    (('opentopo', 'usgs', 'openseamap', 'mtbmap'), 30 * DAY),
]


def _matches(source, keywords):
    return any(keyword in source for keyword in keywords)


def tile_ttl(source, zoom):
    """
    Return the cache TTL in seconds for a tile of `source` at `zoom`.

    >>> tile_ttl('terrain', 12) // DAY
    180
    >>> tile_ttl('satellite', 16) // DAY, tile_ttl('satellite', 12) // DAY, tile_ttl('satellite', 3) // DAY
    (30, 60, 90)
    >>> tile_ttl('streets', 3) // DAY
    14
    >>> tile_ttl('unknown', 3) // DAY
    7
    """
    if _matches(source, ('terrain', 'elevation')):
        return 180 * DAY

    # higher zoom levels are updated more frequently
    if _matches(source, ('imagery', 'satellite')):
        if zoom >= 15:
            return 30 * DAY
        if zoom >= 10:
            return 60 * DAY
        return 90 * DAY

    for keywords, ttl in _source_ttls:
        if _matches(source, keywords):
            return ttl

    return DEFAULT_TTL
