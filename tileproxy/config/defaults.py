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

debug_mode = False

http = dict(
    # None: 'TileProxy/<version> (Tile Cache Proxy)'
    user_agent = None,
    # default timeout in seconds for sources without their own timeout
    client_timeout = 10,
    ssl_ca_certs = None,
    ssl_no_cert_checks = False,
    access_control_allow_origin = '*',
)

tiles = dict(
    # browser cache lifetime of served tiles (7 days)
    max_age = 604800,
)

cache_writer = dict(
    # worker threads for cache writes, at least one
    threads = 2,
    queue_size = 1000,
)

cache = dict(
    type = 'redis',
    # falls back to the REDIS_URL environment variable, then host/port
    url = None,
    host = 'localhost',
    port = 6379,
    db = 0,
    prefix = 'tile:v1',
    # None: TTL depends on source and zoom level, see tileproxy.cache.ttl
    ttl = None,
    socket_timeout = 2.0,
)

subdomains = ['a', 'b', 'c', 'd']

sources = dict(
    satellite = dict(
        url = 'https://services.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}',
        content_type = 'image/jpeg',
        timeout = 15,
    ),
    terrain = dict(
        url = 'https://s3.amazonaws.com/elevation-tiles-prod/terrarium/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
    ),
    streets = dict(
        url = 'https://tile.openstreetmap.org/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
    ),
    topo = dict(
        url = 'https://server.arcgisonline.com/ArcGIS/rest/services/World_Topo_Map/MapServer/tile/{z}/{y}/{x}',
        content_type = 'image/jpeg',
        timeout = 15,
    ),
    dark = dict(
        url = 'https://{s}.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
    ),
    voyager = dict(
        url = 'https://{s}.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
    ),
    # overlay for any base map
    labels = dict(
        url = 'https://server.arcgisonline.com/ArcGIS/rest/services/Reference/World_Boundaries_and_Places/MapServer/tile/{z}/{y}/{x}',
        content_type = 'image/png',
        timeout = 15,
    ),
    opentopo = dict(
        url = 'https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
        subdomains = ['a', 'b', 'c'],
    ),
    cyclosm = dict(
        url = 'https://a.tile-cyclosm.openstreetmap.fr/cyclosm/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
    ),
    usgs_imagery = dict(
        url = 'https://basemap.nationalmap.gov/ArcGIS/rest/services/USGSImageryOnly/MapServer/tile/{z}/{y}/{x}',
        content_type = 'image/jpeg',
        timeout = 15,
    ),
    usgs_topo = dict(
        url = 'https://basemap.nationalmap.gov/ArcGIS/rest/services/USGSImageryTopo/MapServer/tile/{z}/{y}/{x}',
        content_type = 'image/jpeg',
        timeout = 15,
    ),
    openseamap = dict(
        url = 'https://t1.openseamap.org/tiles/base/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
    ),
    mtbmap = dict(
        url = 'http://tile.mtbmap.cz/mtbmap_tiles/{z}/{x}/{y}.png',
        content_type = 'image/png',
        timeout = 10,
    ),
)
