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

import random

import pytest

from tileproxy.config.config import load_default_config
from tileproxy.source.registry import (
    SourceRegistry,
    TileSourceConfig,
    RoundRobinSubdomains,
    random_subdomain,
)


class TestTileSourceConfig(object):
    def test_defaults(self):
        conf = TileSourceConfig('streets', 'http://localhost/{z}/{x}/{y}.png')
        assert conf.content_type == 'image/png'
        assert conf.timeout == 10.0
        assert conf.subdomains == ('a', 'b', 'c', 'd')
        assert not conf.uses_subdomains

    def test_immutable(self):
        conf = TileSourceConfig('streets', 'http://localhost/{z}/{x}/{y}.png')
        with pytest.raises(AttributeError):
            conf.url = 'http://example.org/{z}/{x}/{y}'
        assert conf.url == 'http://localhost/{z}/{x}/{y}.png'

    def test_tile_url(self):
        conf = TileSourceConfig('topo', 'http://localhost/tile/{z}/{y}/{x}')
        assert conf.tile_url(3, 4, 2) == 'http://localhost/tile/3/2/4'

    def test_tile_url_subdomains(self):
        conf = TileSourceConfig('dark', 'http://{s}.localhost/{z}/{x}/{y}.png',
            subdomains=['a', 'b', 'c'])
        pick = RoundRobinSubdomains()
        urls = [conf.tile_url(1, 0, 1, pick_subdomain=pick) for _ in range(4)]
        assert urls == [
            'http://a.localhost/1/0/1.png',
            'http://b.localhost/1/0/1.png',
            'http://c.localhost/1/0/1.png',
            'http://a.localhost/1/0/1.png',
        ]

    def test_random_subdomain(self):
        random.seed(42)
        conf = TileSourceConfig('dark', 'http://{s}.localhost/{z}/{x}/{y}.png')
        seen = set()
        for _ in range(200):
            url = conf.tile_url(0, 0, 0)
            assert url.endswith('.localhost/0/0/0.png')
            seen.add(url.split('.', 1)[0])
        assert seen == {'http://a', 'http://b', 'http://c', 'http://d'}

    def test_random_subdomain_single(self):
        assert random_subdomain(('x', )) == 'x'

    def test_equal(self):
        a = TileSourceConfig('streets', 'http://localhost/{z}/{x}/{y}.png', timeout=5)
        b = TileSourceConfig('streets', 'http://localhost/{z}/{x}/{y}.png', timeout=5.0)
        assert a == b
        assert hash(a) == hash(b)
        assert a != TileSourceConfig('streets', 'http://localhost/{z}/{x}/{y}.png')


class TestSourceRegistry(object):
    def setup_method(self):
        self.registry = SourceRegistry([
            TileSourceConfig('streets', 'http://localhost/{z}/{x}/{y}.png'),
            TileSourceConfig('satellite', 'http://localhost/{z}/{y}/{x}', content_type='image/jpeg'),
        ])

    def test_resolve(self):
        assert self.registry.resolve('streets').name == 'streets'
        assert self.registry.resolve('satellite').content_type == 'image/jpeg'

    def test_resolve_exact_names_only(self):
        assert self.registry.resolve('STREETS') is None
        assert self.registry.resolve('street') is None
        assert self.registry.resolve('') is None
        assert self.registry.resolve(None) is None
        assert self.registry.resolve(['streets']) is None

    def test_mapping(self):
        assert 'streets' in self.registry
        assert 'unknown' not in self.registry
        assert len(self.registry) == 2
        assert sorted(self.registry) == ['satellite', 'streets']

    def test_read_only(self):
        with pytest.raises(TypeError):
            self.registry.sources['evil'] = TileSourceConfig('evil', 'http://evil/{z}/{x}/{y}')
        assert 'evil' not in self.registry

    def test_from_config(self):
        registry = SourceRegistry.from_config({
            'osm': {'url': 'http://localhost/{z}/{x}/{y}.png'},
            'dark': {
                'url': 'http://{s}.localhost/{z}/{x}/{y}.png',
                'timeout': 3,
                'subdomains': ['x', 'y'],
                'content_type': 'image/webp',
            },
        }, default_timeout=7, default_subdomains=['q'])
        assert registry.resolve('osm').timeout == 7.0
        assert registry.resolve('osm').subdomains == ('q', )
        dark = registry.resolve('dark')
        assert dark.timeout == 3.0
        assert dark.subdomains == ('x', 'y')
        assert dark.content_type == 'image/webp'

    def test_default_sources(self):
        conf = load_default_config()
        registry = SourceRegistry.from_config(conf.sources, default_timeout=10)
        assert sorted(registry) == sorted([
            'satellite', 'terrain', 'streets', 'topo', 'dark', 'voyager', 'labels',
            'opentopo', 'cyclosm', 'usgs_imagery', 'usgs_topo', 'openseamap', 'mtbmap',
        ])
        assert registry.resolve('satellite').timeout == 15.0
        assert registry.resolve('satellite').content_type == 'image/jpeg'
        assert registry.resolve('streets').tile_url(3, 4, 2) == 'https://tile.openstreetmap.org/3/4/2.png'
        assert registry.resolve('opentopo').subdomains == ('a', 'b', 'c')
        for name, source in registry.items():
            url = source.tile_url(1, 0, 1)
            assert '{' not in url, name
