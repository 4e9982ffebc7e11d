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
Registry of the upstream tile sources.
"""
import itertools
import random
import threading
from types import MappingProxyType

DEFAULT_SUBDOMAINS = ('a', 'b', 'c', 'd')


def random_subdomain(subdomains):
    """
    Choose one of the equivalent `subdomains` uniformly at random.
    """
    return random.choice(subdomains)


class RoundRobinSubdomains(object):
    """
    Deterministic replacement for `random_subdomain`.

    >>> pick = RoundRobinSubdomains()
    >>> [pick(('a', 'b', 'c')) for _ in range(4)]
    ['a', 'b', 'c', 'a']
    """
    def __init__(self):
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def __call__(self, subdomains):
        with self._lock:
            n = next(self._counter)
        return subdomains[n % len(subdomains)]


class TileSourceConfig(object):
    """
    Immutable configuration of one upstream tile source.

    :param url: URL template with ``{z}``, ``{x}``, ``{y}`` and optionally
        ``{s}`` placeholders
    :param content_type: content type of the tiles if the upstream server
        does not send one
    :param timeout: timeout in seconds for a single tile request
    :param subdomains: the tokens for ``{s}``
    """
    __slots__ = ('name', 'url', 'content_type', 'timeout', 'subdomains')

    def __init__(self, name, url, content_type='image/png', timeout=10, subdomains=DEFAULT_SUBDOMAINS):
        for attr, value in (
            ('name', name),
            ('url', url),
            ('content_type', content_type),
            ('timeout', float(timeout)),
            ('subdomains', tuple(subdomains or DEFAULT_SUBDOMAINS)),
        ):
            object.__setattr__(self, attr, value)

    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable' % (self.__class__.__name__, ))

    @property
    def uses_subdomains(self):
        return '{s}' in self.url

    def tile_url(self, z, x, y, pick_subdomain=random_subdomain):
        """
        Return the upstream URL for the tile.

        >>> conf = TileSourceConfig('dark', 'https://{s}.example.org/{z}/{x}/{y}.png', subdomains=['b'])
        >>> conf.tile_url(3, 4, 2)
        'https://b.example.org/3/4/2.png'
        """
        url = self.url
        if self.uses_subdomains:
            url = url.replace('{s}', pick_subdomain(self.subdomains))
        return (url
            .replace('{z}', str(z))
            .replace('{x}', str(x))
            .replace('{y}', str(y)))

    def __eq__(self, other):
        if not isinstance(other, TileSourceConfig):
            return NotImplemented
        return all(getattr(self, attr) == getattr(other, attr) for attr in self.__slots__)

    def __hash__(self):
        return hash(tuple(getattr(self, attr) for attr in self.__slots__))

    def __repr__(self):
        return '%s(%r, %r, content_type=%r, timeout=%r)' % (
            self.__class__.__name__, self.name, self.url, self.content_type, self.timeout)


class SourceRegistry(object):
    """
    Read-only mapping of source names to `TileSourceConfig`.
    Only exact names resolve.
    """
    def __init__(self, sources):
        self._sources = MappingProxyType(dict((s.name, s) for s in sources))

    @classmethod
    def from_config(cls, sources_conf, default_timeout=10, default_subdomains=DEFAULT_SUBDOMAINS):
        """
        Create registry from the ``sources`` section of the configuration.
        """
        sources = []
        for name, conf in sources_conf.items():
            sources.append(TileSourceConfig(
                name,
                conf['url'],
                content_type=conf.get('content_type', 'image/png'),
                timeout=conf.get('timeout', default_timeout),
                subdomains=conf.get('subdomains', default_subdomains),
            ))
        return cls(sources)

    @property
    def sources(self):
        return self._sources

    def resolve(self, name):
        """
        Return the `TileSourceConfig` for `name` or ``None``.
        """
        if not isinstance(name, str):
            return None
        return self._sources.get(name)

    def __contains__(self, name):
        return self.resolve(name) is not None

    def __iter__(self):
        return iter(self._sources)

    def __len__(self):
        return len(self._sources)

    def items(self):
        return self._sources.items()
