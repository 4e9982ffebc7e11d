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
Configuration loading and system initializing.
"""
import os

from tileproxy.config.config import load_default_config, load_config
from tileproxy.config.validator import validate
from tileproxy.util.yaml import load_yaml_file, YAMLError

import logging
log = logging.getLogger('tileproxy.config')


class ConfigurationError(Exception):
    pass


def load_configuration(tileproxy_conf=None):
    """
    Load, validate and initialize the configuration.

    :param tileproxy_conf: the file name of the ``tileproxy.yaml``, or
        ``None`` to run with the built-in defaults
    :rtype: `ProxyConfiguration`
    """
    if tileproxy_conf is None:
        return ProxyConfiguration({}, conf_base_dir=os.getcwd())

    conf_base_dir = os.path.abspath(os.path.dirname(tileproxy_conf))
    try:
        conf_dict = load_yaml_file(tileproxy_conf)
    except (YAMLError, OSError) as ex:
        raise ConfigurationError(ex)

    errors = validate(conf_dict)
    for error in errors:
        log.warning(error)
    if errors:
        raise ConfigurationError('invalid configuration: ' + '; '.join(errors))

    conf = ProxyConfiguration(conf_dict, conf_base_dir=conf_base_dir)
    conf.config_files[os.path.abspath(tileproxy_conf)] = os.path.getmtime(tileproxy_conf)
    return conf


class ProxyConfiguration(object):
    """
    Builds the source registry, the cache, the HTTP client and the
    services from a validated configuration dictionary.
    """
    def __init__(self, conf, conf_base_dir=None):
        self.configuration = conf
        self.conf_base_dir = conf_base_dir
        self.config_files = {}

        self.globals = load_default_config()
        load_config(self.globals, config_dict=conf.get('globals', {}))
        self.cache_conf = self.globals.cache
        load_config(self.cache_conf, config_dict=conf.get('cache', {}))

        self._registry = None
        self._cache = None
        self._http_client = None
        self._cache_writer = None

    @property
    def base_config(self):
        return self.globals

    def sources_conf(self):
        # a configured sources section replaces the built-in sources
        if self.configuration.get('sources'):
            return self.configuration['sources']
        return self.globals.sources

    @property
    def source_registry(self):
        if self._registry is None:
            from tileproxy.source.registry import SourceRegistry
            self._registry = SourceRegistry.from_config(
                self.sources_conf(),
                default_timeout=self.globals.http.client_timeout,
                default_subdomains=self.globals.subdomains,
            )
        return self._registry

    @property
    def http_client(self):
        if self._http_client is None:
            from tileproxy.client.http import HTTPClient
            http = self.globals.http
            ssl_ca_certs = http.get('ssl_ca_certs')
            if ssl_ca_certs:
                ssl_ca_certs = os.path.join(self.conf_base_dir or '', ssl_ca_certs)
            self._http_client = HTTPClient(
                timeout=http.client_timeout,
                user_agent=http.get('user_agent'),
                insecure=http.get('ssl_no_cert_checks', False),
                ssl_ca_certs=ssl_ca_certs,
                hide_error_details=not self.globals.debug_mode,
            )
        return self._http_client

    @property
    def cache(self):
        if self._cache is None:
            self._cache = self._init_cache()
        return self._cache

    def _init_cache(self):
        conf = self.cache_conf
        if conf.type == 'memory':
            from tileproxy.cache.memory import MemoryCache
            return MemoryCache(ttl=conf.get('ttl'))

        if conf.type == 'redis':
            from tileproxy.cache.redis import RedisCache
            url = conf.get('url') or os.environ.get('REDIS_URL')
            log.info('using redis cache at %s', url or '%s:%s' % (conf.host, conf.port))
            return RedisCache(
                url=url,
                host=conf.host,
                port=conf.port,
                db=conf.db,
                prefix=conf.prefix,
                ttl=conf.get('ttl'),
                username=conf.get('username'),
                password=conf.get('password'),
                socket_timeout=conf.socket_timeout,
            )

        raise ConfigurationError('unknown cache type: %s' % (conf.type, ))

    @property
    def cache_writer(self):
        if self._cache_writer is None:
            from tileproxy.util.async_ import BackgroundWorker
            writer = self.globals.cache_writer
            self._cache_writer = BackgroundWorker(
                size=writer.threads, queue_size=writer.queue_size, name='tileproxy-cache-writer')
        return self._cache_writer

    def configured_services(self):
        from tileproxy.service.tile import TileServer
        from tileproxy.service.health import HealthServer
        tile_server = TileServer(
            self.source_registry,
            self.cache,
            self.http_client,
            cache_writer=self.cache_writer,
            max_tile_age=self.globals.tiles.max_age,
            access_control_allow_origin=self.globals.http.access_control_allow_origin,
        )
        return [tile_server, HealthServer()]
