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
The WSGI application.
"""
import os
import re

from tileproxy.request.base import Request
from tileproxy.response import Response
from tileproxy.config.loader import load_configuration, ConfigurationError

import logging
log = logging.getLogger('tileproxy.config')
log_wsgiapp = logging.getLogger('tileproxy.wsgiapp')


def init_logging_system(log_conf, base_dir):
    """
    Configure logging from a `logging.config.fileConfig` ini file.
    ``%(here)s`` in the file refers to `base_dir`.
    """
    import logging.config
    if not os.path.exists(log_conf):
        raise ConfigurationError('log configuration %s not found' % (log_conf, ))
    logging.config.fileConfig(log_conf, dict(here=base_dir), disable_existing_loggers=False)


def make_wsgi_app(services_conf=None, debug=False, log_conf=None):
    """
    Create a TileProxyApp with the given services conf.

    :param services_conf: the file name of the tileproxy.yaml configuration,
        ``None`` for the built-in sources and defaults
    :param log_conf: optional logging ini file
    """
    if log_conf:
        init_logging_system(log_conf, os.path.dirname(os.path.abspath(log_conf)))

    try:
        conf = load_configuration(services_conf)
        if debug:
            conf.globals.debug_mode = True
        services = conf.configured_services()
    except ConfigurationError as e:
        log.fatal(e)
        raise

    app = TileProxyApp(services, conf.base_config)
    if debug:
        from werkzeug.debug import DebuggedApplication
        app = DebuggedApplication(app, evalex=True)
    app.config_files = conf.config_files
    return app


class TileProxyApp(object):
    """
    The TileProxy WSGI application.
    """
    handler_path_re = re.compile(r'^/(\w+)')

    def __init__(self, services, base_config):
        self.handlers = {}
        self.base_config = base_config
        for service in services:
            for name in service.names:
                self.handlers[name] = service

    def __call__(self, environ, start_response):
        resp = None
        req = Request(environ)

        match = self.handler_path_re.match(req.path)
        if match:
            handler_name = match.group(1)
            if handler_name in self.handlers:
                try:
                    resp = self.handlers[handler_name].handle(req)
                except Exception:
                    if self.base_config.debug_mode:
                        raise
                    log_wsgiapp.fatal('fatal error in %s for %s %s',
                        handler_name, req.method, req.path, exc_info=True)
                    resp = Response('Internal server error', status=500, mimetype='text/plain')
        if resp is None:
            if req.path in ('', '/'):
                resp = self.welcome_response(req.script_url)
            else:
                resp = Response('not found', mimetype='text/plain', status=404)
        return resp(environ, start_response)

    def welcome_response(self, script_url):
        from tileproxy.version import version
        html = "<html><body><h1>Welcome to TileProxy %s</h1>" % (version, )
        if 'tiles' in self.handlers:
            tiles = self.handlers['tiles']
            html += '<p>Tiles: <code>%s/tiles/{source}/{z}/{x}/{y}</code></p><ul>' % (script_url, )
            for name in sorted(tiles.registry):
                html += '<li>%s</li>' % (name, )
            html += '</ul>'
        html += '</body></html>'
        return Response(html, mimetype='text/html')
