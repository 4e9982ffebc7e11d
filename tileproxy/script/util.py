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

import io
import os
import optparse
import re
import shutil
import sys
import textwrap
import logging

from tileproxy.version import version


def setup_logging(level=logging.INFO, format=None):
    tileproxy_log = logging.getLogger('tileproxy')
    tileproxy_log.setLevel(level)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    if not format:
        format = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
    formatter = logging.Formatter(format)
    ch.setFormatter(formatter)
    tileproxy_log.addHandler(ch)

def serve_develop_command(args):
    parser = optparse.OptionParser("usage: %prog serve-develop [options] [tileproxy.yaml]")
    parser.add_option("-b", "--bind",
                      dest="address", default='127.0.0.1:8080',
                      help="Server socket [127.0.0.1:8080]. Use 0.0.0.0 for external access. :1234 to change port.")
    parser.add_option("--debug", default=False, action='store_true',
                      dest="debug",
                      help="Enable debug mode")
    parser.add_option("--log-conf", dest="log_conf", default=None,
                      help="logging configuration (log.ini)")
    options, args = parser.parse_args(args)

    if len(args) > 2:
        parser.print_help()
        print("\nERROR: only one TileProxy configuration allowed.")
        sys.exit(1)

    # without a configuration the built-in sources are served
    tileproxy_conf = args[1] if len(args) == 2 else None

    host, port = parse_bind_address(options.address)

    if options.debug and host not in ('localhost', '127.0.0.1'):
        print(textwrap.dedent("""\
        ################# WARNING! ##################
        Running debug mode with non-localhost address
        is a serious security vulnerability.
        #############################################\
        """))

    if not options.log_conf:
        if options.debug:
            setup_logging(level=logging.DEBUG)
        else:
            setup_logging()
    from tileproxy.wsgiapp import make_wsgi_app
    from tileproxy.config.loader import ConfigurationError
    from werkzeug.serving import run_simple
    try:
        app = make_wsgi_app(tileproxy_conf, debug=options.debug, log_conf=options.log_conf)
    except ConfigurationError:
        sys.exit(2)

    extra_files = list(app.config_files.keys())

    run_simple(host, port, app, use_reloader=True,
        threaded=True, passthrough_errors=True,
        extra_files=extra_files)


def parse_bind_address(address, default=('localhost', 8080)):
    """
    >>> parse_bind_address('80')
    ('localhost', 80)
    >>> parse_bind_address('0.0.0.0')
    ('0.0.0.0', 8080)
    >>> parse_bind_address('0.0.0.0:8081')
    ('0.0.0.0', 8081)
    >>> parse_bind_address(':8081')
    ('localhost', 8081)
    """
    if ':' in address:
        host, port = address.split(':', 1)
        port = int(port)
    elif re.match(r'^\d+$', address):
        host = default[0]
        port = int(address)
    else:
        host = address
        port = default[1]

    if not host:
        host = default[0]

    return host, port


def sources_command(args):
    parser = optparse.OptionParser("usage: %prog sources [options] [tileproxy.yaml]")
    parser.add_option("-l", "--list", default=False, action='store_true',
                      dest="list_names",
                      help="only list the source names")
    options, args = parser.parse_args(args)

    from tileproxy.config.loader import load_configuration, ConfigurationError
    tileproxy_conf = args[1] if len(args) >= 2 else None
    try:
        conf = load_configuration(tileproxy_conf)
        registry = conf.source_registry
    except ConfigurationError as ex:
        print('ERROR: %s' % (ex, ), file=sys.stderr)
        sys.exit(2)

    if options.list_names:
        for name in sorted(registry):
            print(name)
        return 0

    name_len = max((len(name) for name in registry), default=0)
    for name, source in sorted(registry.items()):
        name = ('%%-%ds' % name_len) % name
        print('%s  %s  (%s, timeout %ss)' % (name, source.url, source.content_type, source.timeout))
    return 0


class CreateCommand(object):
    templates = {
        'base-config': {'help': 'tileproxy.yaml and log.ini'},
        'log-ini': {'help': 'example logging configuration'},
        'wsgi-app': {'help': 'WSGI module for gunicorn or mod_wsgi'},
    }

    def __init__(self, args):
        parser = optparse.OptionParser("usage: %prog create [options] [destination]")
        parser.add_option("-t", "--template", dest="template",
            help="Create a configuration from this template.")
        parser.add_option("-l", "--list-templates", dest="list_templates",
            action="store_true", default=False,
            help="List all available configuration templates.")
        parser.add_option("-f", "--tileproxy-conf", dest="tileproxy_conf",
            help="Existing TileProxy configuration (e.g. for wsgi-app)")
        parser.add_option("--force", dest="force", action="store_true",
            default=False, help="Force operation (e.g. overwrite existing files)")

        self.options, self.args = parser.parse_args(args)
        self.parser = parser

    def log_error(self, msg, *args):
        print('ERROR:', msg % args, file=sys.stdout)

    def run(self):
        if self.options.list_templates:
            print_items(self.templates, title="Available templates")
            sys.exit(1)
        elif self.options.template:
            if self.options.template not in self.templates:
                self.log_error("unknown template " + self.options.template)
                sys.exit(1)

            if len(self.args) != 2:
                self.log_error("template requires destination argument")
                sys.exit(1)

            sys.exit(
                getattr(self, 'template_' + self.options.template.replace('-', '_'))()
            )
        else:
            self.parser.print_help()
            sys.exit(1)

    @property
    def template_dir(self):
        import tileproxy.config_template
        return os.path.join(os.path.dirname(tileproxy.config_template.__file__), 'base_config')

    def template_wsgi_app(self):
        app_filename = self.args[1]
        if '.' not in os.path.basename(app_filename):
            app_filename += '.py'
        tileproxy_conf = self.options.tileproxy_conf
        if not tileproxy_conf:
            self.log_error("wsgi-app requires --tileproxy-conf")
            return 1
        if os.path.exists(app_filename) and not self.options.force:
            self.log_error("%s already exists, use --force", app_filename)
            return 1

        print("writing TileProxy app to %s" % (app_filename, ))

        config_filename = os.path.abspath(tileproxy_conf)
        with io.open(os.path.join(self.template_dir, 'config.wsgi'), encoding='utf-8') as f:
            app_template = f.read()
        with io.open(app_filename, 'w', encoding='utf-8') as f:
            f.write(app_template % {
                'tileproxy_conf': config_filename,
                'here': os.path.dirname(config_filename),
            })
        return 0

    def template_base_config(self):
        outdir = self.args[1]
        if not os.path.exists(outdir):
            os.makedirs(outdir)

        for filename in ('tileproxy.yaml', 'log.ini'):
            to = os.path.join(outdir, filename)
            from_ = os.path.join(self.template_dir, filename)
            if os.path.exists(to) and not self.options.force:
                self.log_error("%s already exists, use --force", to)
                return 1
            print("writing %s" % (to, ))
            shutil.copy(from_, to)

        return 0

    def template_log_ini(self):
        log_filename = self.args[1]

        if os.path.exists(log_filename) and not self.options.force:
            self.log_error("%s already exists, use --force", log_filename)
            return 1

        with io.open(os.path.join(self.template_dir, 'log.ini'), encoding='utf-8') as f:
            log_template = f.read()
        with io.open(log_filename, 'w', encoding='utf-8') as f:
            f.write(log_template)

        return 0

def create_command(args):
    cmd = CreateCommand(args)
    cmd.run()


commands = {
    'serve-develop': {
        'func': serve_develop_command,
        'help': 'Run TileProxy development server.'
    },
    'sources': {
        'func': sources_command,
        'help': 'Display the configured tile sources.'
    },
    'create': {
        'func': create_command,
        'help': 'Create example configurations.'
    },
}


def print_items(data, title='Commands'):
    name_len = max(len(name) for name in data)

    if title:
        print('%s:' % (title, ), file=sys.stdout)
    for name, item in data.items():
        help = item.get('help', '')
        name = ('%%-%ds' % name_len) % name
        if help:
            help = '  ' + help
        print('  %s%s' % (name, help), file=sys.stdout)

def main():
    args = sys.argv[1:]

    if len(args) < 1 or args[0] in ('--help', '-h'):
        print("usage: %s COMMAND [options]" % (os.path.basename(sys.argv[0]), ))
        print()
        print_items(commands)
        sys.exit(1)

    if args[0] == '--version':
        print('TileProxy ' + version)
        sys.exit(1)

    command = args[0]
    if command not in commands:
        print_items(commands)
        print('\nERROR: unknown command %s' % (command,), file=sys.stdout)
        sys.exit(1)

    args = sys.argv[0:1] + sys.argv[2:]
    return commands[command]['func'](args)

if __name__ == '__main__':
    main()
