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

import os
import textwrap

import pytest

from webtest import TestApp as _TestApp

from tileproxy.wsgiapp import make_wsgi_app


class SysTest(object):
    """
    Baseclass for pytest-based system tests.
    Provides `app` fixture with a configured TileProxy instance, wrapped in
    webtest.TestApp.

    Subclasses define the configuration as `config` (YAML). `app` is
    reused within each test class.
    """
    config = ''

    @pytest.fixture(scope="class")
    def app(self, config_file):
        app = make_wsgi_app(config_file)
        return _TestApp(app)

    @pytest.fixture(scope="class")
    def base_dir(self, tmp_path_factory):
        return tmp_path_factory.mktemp("base_dir")

    @pytest.fixture(scope="class")
    def config_file(self, base_dir):
        filename = os.path.join(str(base_dir), 'tileproxy.yaml')
        with open(filename, 'w') as f:
            f.write(textwrap.dedent(self.config))
        return filename

    @pytest.fixture(scope="class")
    def cache(self, app):
        return app.app.handlers['tiles'].cache

    @pytest.fixture(scope="class")
    def cache_writer(self, app):
        return app.app.handlers['tiles'].cache_writer
