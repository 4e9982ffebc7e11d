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

import json
import os.path
from typing import Iterable

from jsonschema.exceptions import ValidationError
from jsonschema.validators import Draft202012Validator

import logging
log = logging.getLogger('tileproxy.config')


with open(os.path.join(os.path.dirname(__file__), 'config-schema.json')) as schema_file:
    schema = json.load(schema_file)


def get_error_messages(errors: Iterable[ValidationError]) -> list[str]:
    msgs = []
    for error in errors:
        path = error.json_path.replace('$', 'root')
        msg = f'{error.message} in {path}'
        msgs.append(msg)
        if error.context is not None:
            msgs += get_error_messages(error.context)
    return msgs


def validate(conf_dict: dict) -> list[str]:
    validator = Draft202012Validator(schema=schema)
    errors = get_error_messages(validator.iter_errors(conf_dict))

    for name, source in (conf_dict.get('sources') or {}).items():
        errors += _validate_source(name, source)

    return errors


def _validate_source(name: str, source: dict) -> list[str]:
    url = source.get('url') if isinstance(source, dict) else None
    if not isinstance(url, str):
        return []

    errors = []
    for placeholder in ('{z}', '{x}', '{y}'):
        if placeholder not in url:
            errors.append(f"URL of source '{name}' misses {placeholder} placeholder")
    if not url.startswith(('http://', 'https://')):
        errors.append(f"URL of source '{name}' is not a http(s) URL")
    return errors
