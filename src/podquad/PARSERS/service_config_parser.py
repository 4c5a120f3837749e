# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Parser for YAML service config files, the non-interactive alternative to prompts.
"""
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..errors import InvalidInput
from ..MODELS.service_inputs import ServiceInputs
from ..UTILS.string_interpolation import EnvironmentInterpolator

# Menu answers may be written as numbers in YAML
CHOICE_FIELDS = ("user_mode", "network_mode", "pull_policy")


class ServiceConfigParser:
    """
    Parser for service config files such as:

        name: nginxpm
        image: jc21/nginx-proxy-manager
        user_mode: root
        volumes:
          - ./data:/data
          - ./letsencrypt:/etc/letsencrypt
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: A dictionary of environment variables for interpolation.
        """
        self.context = context if context is not None else dict(os.environ)

    def parse(self, config_path: str) -> ServiceInputs:
        """
        Parses a config file from a path.

        :param config_path: Path to the config file.
        :return: The answers it contains.
        """
        with open(config_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> ServiceInputs:
        """
        Parses a config file from a string.

        :param content: YAML content of the config file.
        :return: The answers it contains.
        :raises InvalidInput: If the YAML is malformed or has unknown keys.
        """
        content = EnvironmentInterpolator.interpolate(content, self.context)

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise InvalidInput(f"Invalid service config: {e}")
        if not data:
            data = {}
        if not isinstance(data, dict):
            raise InvalidInput("Service config must be a mapping of answers.")

        try:
            return ServiceInputs(**self._normalize(data))
        except ValidationError as e:
            raise InvalidInput(f"Invalid service config: {e}")

    def _normalize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Accepts dashed keys and numeric menu answers.

        :param data: The raw YAML mapping.
        :return: Keyword arguments for ServiceInputs.
        """
        normalized = {}
        for key, value in data.items():
            key = str(key).replace('-', '_')
            if key in CHOICE_FIELDS and value is not None:
                value = str(value)
            if key == 'environment' and isinstance(value, dict):
                value = [f"{k}={'' if v is None else v}" for k, v in value.items()]
            if key == 'ports' and isinstance(value, list):
                value = [self._port_token(p) for p in value]
            normalized[key] = value
        return normalized

    def _port_token(self, port: Any) -> str:
        """
        YAML 1.1 reads an unquoted 8080:80 as a base-60 integer; only plain
        port numbers are accepted as integers.
        """
        if isinstance(port, int) and not isinstance(port, bool):
            if 0 < port <= 65535:
                return str(port)
            raise InvalidInput(
                f"Port mapping parsed as the number {port}",
                hints=['Quote port mappings in YAML, e.g. - "8080:80"'],
            )
        return str(port)
