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
Validation and normalization of operator answers into a ServiceDefinition.
"""
import logging
import os
import re
from typing import Callable, List, Optional, Tuple, Union

from dotenv import dotenv_values

from ..errors import EmptyInput, InvalidInput, InvalidName
from ..MODELS.service_definition import (
    EnvironmentVariable,
    HealthCheck,
    NetworkMode,
    PortMapping,
    PullPolicy,
    ServiceDefinition,
    UserMode,
    VolumeMount,
)
from ..MODELS.service_inputs import HealthCheckInputs, ServiceInputs
from ..REGISTRY.image_reference import normalize_image_name

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]{0,31}$")
DATA_ROOT = "/var/lib"

# Top-level directories an absolute host path may live under without a warning
SYSTEM_ROOTS = frozenset(
    ["etc", "run", "dev", "sys", "proc", "usr", "var", "opt", "home", "root", "tmp", "mnt", "media", "boot"]
)

USER_MODE_CHOICES = {"1": UserMode.DEDICATED, "2": UserMode.ROOT, "3": UserMode.ROOT_WITH_PUID}
NETWORK_MODE_CHOICES = {"1": NetworkMode.HOST, "2": NetworkMode.BRIDGE}
PULL_POLICY_CHOICES = {"1": PullPolicy.MISSING, "2": PullPolicy.ALWAYS, "3": PullPolicy.NEVER}

DEFAULT_HEALTH_INTERVAL = "30s"
DEFAULT_HEALTH_RETRIES = 3
# systemd time span such as 30s, 1m30s, 500ms or a bare number of seconds
HEALTH_INTERVAL_PATTERN = re.compile(r"^(?:\d+(?:us|ms|s|m|h))*\d+(?:us|ms|s|m|h)?$")
CONTAINER_PORT_PATTERN = re.compile(r"^\d{1,5}(-\d{1,5})?(/(tcp|udp|sctp))?$")
HOST_PORT_PATTERN = re.compile(r"^\d{1,5}(-\d{1,5})?$")

ConfirmCallback = Callable[[str, str], bool]


def validate_name(raw: str) -> str:
    """
    Validate a service name.

    The name doubles as the system account name, so it follows the useradd
    rules: lowercase letter first, then lowercase letters, digits, '_' or
    '-', at most 32 characters.

    :param raw: The name as typed.
    :return: The validated name.
    :raises EmptyInput: If nothing was entered.
    :raises InvalidName: If the name breaks the naming rules.
    """
    name = (raw or "").strip()
    if not name:
        raise EmptyInput("Service name cannot be empty.")
    if not NAME_PATTERN.match(name):
        raise InvalidName(
            f"Invalid service name: {name}",
            hints=[
                "Start with a lowercase letter",
                "Contain only lowercase letters, numbers, underscores, and hyphens",
                "Be 1-32 characters long",
                "Examples: homeassistant, grafana, node-exporter",
            ],
        )
    return name


def parse_list_input(raw: Union[str, List[str], None], separator: str = ",") -> List[str]:
    """
    Split an answer into trimmed, non-empty tokens, keeping their order.

    :param raw: A separated string, or an already split list.
    :param separator: Token separator for string input.
    :return: The tokens.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(separator)
    return [token.strip() for token in raw if token and token.strip()]


def _is_under_system_root(path: str) -> bool:
    parts = path.split("/")
    return len(parts) > 1 and parts[1] in SYSTEM_ROOTS


def expand_volume_path(
    raw: str, service_name: str, confirm: Optional[ConfirmCallback] = None
) -> Tuple[str, bool]:
    """
    Expand a host path from a volume mapping.

    './<rest>' becomes '/var/lib/<service_name>/<rest>'. An absolute path
    outside the known system roots is flagged; when `confirm` accepts the
    suggested './'-prefixed form it is expanded the same way. Paths that are
    already expanded come back unchanged.

    :param raw: Host path as typed.
    :param service_name: Name of the service owning the data directory.
    :param confirm: Called with (raw, suggestion) for suspicious paths.
    :return: (expanded path, whether a warning was raised)
    """
    path = raw.strip()
    warned = False

    if path.startswith("/") and not _is_under_system_root(path):
        warned = True
        suggestion = f".{path}"
        logger.warning(
            "Suspicious host path %s; did you mean %s (expands to %s/%s%s)?",
            path, suggestion, DATA_ROOT, service_name, path,
        )
        if confirm is not None and confirm(path, suggestion):
            path = suggestion
        else:
            logger.warning("Keeping absolute path %s", path)

    if path.startswith("./"):
        relative = path[2:]
        path = f"{DATA_ROOT}/{service_name}/{relative}"

    return path, warned


def parse_port_mapping(token: str) -> PortMapping:
    """
    Parse 'host:container', 'ip:host:container', 'ip::container' or a single
    container port.

    A single port is kept as written so Podman picks the host port.
    """
    host, _, container = token.strip().rpartition(":")
    ip, ip_sep, host_port = host.rpartition(":")
    if ip_sep:
        valid_host = bool(ip) and (not host_port or HOST_PORT_PATTERN.match(host_port))
    else:
        valid_host = not token.strip().startswith(":") and (not host_port or HOST_PORT_PATTERN.match(host_port))
    if not valid_host or not CONTAINER_PORT_PATTERN.match(container):
        raise InvalidInput(
            f"Invalid port mapping: {token}",
            hints=["Use host:container, e.g. 8080:80 or 8443:443/tcp"],
        )
    return PortMapping(host_port=host, container_port=container)


def parse_volume_mapping(
    token: str, service_name: str, confirm: Optional[ConfirmCallback] = None
) -> Tuple[VolumeMount, bool]:
    """
    Parse 'host:container[:options]' and expand the host side.

    :return: (volume mount, whether the host path raised a warning)
    """
    host_raw, sep, container_part = token.strip().partition(":")
    if not host_raw or not sep or not container_part:
        raise InvalidInput(
            f"Invalid volume mapping: {token}",
            hints=["Use host:container[:ro], e.g. ./config:/config"],
        )

    container_path, _, raw_options = container_part.partition(":")
    options = parse_list_input(raw_options)
    read_only = "ro" in options
    options = [opt for opt in options if opt != "ro"]

    host_path, warned = expand_volume_path(host_raw, service_name, confirm)
    return (
        VolumeMount(host_path=host_path, container_path=container_path, read_only=read_only, options=options),
        warned,
    )


def parse_environment_entry(token: str) -> EnvironmentVariable:
    """Parse a single KEY=VALUE token."""
    key, sep, value = token.strip().partition("=")
    key = key.strip()
    if not sep or not key:
        raise InvalidInput(
            f"Invalid environment variable: {token}",
            hints=["Use KEY=VALUE, e.g. TZ=Europe/London"],
        )
    return EnvironmentVariable(key=key, value=value.strip())


def _parse_choice(raw: Optional[str], choices: dict, default, label: str):
    answer = (raw or "").strip().lower()
    if not answer:
        return default
    if answer in choices:
        return choices[answer]
    for value in choices.values():
        if answer == value.value:
            return value
    logger.warning("Invalid %s choice %r; defaulting to %s.", label, raw, default.value)
    return default


def parse_user_mode(raw: Optional[str]) -> UserMode:
    return _parse_choice(raw, USER_MODE_CHOICES, UserMode.DEDICATED, "user mode")


def parse_network_mode(raw: Optional[str]) -> NetworkMode:
    return _parse_choice(raw, NETWORK_MODE_CHOICES, NetworkMode.HOST, "network mode")


def parse_pull_policy(raw: Optional[str]) -> PullPolicy:
    return _parse_choice(raw, PULL_POLICY_CHOICES, PullPolicy.MISSING, "pull policy")


def parse_health_check(inputs: Optional[HealthCheckInputs]) -> Optional[HealthCheck]:
    """
    Build a health check, substituting defaults for malformed optional answers.

    An empty command disables the health check.
    """
    if inputs is None:
        return None

    command = inputs.command.strip()
    if not command:
        logger.warning("Health check command is empty; no health check will be configured.")
        return None

    raw_interval = "" if inputs.interval is None else str(inputs.interval)
    interval = raw_interval.strip() or DEFAULT_HEALTH_INTERVAL
    if not HEALTH_INTERVAL_PATTERN.match(interval):
        logger.warning("Invalid health check interval %r; using %s.", interval, DEFAULT_HEALTH_INTERVAL)
        interval = DEFAULT_HEALTH_INTERVAL

    retries = DEFAULT_HEALTH_RETRIES
    raw_retries = inputs.retries
    if raw_retries is not None and str(raw_retries).strip():
        try:
            retries = int(str(raw_retries).strip())
        except ValueError:
            retries = 0
        if retries < 1:
            logger.warning("Invalid health check retries %r; using %d.", raw_retries, DEFAULT_HEALTH_RETRIES)
            retries = DEFAULT_HEALTH_RETRIES

    return HealthCheck(command=command, interval=interval, retries=retries)


class ServiceDefinitionBuilder:
    """
    Builds a ServiceDefinition from raw answers.

    The builder performs no I/O besides reading an optional env file, so the
    same validation serves interactive prompts and config-file callers.
    """

    def __init__(self, confirm_path: Optional[ConfirmCallback] = None, base_dir: str = "."):
        """
        Initializes the builder.

        :param confirm_path: Asked whether a suspicious absolute host path
            should be turned into a service-relative one. Without it such
            paths are kept as written.
        :param base_dir: Directory relative env files are resolved against.
        """
        self.confirm_path = confirm_path
        self.base_dir = base_dir
        self.warnings: List[str] = []

    def build(self, inputs: ServiceInputs) -> ServiceDefinition:
        """
        Validates the answers and returns the definition.

        The result has no uid/gid yet; those are attached once the service
        account exists.

        :raises EmptyInput: If the name or image is missing.
        :raises InvalidName: If the name is malformed.
        :raises InvalidInput: If a port, volume or environment token is malformed.
        """
        self.warnings = []
        name = validate_name(inputs.name)

        raw_image = (inputs.image or "").strip()
        if not raw_image:
            raise EmptyInput("Image name cannot be empty.")
        image = normalize_image_name(raw_image)
        if image != raw_image:
            logger.info("Converting to fully qualified name: %s", image)

        network_mode = parse_network_mode(inputs.network_mode)
        ports: List[PortMapping] = []
        if network_mode == NetworkMode.BRIDGE:
            ports = [parse_port_mapping(token) for token in parse_list_input(inputs.ports)]

        volumes = []
        for token in parse_list_input(inputs.volumes):
            mount, warned = parse_volume_mapping(token, name, self.confirm_path)
            if warned:
                self.warnings.append(f"Suspicious host path in volume mapping: {token}")
            volumes.append(mount)

        environment = [parse_environment_entry(token) for token in parse_list_input(inputs.environment)]
        if inputs.env_file:
            environment.extend(self._load_env_file(inputs.env_file))

        return ServiceDefinition(
            name=name,
            image=image,
            user_mode=parse_user_mode(inputs.user_mode),
            network_mode=network_mode,
            port_mappings=ports,
            volumes=volumes,
            environment=environment,
            use_timezone=inputs.use_timezone,
            health_check=parse_health_check(inputs.health_check),
            pull_policy=parse_pull_policy(inputs.pull_policy),
            auto_update=inputs.auto_update,
            security_label_disable=inputs.security_label_disable,
        )

    def _load_env_file(self, env_file: str) -> List[EnvironmentVariable]:
        """
        Reads KEY=VALUE pairs from a dotenv file, keeping file order.
        """
        path = os.path.join(self.base_dir, env_file)
        if not os.path.isfile(path):
            raise InvalidInput(f"Environment file not found: {path}")
        values = dotenv_values(path, interpolate=False)
        return [EnvironmentVariable(key=key, value=value or "") for key, value in values.items()]
