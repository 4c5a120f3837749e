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
Converter generating Podman Quadlet `.container` files from service definitions.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Tuple

from jinja2 import Environment

from ..errors import QuadletWriteFailed
from ..MODELS.service_definition import ServiceDefinition, UserMode

logger = logging.getLogger(__name__)

QUADLET_TEMPLATE = """\
{% for section in sections %}
[{{ section.name }}]
{% for key, value in section.entries %}
{{ key }}={{ value }}
{% endfor %}
{% if not loop.last %}

{% endif %}
{% endfor %}
"""


@dataclass
class Section:
    """One `[Name]` block holding ordered, possibly repeated, keys."""

    name: str
    entries: List[Tuple[str, str]] = field(default_factory=list)

    def add(self, key: str, value) -> None:
        self.entries.append((key, str(value)))


class QuadletConverter:
    """
    Converts a ServiceDefinition into a Quadlet container unit.
    """

    def __init__(self, quadlet_dir: str = "/etc/containers/systemd"):
        """
        Initializes the Quadlet converter.

        :param quadlet_dir: Directory systemd's Quadlet generator reads.
        """
        self.quadlet_dir = quadlet_dir
        env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
        self.template = env.from_string(QUADLET_TEMPLATE)

    def build_sections(self, svc: ServiceDefinition) -> List[Section]:
        """
        Lays out the unit as Unit, Container, Service and Install sections.

        :param svc: The service to describe.
        :return: Sections in file order.
        """
        unit = Section("Unit")
        unit.add("Description", f"Podman container - {svc.name}")
        unit.add("Wants", "network-online.target")
        unit.add("After", "network-online.target")

        container = Section("Container")
        container.add("Image", svc.image)
        container.add("ContainerName", svc.name)
        if svc.user_mode == UserMode.DEDICATED and svc.service_uid is not None:
            container.add("User", svc.service_uid)
        container.add("Network", svc.network_mode.value)
        container.add("Pull", svc.pull_policy.value)
        if svc.use_timezone:
            container.add("Timezone", "local")
        if svc.auto_update:
            container.add("AutoUpdate", "registry")
        if svc.security_label_disable:
            container.add("SecurityLabelDisable", "true")

        for port in svc.published_ports:
            container.add("PublishPort", port)
        for volume in svc.volumes:
            container.add("Volume", volume)

        if svc.user_mode == UserMode.ROOT_WITH_PUID:
            if svc.service_uid is not None:
                container.add("Environment", f"PUID={svc.service_uid}")
            if svc.service_gid is not None:
                container.add("Environment", f"PGID={svc.service_gid}")
        for env_var in svc.environment:
            container.add("Environment", env_var)

        hc = svc.health_check
        if hc:
            container.add("HealthCmd", hc.command)
            container.add("HealthInterval", hc.interval)
            container.add("HealthRetries", hc.retries)
            container.add("HealthOnFailure", hc.on_failure)

        service = Section("Service")
        service.add("Restart", "always")
        service.add("RestartSec", 10)
        service.add("TimeoutStartSec", 900)

        install = Section("Install")
        install.add("WantedBy", "default.target")

        return [unit, container, service, install]

    def render(self, svc: ServiceDefinition) -> str:
        """
        Renders the unit file contents.

        Identical definitions always render to identical text.
        """
        return self.template.render(sections=self.build_sections(svc))

    def path_for(self, svc: ServiceDefinition) -> str:
        return os.path.join(self.quadlet_dir, f"{svc.name}.container")

    def convert(self, svc: ServiceDefinition) -> str:
        """
        Writes the unit file, replacing any previous version.

        :param svc: The service to write.
        :return: The path to the written file.
        :raises QuadletWriteFailed: If the directory or file cannot be written.
        """
        dest = self.path_for(svc)
        content = self.render(svc)

        try:
            os.makedirs(self.quadlet_dir, exist_ok=True)
            with open(dest, "w") as f:
                f.write(content)
        except OSError as e:
            raise QuadletWriteFailed(
                f"Failed to write {dest}: {e.strerror or e}",
                hints=[f"Check that {self.quadlet_dir} is a writable directory"],
            )

        logger.info("Quadlet file written to %s", dest)
        return dest
