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
Runs the generation steps for one service: provision, pull, render, activate, summarize.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..CONVERTERS.to_quadlet import QuadletConverter
from ..CONVERTERS.to_summary import SummaryConverter
from ..errors import ReloadFailed
from ..MODELS.service_definition import PullPolicy, ServiceDefinition
from ..MODELS.settings import GeneratorSettings
from ..REGISTRY.image_puller import ImagePuller
from ..RUNNERS.command_runner import CommandRunner
from .activation_driver import ActivationOutcome, ActivationResult, SystemdActivator
from .user_provisioner import UserProvisioner

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    """What a generation run produced."""

    definition: ServiceDefinition
    quadlet_path: str
    unit_file: str
    activation: ActivationResult
    summary_path: Optional[str] = None


class ServiceGenerator:
    """
    Drives a validated ServiceDefinition through to a running systemd unit.

    Every step waits for the previous one; nothing runs concurrently.
    """
    def __init__(self,
                 settings: Optional[GeneratorSettings] = None,
                 runner: Optional[CommandRunner] = None,
                 provisioner: Optional[UserProvisioner] = None,
                 puller: Optional[ImagePuller] = None,
                 converter: Optional[QuadletConverter] = None,
                 activator: Optional[SystemdActivator] = None,
                 summary: Optional[SummaryConverter] = None):
        """
        Initializes the generator.

        :param settings: Host settings; defaults match a standard Debian LXC.
        :param runner: Shared command runner for the default collaborators.
        """
        self.settings = settings or GeneratorSettings()
        runner = runner or CommandRunner()
        self.provisioner = provisioner or UserProvisioner(runner, admin_user=self.settings.admin_user)
        self.puller = puller or ImagePuller(runner)
        self.converter = converter or QuadletConverter(self.settings.quadlet_dir)
        self.activator = activator or SystemdActivator(runner, settle_delay=self.settings.settle_delay)
        self.summary = summary or SummaryConverter(self.settings.summary_dir, owner=self.settings.admin_user)

    def provision(self, svc: ServiceDefinition) -> ServiceDefinition:
        """
        Creates the service account and returns the definition with its ids attached.
        """
        uid, gid = self.provisioner.ensure_service_user(svc.name)
        svc = svc.model_copy(update={"service_uid": uid, "service_gid": gid})
        self.provisioner.prepare_volume_dirs(svc)
        return svc

    def pull(self, svc: ServiceDefinition) -> None:
        if svc.pull_policy == PullPolicy.NEVER:
            logger.info("Pull policy is 'never'; using the local image %s", svc.image)
            return
        self.puller.pull(svc.image)

    def generate(self, svc: ServiceDefinition, access_ip: Optional[str] = None) -> GenerationReport:
        """
        Runs every step for a service.

        :param svc: Validated definition without uid/gid.
        :param access_ip: Host address shown in the summary for host networking.
        :return: The report; check `report.activation` for the unit's state.
        :raises ImagePullFailed: If the image cannot be pulled.
        :raises ReloadFailed: If systemd cannot reload; the unit file stays.
        """
        svc = self.provision(svc)
        self.pull(svc)

        quadlet_path = self.converter.convert(svc)
        unit_file = self.converter.render(svc)

        activation = self.activator.activate(svc.unit_name)
        if activation.outcome == ActivationOutcome.FAILED_TO_RELOAD:
            raise ReloadFailed(activation.detail, hints=activation.hints)

        report = GenerationReport(
            definition=svc,
            quadlet_path=quadlet_path,
            unit_file=unit_file,
            activation=activation,
        )

        if activation.ok:
            report.summary_path = self.summary.convert(svc, unit_file, quadlet_path, access_ip=access_ip)
        else:
            logger.warning("%s did not become active; %s left in place for inspection.",
                           svc.unit_name, quadlet_path)

        return report
