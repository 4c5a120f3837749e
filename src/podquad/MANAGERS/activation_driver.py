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
Hands a generated Quadlet unit to systemd and classifies the outcome.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class ActivationOutcome(str, Enum):
    """Terminal result of an activation attempt."""

    STARTED = "started"
    FAILED_TO_START = "failed-to-start"
    FAILED_TO_RELOAD = "failed-to-reload"


@dataclass
class ActivationResult:
    """Outcome plus what the operator should look at next."""

    outcome: ActivationOutcome
    unit: str
    detail: str = ""
    hints: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome == ActivationOutcome.STARTED


class SystemdActivator:
    """
    Reloads systemd, starts the unit and checks it once after a settle delay.

    There is no retry or backoff: a failed reload stops before the start, and
    a failed start leaves the unit file in place for inspection.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        settle_delay: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initializes the activator.

        :param runner: Executes systemctl.
        :param settle_delay: Seconds to wait before the single is-active check.
        :param sleep: Sleep function, replaceable in tests.
        """
        self.runner = runner or CommandRunner()
        self.settle_delay = settle_delay
        self.sleep = sleep

    def reload(self) -> bool:
        return self.runner.run(["systemctl", "daemon-reload"]).ok

    def start(self, unit: str):
        return self.runner.run(["systemctl", "start", unit])

    def is_active(self, unit: str) -> bool:
        return self.runner.run(["systemctl", "is-active", "--quiet", unit]).ok

    def activate(self, unit: str) -> ActivationResult:
        """
        Activates a unit generated from a Quadlet file.

        :param unit: Unit name, e.g. 'nginxpm.service'.
        :return: The classified result.
        """
        logger.info("Reloading systemd daemon")
        if not self.reload():
            return ActivationResult(
                outcome=ActivationOutcome.FAILED_TO_RELOAD,
                unit=unit,
                detail="Failed to reload systemd.",
                hints=["Check: journalctl -xe"],
            )

        logger.info("Starting %s", unit)
        started = self.start(unit)
        if not started.ok:
            return ActivationResult(
                outcome=ActivationOutcome.FAILED_TO_START,
                unit=unit,
                detail=started.stderr.strip() or "Failed to start the service.",
                hints=[
                    "Configuration error in the Quadlet file",
                    "Port already in use",
                    "Missing volume paths",
                    "Container entrypoint failure",
                    f"Diagnose with: journalctl -u {unit} -n 50",
                ],
            )

        logger.info("Waiting %.0fs for %s to stabilize", self.settle_delay, unit)
        self.sleep(self.settle_delay)

        if self.is_active(unit):
            return ActivationResult(outcome=ActivationOutcome.STARTED, unit=unit)

        return ActivationResult(
            outcome=ActivationOutcome.FAILED_TO_START,
            unit=unit,
            detail="Service failed to become active.",
            hints=[
                f"View logs: journalctl -u {unit} -n 50",
                f"Full logs: journalctl -u {unit} --no-pager",
            ],
        )
