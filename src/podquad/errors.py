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
Error types raised while generating a Quadlet service.
"""
from typing import List, Optional


class PodquadError(Exception):
    """
    Base class for every failure the generator reports to the operator.
    """

    def __init__(self, message: str, hints: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.hints = list(hints or [])


class EmptyInput(PodquadError):
    """A required answer was left blank."""


class InvalidName(PodquadError):
    """The service name does not satisfy the account naming rules."""


class InvalidInput(PodquadError):
    """A port, volume or environment token could not be parsed."""


class DependencyMissing(PodquadError):
    """A required external tool is absent and could not be installed."""


class ImagePullFailed(PodquadError):
    """
    Pulling the container image failed.
    """

    def __init__(self, reference: str, detail: str = ""):
        super().__init__(
            f"Failed to pull the container image: {reference}",
            hints=[
                f"Image name is correct: {reference}",
                "You have network connectivity",
                "The image exists in the registry",
            ],
        )
        self.reference = reference
        self.detail = detail


class ReloadFailed(PodquadError):
    """systemd refused to reload its configuration."""


class ActivationFailed(PodquadError):
    """The unit did not start or did not become active."""


class ProvisioningFailed(PodquadError):
    """The service account or its directories could not be created."""


class SummaryWriteFailed(PodquadError):
    """The deployment summary could not be written."""


class CommandFailed(PodquadError):
    """A host command could not be executed at all."""


class QuadletWriteFailed(PodquadError):
    """The Quadlet unit file could not be written."""
