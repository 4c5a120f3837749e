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
Image pulls through the local Podman client.
"""

import logging
from typing import Optional

from ..errors import ImagePullFailed
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class ImagePuller:
    """
    Pulls fully qualified images with `podman pull`.
    """

    def __init__(self, runner: Optional[CommandRunner] = None):
        """
        Initialize the puller.

        Args:
            runner: Command runner used to invoke podman.
        """
        self.runner = runner or CommandRunner()

    def pull(self, reference: str) -> None:
        """
        Pull an image.

        Args:
            reference: Fully qualified image reference.

        Raises:
            ImagePullFailed: If podman reports a failure.
        """
        logger.info("Pulling %s", reference)
        # Uncaptured so podman's progress output reaches the terminal
        result = self.runner.run(["podman", "pull", reference], capture_output=False)
        if not result.ok:
            raise ImagePullFailed(reference, detail=result.stderr.strip())
