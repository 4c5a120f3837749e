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
Synchronous execution of host commands (podman, systemctl, useradd, ...).
"""
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from ..errors import CommandFailed

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one finished command."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs a command to completion and reports its exit status.
    """

    def __init__(self, capture_output: bool = True):
        """
        Initializes the command runner.

        Args:
            capture_output (bool): Capture stdout/stderr instead of passing
                them through to the terminal. Long-running commands such as
                image pulls are run uncaptured so the operator sees progress.
        """
        self.capture_output = capture_output

    def run(self, args: List[str], capture_output: Optional[bool] = None) -> CommandResult:
        """
        Runs a command.

        Args:
            args (List[str]): Command and arguments, each a discrete token.
            capture_output (Optional[bool]): Per-call override of capture mode.

        Returns:
            CommandResult: Exit status and any captured output. A missing
            executable is reported as exit status 127, like a shell would.

        Raises:
            CommandFailed: If the executable exists but cannot be run.
        """
        capture = self.capture_output if capture_output is None else capture_output
        logger.debug("Running command: %s", args)

        try:
            completed = subprocess.run(
                args,
                capture_output=capture,
                text=True,
                check=False,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except FileNotFoundError as e:
            logger.debug("Command not found: %s", args[0])
            return CommandResult(args=list(args), returncode=127, stderr=str(e))
        except OSError as e:
            raise CommandFailed(f"Could not run {args[0]}: {e.strerror or e}")

        result = CommandResult(
            args=list(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if not result.ok:
            logger.debug("Command %s exited with %d: %s", args[0], result.returncode, result.stderr.strip())
        return result

    @staticmethod
    def which(executable: str) -> Optional[str]:
        """
        Locates an executable on PATH.

        Returns:
            Optional[str]: Absolute path, or None when not installed.
        """
        return shutil.which(executable)
