"""
Checks for required host tools and installs them through the package manager.
"""
import logging
from typing import Callable, Optional

from ..errors import DependencyMissing
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class DependencyChecker:
    """
    Makes sure an executable is available, offering to install its package.
    """
    def __init__(self, runner: Optional[CommandRunner] = None):
        """
        Initializes the dependency checker.

        :param runner: Runs the package manager and resolves executables.
        """
        self.runner = runner or CommandRunner()

    def is_installed(self, executable: str) -> bool:
        return self.runner.which(executable) is not None

    def install_package(self, package: str) -> None:
        """
        Installs a Debian package with apt-get.

        :raises DependencyMissing: If apt-get fails.
        """
        logger.info("Installing package %s", package)
        for args in (["apt-get", "update"], ["apt-get", "install", "-y", package]):
            result = self.runner.run(args, capture_output=False)
            if not result.ok:
                raise DependencyMissing(
                    f"Failed to install {package} ({' '.join(args)} exited with {result.returncode}).",
                    hints=["Please review the output above."],
                )

    def ensure(self, executable: str, package: str, confirm: Callable[[str], bool]) -> bool:
        """
        Ensures `executable` is on PATH.

        :param executable: Command to look for, e.g. 'podman'.
        :param package: Package providing it.
        :param confirm: Asked whether to install the package when missing.
        :return: False if the operator declined the installation.
        :raises DependencyMissing: If installation fails or leaves the tool missing.
        """
        if self.is_installed(executable):
            return True

        logger.warning("%s is not installed, but is required to continue.", executable)
        if not confirm(package):
            return False

        self.install_package(package)
        if not self.is_installed(executable):
            raise DependencyMissing(f"{executable} is still not available after installing {package}.")
        return True
