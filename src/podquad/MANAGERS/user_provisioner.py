"""
Service account and data directory provisioning.
"""
import logging
import os
import pwd
from typing import Callable, List, Optional, Tuple

from ..errors import ProvisioningFailed
from ..MODELS.service_definition import ServiceDefinition
from ..RUNNERS.command_runner import CommandRunner

logger = logging.getLogger(__name__)

# Host paths under these roots are used as-is and never created
SYSTEM_PATH_ROOTS = ("/etc/", "/run/", "/dev/", "/sys/", "/proc/")


class UserProvisioner:
    """
    Creates the system account a service runs as, plus its standard directories.
    """
    def __init__(self,
                 runner: Optional[CommandRunner] = None,
                 admin_user: Optional[str] = "admin",
                 lookup: Callable[[str], pwd.struct_passwd] = pwd.getpwnam):
        """
        Initializes the provisioner.

        :param runner: Executes useradd, install and usermod.
        :param admin_user: Existing account given group access to service files.
        :param lookup: Account lookup, pwd.getpwnam by default.
        """
        self.runner = runner or CommandRunner()
        self.admin_user = admin_user
        self.lookup = lookup

    def user_exists(self, name: str) -> bool:
        try:
            self.lookup(name)
        except KeyError:
            return False
        return True

    def service_dirs(self, name: str) -> List[str]:
        return [f"/opt/{name}", f"/etc/{name}", f"/var/lib/{name}"]

    def ensure_service_user(self, name: str) -> Tuple[int, int]:
        """
        Creates the service account and its directories unless it already exists.

        :param name: Account name, identical to the service name.
        :return: (uid, gid) of the account.
        :raises ProvisioningFailed: If useradd or directory creation fails.
        """
        if self.user_exists(name):
            logger.info("User '%s' already exists.", name)
        else:
            logger.info("Creating system user '%s'", name)
            result = self.runner.run([
                "useradd", "-r",
                "-c", f"{name} service user",
                "-d", f"/opt/{name}",
                "-s", "/usr/sbin/nologin",
                name,
            ])
            if not result.ok:
                raise ProvisioningFailed(f"Failed to create user '{name}': {result.stderr.strip()}")

            for directory in self.service_dirs(name):
                self.make_dir(directory, name)

            self._grant_admin_access(name)

        entry = self.lookup(name)
        return entry.pw_uid, entry.pw_gid

    def make_dir(self, path: str, owner: str) -> None:
        """
        Creates a directory with mode 750 owned by `owner`.
        """
        result = self.runner.run(["install", "-d", "-m", "750", "-o", owner, "-g", owner, path])
        if not result.ok:
            raise ProvisioningFailed(f"Failed to create directory '{path}': {result.stderr.strip()}")

    def _grant_admin_access(self, name: str) -> None:
        if not self.admin_user or not self.user_exists(self.admin_user):
            logger.info("User '%s' not found - skipping group assignment.", self.admin_user)
            return
        result = self.runner.run(["usermod", "-aG", name, self.admin_user])
        if not result.ok:
            logger.warning("Could not add '%s' to group '%s'.", self.admin_user, name)

    def prepare_volume_dirs(self, svc: ServiceDefinition) -> List[str]:
        """
        Creates missing host directories for the service's volumes.

        System paths such as /etc/localtime are left alone.

        :return: The directories that were created.
        """
        created = []
        for volume in svc.volumes:
            path = volume.host_path
            if path.startswith(SYSTEM_PATH_ROOTS):
                logger.info("Using system path: %s", path)
                continue
            if os.path.exists(path):
                logger.info("Already exists: %s", path)
                continue
            self.make_dir(path, svc.name)
            created.append(path)
        return created
