"""
Models describing a container service, including user mode, networking, mounts and health checks.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from enum import Enum

class UserMode(str, Enum):
    """
    How the container process is mapped to a host account.
    """
    DEDICATED = "dedicated"
    ROOT = "root"
    ROOT_WITH_PUID = "root-with-puid"

class NetworkMode(str, Enum):
    """
    Network namespace the container joins.
    """
    HOST = "host"
    BRIDGE = "bridge"

class PullPolicy(str, Enum):
    """
    When Podman pulls the image before starting the container.
    """
    MISSING = "missing"
    ALWAYS = "always"
    NEVER = "never"

class PortMapping(BaseModel):
    """
    A published port, host side first.

    An empty host side leaves the host port to Podman.
    """
    model_config = ConfigDict(frozen=True)

    container_port: str
    host_port: str = ""

    def __str__(self) -> str:
        if not self.host_port:
            return self.container_port
        return f"{self.host_port}:{self.container_port}"

class VolumeMount(BaseModel):
    """
    Defines a mapping between a host path and a container path.
    """
    model_config = ConfigDict(frozen=True)

    host_path: str
    container_path: str
    read_only: bool = False
    options: List[str] = []

    def __str__(self) -> str:
        opts = list(self.options)
        if self.read_only and "ro" not in opts:
            opts.insert(0, "ro")
        mapping = f"{self.host_path}:{self.container_path}"
        if opts:
            mapping += ":" + ",".join(opts)
        return mapping

class EnvironmentVariable(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: str = ""

    def __str__(self) -> str:
        return f"{self.key}={self.value}"

class HealthCheck(BaseModel):
    """
    Defines a command Podman runs to check the health of the container.
    """
    model_config = ConfigDict(frozen=True)

    command: str
    interval: str = "30s"
    retries: int = 3
    on_failure: str = "kill"

class ServiceDefinition(BaseModel):
    """
    The full, validated definition of one Quadlet-managed container service.

    Instances are immutable; a correction means building a new definition.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    image: str

    # Identity
    user_mode: UserMode = UserMode.DEDICATED
    service_uid: Optional[int] = None
    service_gid: Optional[int] = None

    # Networking
    network_mode: NetworkMode = NetworkMode.HOST
    port_mappings: List[PortMapping] = []

    # Storage
    volumes: List[VolumeMount] = []

    # Environment, in insertion order; repeated keys are kept
    environment: List[EnvironmentVariable] = []
    use_timezone: bool = True

    # Lifecycle
    health_check: Optional[HealthCheck] = None
    pull_policy: PullPolicy = PullPolicy.MISSING
    auto_update: bool = True
    security_label_disable: bool = False

    @property
    def unit_name(self) -> str:
        return f"{self.name}.service"

    @property
    def published_ports(self) -> List[PortMapping]:
        """Port mappings only apply to bridge networking."""
        if self.network_mode == NetworkMode.BRIDGE:
            return list(self.port_mappings)
        return []
