"""
Host-level settings for the generator.
"""
from pydantic import BaseModel

class GeneratorSettings(BaseModel):
    """
    Locations and timings that depend on the host rather than on the service.
    """
    quadlet_dir: str = "/etc/containers/systemd"
    summary_dir: str = "/home/admin"
    admin_user: str = "admin"
    settle_delay: float = 5.0
