"""
Raw, unvalidated answers collected from prompts or a service config file.
"""
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict

class HealthCheckInputs(BaseModel):
    """
    Health check answers as typed by the operator.
    """
    command: str = ""
    interval: Optional[Union[int, str]] = None
    retries: Optional[Union[int, str]] = None

class ServiceInputs(BaseModel):
    """
    Everything needed to build a ServiceDefinition, before validation.

    List-like fields accept either a comma-separated string (as typed at a
    prompt) or a list of strings (as written in a YAML file).
    """
    model_config = ConfigDict(extra="forbid")

    name: str = ""
    image: str = ""
    user_mode: str = "1"
    network_mode: str = "1"
    ports: Union[str, List[str]] = ""
    volumes: Union[str, List[str]] = ""
    use_timezone: bool = True
    environment: Union[str, List[str]] = ""
    env_file: Optional[str] = None
    security_label_disable: bool = False
    pull_policy: str = "1"
    auto_update: bool = True
    health_check: Optional[HealthCheckInputs] = None
