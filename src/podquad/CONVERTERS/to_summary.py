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
Converter producing a Markdown deployment summary for a generated service.
"""
import logging
import os
import shutil
from datetime import datetime
from typing import Optional

from jinja2 import Environment

from ..errors import SummaryWriteFailed
from ..MODELS.service_definition import NetworkMode, ServiceDefinition

logger = logging.getLogger(__name__)

SUMMARY_TEMPLATE = """\
# {{ svc.name }} - Deployment Summary

**Generated:** {{ generated }}
**Status:** {{ status }}

---

## Service Details

| Property | Value |
|----------|-------|
| **Service Name** | `{{ svc.name }}` |
| **Container Image** | `{{ svc.image }}` |
| **User Mode** | {{ svc.user_mode.value }} |
| **Network Mode** | {{ svc.network_mode.value }} |
{% if access_ip %}
| **Access URL** | http://{{ access_ip }} (on app's native port) |
{% endif %}
| **Quadlet Config** | `{{ quadlet_path }}` |
| **Auto-Update** | {{ 'yes' if svc.auto_update else 'no' }} |
| **Pull Policy** | {{ svc.pull_policy.value }} |

---

## Volume Mounts

{% if svc.volumes %}
| Host Path | Container Path |
|-----------|----------------|
{% for volume in svc.volumes %}
| `{{ volume.host_path }}` | `{{ volume.container_path }}` |
{% endfor %}
{% else %}
*No volumes configured*
{% endif %}

---

## Useful Commands

### Service Management

```bash
# Check service status
systemctl status {{ svc.unit_name }}

# View live logs
journalctl -u {{ svc.unit_name }} -f

# Restart service
systemctl restart {{ svc.unit_name }}

# Stop service
systemctl stop {{ svc.unit_name }}
```

### Container Operations

```bash
# Inspect container configuration
podman inspect {{ svc.name }}

# Execute commands in the container
podman exec -it {{ svc.name }} /bin/sh

# View container resource usage
podman stats {{ svc.name }}
```

{% if svc.auto_update %}
### Auto-Update

```bash
# Check for and apply updates
podman auto-update

# Dry run (check without applying)
podman auto-update --dry-run
```

{% endif %}
---

## Configuration Management

1. Edit the configuration: `sudo nano {{ quadlet_path }}`
2. Reload systemd and restart:
   `sudo systemctl daemon-reload && sudo systemctl restart {{ svc.unit_name }}`

### Current Quadlet Configuration

```ini
{{ unit_file }}```

---

## Troubleshooting

```bash
journalctl -u {{ svc.unit_name }} -n 50
podman ps -a --filter name={{ svc.name }}
podman logs {{ svc.name }}

# Run the container manually (stop the service first)
podman run --rm -it {{ svc.image }}
```

---

*This summary was automatically generated by podquad*
"""


class SummaryConverter:
    """
    Writes `<summary_dir>/<name>-deployment.md` describing a deployed service.

    Writing the summary is best effort: failures are logged and reported as
    a None path, never raised to the caller.
    """

    def __init__(self, summary_dir: str = "/home/admin", owner: Optional[str] = "admin"):
        """
        :param summary_dir: Directory receiving the summary.
        :param owner: Account that should own the summary, if it exists.
        """
        self.summary_dir = summary_dir
        self.owner = owner
        env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
        self.template = env.from_string(SUMMARY_TEMPLATE)

    def render(
        self,
        svc: ServiceDefinition,
        unit_file: str,
        quadlet_path: str,
        status: str = "Active and Running",
        access_ip: Optional[str] = None,
        generated: Optional[str] = None,
    ) -> str:
        if generated is None:
            generated = datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")
        return self.template.render(
            svc=svc,
            unit_file=unit_file,
            quadlet_path=quadlet_path,
            status=status,
            access_ip=access_ip if svc.network_mode == NetworkMode.HOST else None,
            generated=generated,
        )

    def path_for(self, svc: ServiceDefinition) -> str:
        return os.path.join(self.summary_dir, f"{svc.name}-deployment.md")

    def convert(self, svc: ServiceDefinition, unit_file: str, quadlet_path: str, **kwargs) -> Optional[str]:
        """
        Renders and writes the summary.

        :return: The summary path, or None if it could not be written.
        """
        dest = self.path_for(svc)
        try:
            content = self.render(svc, unit_file, quadlet_path, **kwargs)
            self._write(dest, content)
        except (OSError, SummaryWriteFailed) as e:
            logger.warning("Could not write deployment summary %s: %s", dest, e)
            return None
        return dest

    def _write(self, dest: str, content: str) -> None:
        if not os.path.isdir(self.summary_dir):
            raise SummaryWriteFailed(f"Summary directory does not exist: {self.summary_dir}")

        with open(dest, "w") as f:
            f.write(content)
        os.chmod(dest, 0o644)

        if self.owner:
            try:
                shutil.chown(dest, user=self.owner, group=self.owner)
            except (LookupError, PermissionError) as e:
                logger.debug("Leaving %s ownership unchanged: %s", dest, e)
