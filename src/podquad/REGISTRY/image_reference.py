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
Image reference qualification.
Turns short Docker Hub style names like 'nginx' or 'jc21/nginx-proxy-manager'
into fully qualified references that Podman resolves without a search registry.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """
    Image reference split into registry and the remaining path.

    Examples:
        - nginx -> docker.io/library/nginx
        - jc21/nginx-proxy-manager -> docker.io/jc21/nginx-proxy-manager
        - ghcr.io/home-assistant/home-assistant:stable -> unchanged
        - localhost/myimage -> unchanged
    """

    registry: str
    path: str
    qualified: bool = False

    DEFAULT_REGISTRY = "docker.io"
    OFFICIAL_NAMESPACE = "library"

    @staticmethod
    def has_registry(reference: str) -> bool:
        """
        Check whether the first component of a reference names a registry.

        A registry component contains a dot or a port colon, or is 'localhost'.
        """
        first = reference.split("/", 1)[0]
        return "." in first or ":" in first or first == "localhost"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse an image reference string.

        Args:
            reference: Image reference as typed (e.g. 'nginx', 'myuser/myimage').

        Returns:
            Parsed ImageReference; `qualified` tells whether the input already
            named its registry.
        """
        if cls.has_registry(reference):
            registry, _, path = reference.partition("/")
            return cls(registry=registry, path=path, qualified=True)

        if "/" in reference:
            # Namespace but no registry
            return cls(registry=cls.DEFAULT_REGISTRY, path=reference)

        return cls(
            registry=cls.DEFAULT_REGISTRY,
            path=f"{cls.OFFICIAL_NAMESPACE}/{reference}",
        )

    @property
    def full_name(self) -> str:
        """Get the fully qualified image name."""
        if not self.path:
            return self.registry
        return f"{self.registry}/{self.path}"

    def __str__(self) -> str:
        return self.full_name


def normalize_image_name(raw: str) -> str:
    """
    Return the fully qualified form of an image name.

    Pure and idempotent: a name that already carries a registry is returned
    unchanged, so normalizing twice is a no-op.
    """
    return ImageReference.parse(raw).full_name
