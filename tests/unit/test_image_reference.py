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
Unit tests for image name qualification.
"""
import pytest
from podquad.REGISTRY.image_reference import ImageReference, normalize_image_name


class TestImageReference:
    """Tests for ImageReference parsing."""

    def test_parse_simple_name(self):
        """Test parsing a bare official image name."""
        ref = ImageReference.parse("nginx")
        assert ref.registry == "docker.io"
        assert ref.path == "library/nginx"
        assert ref.qualified is False

    def test_parse_user_image(self):
        """Test parsing user/image format."""
        ref = ImageReference.parse("jc21/nginx-proxy-manager")
        assert ref.registry == "docker.io"
        assert ref.path == "jc21/nginx-proxy-manager"

    def test_parse_full_reference(self):
        """Test parsing a reference that names its registry."""
        ref = ImageReference.parse("ghcr.io/home-assistant/home-assistant:stable")
        assert ref.registry == "ghcr.io"
        assert ref.path == "home-assistant/home-assistant:stable"
        assert ref.qualified is True

    def test_parse_localhost_registry(self):
        """Test parsing localhost registries with and without a port."""
        assert ImageReference.parse("localhost/myimage").registry == "localhost"
        assert ImageReference.parse("localhost:5000/myimage").registry == "localhost:5000"

    def test_str_representation(self):
        """Test string representation."""
        assert str(ImageReference.parse("nginx")) == "docker.io/library/nginx"


class TestNormalizeImageName:
    """Tests for normalize_image_name."""

    @pytest.mark.parametrize("name", ["nginx", "grafana", "home-assistant", "redis"])
    def test_bare_names_get_library_namespace(self, name):
        assert normalize_image_name(name) == "docker.io/library/" + name

    @pytest.mark.parametrize("name", ["jc21/nginx-proxy-manager", "homeassistant/home-assistant"])
    def test_namespaced_names_get_docker_hub(self, name):
        assert normalize_image_name(name) == "docker.io/" + name

    @pytest.mark.parametrize("name", [
        "docker.io/library/nginx",
        "ghcr.io/linuxserver/plex",
        "quay.io/prometheus/node-exporter:v1.8.0",
        "localhost/myimage",
        "localhost:5000/myimage",
        "registry:5000/team/app",
        "nginx:1.27",
    ])
    def test_qualified_names_unchanged(self, name):
        assert normalize_image_name(name) == name

    def test_idempotent(self):
        once = normalize_image_name("jc21/nginx-proxy-manager")
        assert normalize_image_name(once) == once
