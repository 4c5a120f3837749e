"""
Unit tests for service account provisioning.
"""
import pytest
from conftest import FakeRunner
from podquad.errors import ProvisioningFailed
from podquad.MANAGERS.user_provisioner import UserProvisioner
from podquad.MODELS.service_definition import ServiceDefinition, VolumeMount


class TestUserProvisioner:
    """Tests for UserProvisioner."""

    def test_creates_user_and_directories(self):
        runner = FakeRunner(accounts={"admin": (1000, 1000)})
        provisioner = UserProvisioner(runner, admin_user="admin", lookup=runner.lookup)

        uid, gid = provisioner.ensure_service_user("grafana")

        assert (uid, gid) == (990, 990)
        assert runner.calls[0] == [
            "useradd", "-r", "-c", "grafana service user", "-d", "/opt/grafana",
            "-s", "/usr/sbin/nologin", "grafana",
        ]
        installs = [call[-1] for call in runner.commands("install")]
        assert installs == ["/opt/grafana", "/etc/grafana", "/var/lib/grafana"]
        assert runner.commands("install")[0][:8] == ["install", "-d", "-m", "750", "-o", "grafana", "-g", "grafana"]
        assert runner.commands("usermod") == [["usermod", "-aG", "grafana", "admin"]]

    def test_existing_user_is_reused(self):
        runner = FakeRunner(accounts={"grafana": (472, 472)})
        provisioner = UserProvisioner(runner, lookup=runner.lookup)
        assert provisioner.ensure_service_user("grafana") == (472, 472)
        assert runner.calls == []

    def test_missing_admin_skips_group(self):
        runner = FakeRunner()
        provisioner = UserProvisioner(runner, admin_user="admin", lookup=runner.lookup)
        provisioner.ensure_service_user("grafana")
        assert runner.commands("usermod") == []

    def test_useradd_failure(self):
        runner = FakeRunner(failures={("useradd",): 9})
        provisioner = UserProvisioner(runner, lookup=runner.lookup)
        with pytest.raises(ProvisioningFailed):
            provisioner.ensure_service_user("grafana")
        assert runner.commands("install") == []

    def test_prepare_volume_dirs(self, tmp_path):
        existing = tmp_path / "exists"
        existing.mkdir()
        runner = FakeRunner()
        provisioner = UserProvisioner(runner, lookup=runner.lookup)
        svc = ServiceDefinition(
            name="homeassistant",
            image="docker.io/homeassistant/home-assistant",
            volumes=[
                VolumeMount(host_path="/var/lib/homeassistant/config", container_path="/config"),
                VolumeMount(host_path="/etc/localtime", container_path="/etc/localtime", read_only=True),
                VolumeMount(host_path="/run/dbus", container_path="/run/dbus"),
                VolumeMount(host_path=str(existing), container_path="/data"),
            ],
        )

        created = provisioner.prepare_volume_dirs(svc)

        assert created == ["/var/lib/homeassistant/config"]
        assert runner.calls == [[
            "install", "-d", "-m", "750", "-o", "homeassistant", "-g", "homeassistant",
            "/var/lib/homeassistant/config",
        ]]
