import pytest

from conftest import FakeRunner
from podquad.BUILDERS.definition_builder import ServiceDefinitionBuilder
from podquad.errors import ImagePullFailed, ReloadFailed
from podquad.MANAGERS.activation_driver import ActivationOutcome, SystemdActivator
from podquad.MANAGERS.service_generator import ServiceGenerator
from podquad.MANAGERS.user_provisioner import UserProvisioner
from podquad.MODELS.service_inputs import ServiceInputs
from podquad.MODELS.settings import GeneratorSettings


def make_generator(tmp_path, runner):
    settings = GeneratorSettings(quadlet_dir=str(tmp_path / "systemd"), summary_dir=str(tmp_path))
    return ServiceGenerator(
        settings,
        runner=runner,
        provisioner=UserProvisioner(runner, lookup=runner.lookup),
        activator=SystemdActivator(runner, sleep=lambda seconds: None),
    )


def nginxpm():
    return ServiceDefinitionBuilder().build(ServiceInputs(
        name="nginxpm",
        image="jc21/nginx-proxy-manager",
        volumes="./data:/data, ./letsencrypt:/etc/letsencrypt",
    ))


def test_generate_nginxpm(tmp_path):
    runner = FakeRunner()
    report = make_generator(tmp_path, runner).generate(nginxpm(), access_ip="10.0.0.5")

    assert report.activation.outcome == ActivationOutcome.STARTED
    assert report.definition.service_uid == 990
    content = (tmp_path / "systemd" / "nginxpm.container").read_text()
    assert content == report.unit_file
    for line in [
        "Image=docker.io/jc21/nginx-proxy-manager",
        "User=990",
        "Network=host",
        "Volume=/var/lib/nginxpm/data:/data",
        "Volume=/var/lib/nginxpm/letsencrypt:/etc/letsencrypt",
        "AutoUpdate=registry",
    ]:
        assert line in content.splitlines()

    summary = (tmp_path / "nginxpm-deployment.md").read_text()
    assert content in summary
    assert "http://10.0.0.5" in summary


def test_steps_run_in_order(tmp_path):
    runner = FakeRunner()
    make_generator(tmp_path, runner).generate(nginxpm())
    programs = [call[0] for call in runner.calls]
    assert programs.index("useradd") < programs.index("podman") < programs.index("systemctl")
    volume_dirs = [call[-1] for call in runner.commands("install")]
    assert "/var/lib/nginxpm/data" in volume_dirs
    assert "/var/lib/nginxpm/letsencrypt" in volume_dirs


def test_pull_failure_writes_nothing(tmp_path):
    runner = FakeRunner(failures={("podman", "pull"): 125})
    with pytest.raises(ImagePullFailed) as exc:
        make_generator(tmp_path, runner).generate(nginxpm())
    assert exc.value.reference == "docker.io/jc21/nginx-proxy-manager"
    assert not (tmp_path / "systemd").exists()


def test_reload_failure_keeps_artifact(tmp_path):
    runner = FakeRunner(failures={("systemctl", "daemon-reload"): 1})
    with pytest.raises(ReloadFailed):
        make_generator(tmp_path, runner).generate(nginxpm())
    assert (tmp_path / "systemd" / "nginxpm.container").exists()


def test_inactive_service_skips_summary(tmp_path):
    runner = FakeRunner(failures={("systemctl", "is-active"): 3})
    report = make_generator(tmp_path, runner).generate(nginxpm())
    assert report.activation.outcome == ActivationOutcome.FAILED_TO_START
    assert report.summary_path is None
    assert (tmp_path / "systemd" / "nginxpm.container").exists()
