"""
Unit tests for the systemd activation driver.
"""
from conftest import FakeRunner
from podquad.MANAGERS.activation_driver import ActivationOutcome, SystemdActivator


class TestSystemdActivator:
    """Tests for SystemdActivator."""

    def make(self, runner):
        self.sleeps = []
        return SystemdActivator(runner, settle_delay=5, sleep=self.sleeps.append)

    def test_started(self):
        runner = FakeRunner()
        result = self.make(runner).activate("nginxpm.service")
        assert result.outcome == ActivationOutcome.STARTED
        assert result.ok
        assert runner.calls == [
            ["systemctl", "daemon-reload"],
            ["systemctl", "start", "nginxpm.service"],
            ["systemctl", "is-active", "--quiet", "nginxpm.service"],
        ]
        assert self.sleeps == [5]

    def test_reload_failure_skips_start(self):
        runner = FakeRunner(failures={("systemctl", "daemon-reload"): 1})
        result = self.make(runner).activate("nginxpm.service")
        assert result.outcome == ActivationOutcome.FAILED_TO_RELOAD
        assert runner.calls == [["systemctl", "daemon-reload"]]
        assert self.sleeps == []

    def test_start_failure(self):
        runner = FakeRunner(failures={("systemctl", "start"): 1})
        result = self.make(runner).activate("nginxpm.service")
        assert result.outcome == ActivationOutcome.FAILED_TO_START
        assert any("journalctl -u nginxpm.service" in hint for hint in result.hints)
        assert ["systemctl", "is-active", "--quiet", "nginxpm.service"] not in runner.calls

    def test_not_active_after_settle_is_checked_once(self):
        runner = FakeRunner(failures={("systemctl", "is-active"): 3})
        result = self.make(runner).activate("nginxpm.service")
        assert result.outcome == ActivationOutcome.FAILED_TO_START
        assert len(runner.commands("systemctl")) == 3
        assert self.sleeps == [5]
