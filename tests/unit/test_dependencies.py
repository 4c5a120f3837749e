"""
Unit tests for the dependency checker.
"""
import pytest
from conftest import FakeRunner
from podquad.errors import DependencyMissing
from podquad.MANAGERS.dependencies import DependencyChecker


def test_installed_tool_needs_nothing():
    runner = FakeRunner(installed=["podman"])
    asked = []
    assert DependencyChecker(runner).ensure("podman", "podman", asked.append) is True
    assert asked == []
    assert runner.calls == []


def test_declined_install():
    runner = FakeRunner(installed=[])
    assert DependencyChecker(runner).ensure("podman", "podman", lambda package: False) is False
    assert runner.calls == []


def test_accepted_install():
    runner = FakeRunner(installed=[])
    assert DependencyChecker(runner).ensure("podman", "podman", lambda package: True) is True
    assert runner.calls == [["apt-get", "update"], ["apt-get", "install", "-y", "podman"]]


def test_failed_install():
    runner = FakeRunner(installed=[], failures={("apt-get", "install"): 100})
    with pytest.raises(DependencyMissing):
        DependencyChecker(runner).ensure("podman", "podman", lambda package: True)
