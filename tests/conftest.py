"""
Shared fakes for host commands and account lookups.
"""
from types import SimpleNamespace

import pytest

from podquad.RUNNERS.command_runner import CommandResult


class FakeRunner:
    """
    Records commands instead of running them.

    `failures` maps a command prefix (tuple) to the exit code it returns.
    useradd calls register the account so later lookups succeed.
    """

    def __init__(self, failures=None, installed=("podman",), accounts=None):
        self.calls = []
        self.failures = dict(failures or {})
        self.installed = set(installed)
        self.accounts = dict(accounts or {})
        self._next_uid = 990

    def run(self, args, capture_output=None):
        args = list(args)
        self.calls.append(args)
        for prefix, code in self.failures.items():
            if tuple(args[:len(prefix)]) == prefix:
                return CommandResult(args=args, returncode=code, stderr=f"{args[0]} failed")
        if args[0] == "useradd":
            self.accounts[args[-1]] = (self._next_uid, self._next_uid)
            self._next_uid += 1
        if args[:2] == ["apt-get", "install"]:
            self.installed.add(args[-1])
        return CommandResult(args=args, returncode=0)

    def which(self, executable):
        if executable in self.installed:
            return f"/usr/bin/{executable}"
        return None

    def lookup(self, name):
        if name not in self.accounts:
            raise KeyError(name)
        uid, gid = self.accounts[name]
        return SimpleNamespace(pw_name=name, pw_uid=uid, pw_gid=gid)

    def commands(self, program):
        return [call for call in self.calls if call[0] == program]


@pytest.fixture
def fake_runner():
    return FakeRunner()
