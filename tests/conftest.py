import subprocess
from datetime import datetime

import pytest

from dotlib.config import InstallConfig, ProvisionMode
from dotlib.osdetect import Environment, OSFamily


@pytest.fixture
def repo(tmp_path):
    """A minimal dotfiles checkout: tmux/tmux.conf and an nvim/ tree."""
    root = tmp_path / "repo"
    (root / "tmux").mkdir(parents=True)
    (root / "tmux" / "tmux.conf").write_text("set -g mouse on\n")
    (root / "nvim" / "lua" / "config").mkdir(parents=True)
    (root / "nvim" / "init.lua").write_text('require("config.lazy")\n')
    (root / "nvim" / "lua" / "config" / "options.lua").write_text("vim.opt.number = true\n")
    return root


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_config(repo, home):
    def _make(
        mode=ProvisionMode.LINK,
        family=OSFamily.UNKNOWN,
        started_at=datetime(2024, 1, 1, 12, 0, 0),
        **kwargs,
    ):
        return InstallConfig(
            repo_root=repo,
            home=home,
            environment=Environment(family=family),
            mode=mode,
            started_at=started_at,
            **kwargs,
        )
    return _make


class FakeRunner:
    """
    Stand-in for subprocess.run.

    Check commands (capture_output=True) succeed only for packages in
    `installed`. Other commands succeed unless their prefix is in `fail`.
    """

    def __init__(self, installed=(), fail=None):
        self.installed = set(installed)
        self.fail = fail or {}
        self.calls = []

    @property
    def commands(self):
        """Commands that were not package checks."""
        return [cmd for cmd, captured in self.calls if not captured]

    def __call__(self, cmd, capture_output=False, check=False, **kwargs):
        cmd = list(cmd)
        self.calls.append((cmd, capture_output))
        if capture_output:
            rc = 0 if cmd[-1] in self.installed else 1
        else:
            rc = 0
            for prefix, code in self.fail.items():
                if tuple(cmd[:len(prefix)]) == tuple(prefix):
                    rc = code
        if check and rc != 0:
            raise subprocess.CalledProcessError(rc, cmd)
        return subprocess.CompletedProcess(cmd, rc)


@pytest.fixture
def fake_run(monkeypatch):
    def _install(**kwargs):
        runner = FakeRunner(**kwargs)
        monkeypatch.setattr(subprocess, "run", runner)
        return runner
    return _install
