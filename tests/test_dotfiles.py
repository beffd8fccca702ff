import pytest

import dotfiles
from dotlib import packages
from dotlib.config import ProvisionMode, build_config
from dotlib.files import is_linked_to
from dotlib.osdetect import Environment, OSFamily
from dotlib.paths import BACKUP_DIRNAME, DOTFILE_LINKS, PROJECT_ROOT


@pytest.fixture
def user_home(monkeypatch, home):
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("SUDO_USER", raising=False)
    return home


def test_help_exits_zero_without_touching_home(user_home, capsys):
    with pytest.raises(SystemExit) as excinfo:
        dotfiles.main(["--help"])

    assert excinfo.value.code == 0
    assert "--copy" in capsys.readouterr().out
    assert list(user_home.iterdir()) == []


def test_unknown_option_is_rejected(user_home):
    with pytest.raises(SystemExit) as excinfo:
        dotfiles.main(["--bogus"])
    assert excinfo.value.code == 2
    assert list(user_home.iterdir()) == []


def test_fresh_host_links_repository_files(user_home):
    with pytest.raises(SystemExit) as excinfo:
        dotfiles.main(["--skip-packages"])

    assert excinfo.value.code == 0
    assert is_linked_to(user_home / ".tmux.conf", PROJECT_ROOT / "tmux" / "tmux.conf")
    assert is_linked_to(user_home / ".config" / "nvim", PROJECT_ROOT / "nvim")
    assert not (user_home / BACKUP_DIRNAME).exists()


def test_build_config_defaults(user_home):
    env = Environment(family=OSFamily.ARCH)
    config = build_config(environment=env)

    assert config.home == user_home
    assert config.repo_root == PROJECT_ROOT
    assert config.mode is ProvisionMode.LINK
    assert config.environment is env
    assert build_config(copy=True, environment=env).copy_mode


def test_unknown_os_still_provisions(make_config, home, capsys, fake_run):
    runner = fake_run()

    code = dotfiles.Dotfiles(make_config(family=OSFamily.UNKNOWN)).run()

    assert code == 0
    assert runner.calls == []
    out = capsys.readouterr().out
    assert "Detected OS: unknown" in out
    assert "[WARN] Unknown OS" in out
    assert "Installation Complete!" in out
    assert (home / ".tmux.conf").is_symlink()
    assert (home / ".config" / "nvim").is_symlink()


def test_package_failure_stops_before_dotfiles(make_config, home, capsys, fake_run):
    fake_run(fail={("sudo", "apt-get", "install"): 100})

    code = dotfiles.Dotfiles(make_config(family=OSFamily.DEBIAN)).run()

    assert code == 100
    assert not (home / ".tmux.conf").exists()
    assert "[ERROR] Package installation failed" in capsys.readouterr().err


def test_filesystem_failure_exit_code(make_config, home, capsys):
    (home / ".config").write_text("in the way\n")

    code = dotfiles.Dotfiles(make_config(family=OSFamily.LINUX)).run()

    assert code == 1
    # Pairs before the failure stay done
    assert (home / ".tmux.conf").is_symlink()
    assert "[ERROR] Dotfile installation failed" in capsys.readouterr().err


def test_changes_are_summarized(make_config, home, capsys, fake_run, monkeypatch):
    monkeypatch.setattr(packages, "ensure_homebrew", lambda: False)
    fake_run(installed={"git", "tmux"})
    (home / ".tmux.conf").write_text("old\n")

    code = dotfiles.Dotfiles(make_config(family=OSFamily.MACOS)).run()

    assert code == 0
    out = capsys.readouterr().out
    assert "Changes made: 4" in out
    assert "Installed 1 packages: neovim" in out
    assert ":Lazy" in out


def test_skip_packages(make_config, fake_run, capsys):
    runner = fake_run()

    code = dotfiles.Dotfiles(make_config(family=OSFamily.DEBIAN, skip_packages=True)).run()

    assert code == 0
    assert runner.calls == []
    assert "Skipping package installation" in capsys.readouterr().out


def test_repo_root_holds_every_dotfile_source(user_home):
    config = build_config(environment=Environment(family=OSFamily.UNKNOWN))

    assert (config.repo_root / "tmux" / "tmux.conf").is_file()
    for spec in DOTFILE_LINKS:
        assert (config.repo_root / spec.source).exists(), spec.source


def test_malformed_manifest_fails_the_package_step(make_config, repo, home, capsys, fake_run):
    runner = fake_run()
    (repo / "packages.toml").write_text("[core\n")

    code = dotfiles.Dotfiles(make_config(family=OSFamily.DEBIAN)).run()

    assert code == 1
    assert runner.calls == []
    assert not (home / ".tmux.conf").exists()
    assert "[ERROR] Package installation failed: Cannot read" in capsys.readouterr().err
