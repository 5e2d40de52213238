import pytest

import ytrss.cli as cli
from ytrss.config import Settings


class FakeApp:
    instances = []

    def __init__(self, *, settings):
        self.settings = settings
        self.return_code = None
        self.ran = False
        FakeApp.instances.append(self)

    def run(self):
        self.ran = True


@pytest.fixture
def patched(monkeypatch):
    FakeApp.instances = []
    monkeypatch.setattr(cli, "configure_logging", lambda **kw: None)
    monkeypatch.setattr(cli, "load_settings", lambda: Settings())
    monkeypatch.setattr(cli, "YtrssApp", FakeApp)
    return monkeypatch


def test_version(capsys):
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.startswith("ytrss ")


def test_update_exits_before_ui(patched):
    patched.setattr(cli, "check_and_update", lambda version: True)
    assert cli.main([]) == 0
    assert FakeApp.instances == []


def test_runs_ui_and_returns_its_code(patched):
    patched.setattr(cli, "check_and_update", lambda version: False)

    def run_fatal(self):
        self.return_code = 1

    patched.setattr(FakeApp, "run", run_fatal)
    assert cli.main([]) == 1
    assert len(FakeApp.instances) == 1


def test_normal_quit_is_zero(patched):
    patched.setattr(cli, "check_and_update", lambda version: False)
    assert cli.main([]) == 0
    assert FakeApp.instances[0].ran


def test_ui_crash_is_one(patched, capsys):
    patched.setattr(cli, "check_and_update", lambda version: False)

    def explode(self):
        raise RuntimeError("no terminal")

    patched.setattr(FakeApp, "run", explode)
    assert cli.main([]) == 1
    assert "no terminal" in capsys.readouterr().err


def test_update_check_can_be_disabled(patched):
    patched.setattr(cli, "load_settings", lambda: Settings(check_for_updates=False))

    def never(version):
        raise AssertionError("update check should not run")

    patched.setattr(cli, "check_and_update", never)
    assert cli.main([]) == 0
