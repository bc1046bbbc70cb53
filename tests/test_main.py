"""Tests for the command-line entrypoint."""

from poe_guard import __version__
from poe_guard.main import main


def test_version_flag(capsys) -> None:
    assert main(["-V"]) == 3

    out = capsys.readouterr().out
    assert out.startswith("POE_GUARD UNKNOWN - Version: check=")
    assert __version__ in out


def test_invalid_configuration_is_unknown(capsys, monkeypatch) -> None:
    for var in ("APP_CONFIG_FILE", "UNIFI_HOST", "UNIFI_USER", "UNIFI_PASSWORD", "UNIFI_PASSWORD_FILE"):
        monkeypatch.delenv(var, raising=False)

    assert main(["--host", "unifi.example.com"]) == 3
    assert "Invalid configuration" in capsys.readouterr().out


def test_run_uses_controller_client(capsys, monkeypatch) -> None:
    from poe_guard import main as main_module
    from poe_guard.report import CheckResult, Status

    seen = {}

    def fake_run_check(settings, client):
        seen["host"] = client.host
        seen["site"] = client.site
        return CheckResult(status=Status.WARNING, message="1 ports blocked")

    monkeypatch.setattr(main_module, "run_check", fake_run_check)
    monkeypatch.delenv("APP_CONFIG_FILE", raising=False)

    code = main(["--host", "unifi.example.com", "--user", "u", "--pass", "p", "--site", "hq"])

    assert code == 1
    assert seen == {"host": "unifi.example.com", "site": "hq"}
    assert capsys.readouterr().out == "POE_GUARD WARNING - 1 ports blocked\n"


def test_invalid_log_level_is_unknown(capsys, monkeypatch) -> None:
    monkeypatch.delenv("APP_CONFIG_FILE", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    assert main(["--host", "h", "--user", "u", "--pass", "p"]) == 3
    assert "Invalid configuration" in capsys.readouterr().out

    monkeypatch.delenv("LOG_LEVEL")
    assert main(["--host", "h", "--user", "u", "--pass", "p", "--log-level", "verbose"]) == 3
