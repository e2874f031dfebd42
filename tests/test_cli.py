from cli.cli import main
from marketing_site.core.config import Settings


def test_config_warns_without_api_key(capsys):
    exit_code = main(["config"], settings=Settings(SENDGRID_API_KEY=""))
    out = capsys.readouterr().out

    assert exit_code == 1
    assert "SENDGRID_API_KEY is not set" in out
    assert "Rate limit: 5 per 300s" in out


def test_config_redacts_api_key(capsys):
    exit_code = main(["config"], settings=Settings(SENDGRID_API_KEY="SG.supersecretvalue"))
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "supersecretvalue" not in out
    assert "SG.s" in out


def test_preview_prints_text_body(capsys):
    assert main(["preview"], settings=Settings()) == 0
    out = capsys.readouterr().out

    assert "Subject: New Demo Request from Test Submitter - Example Inc" in out
    assert "NEW DEMO REQUEST" in out


def test_preview_html(capsys):
    assert main(["preview", "--html"], settings=Settings()) == 0
    assert "<!DOCTYPE html>" in capsys.readouterr().out


def test_send_test_fails_without_api_key(capsys):
    exit_code = main(["send-test"], settings=Settings(SENDGRID_API_KEY=""))
    out = capsys.readouterr().out

    assert exit_code == 1
    assert "transport_unconfigured" in out


def test_no_command_prints_help():
    assert main([], settings=Settings()) == 1


def test_serve_uses_configured_host_and_port(monkeypatch):
    calls = []
    monkeypatch.setattr("cli.cli.uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))

    settings = Settings(API_HOST="127.0.0.1", API_PORT=9001, DEBUG=True)
    assert main(["serve"], settings=settings) == 0

    app, kwargs = calls[0]
    assert app == "marketing_site.main:app"
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9001
    assert kwargs["reload"] is True


def test_serve_flags_override_settings(monkeypatch):
    calls = []
    monkeypatch.setattr("cli.cli.uvicorn.run", lambda app, **kwargs: calls.append(kwargs))

    assert main(["serve", "--host", "localhost", "--port", "8080"], settings=Settings()) == 0
    assert calls[0]["host"] == "localhost"
    assert calls[0]["port"] == 8080
    assert calls[0]["reload"] is False
