from click.testing import CliRunner

from sitekit.cli import cli


def test_cli_build(project, monkeypatch):
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built 4 pages" in result.output
    assert (project / "_site" / "index.html").exists()


def test_cli_build_output_option(project, monkeypatch, tmp_path):
    monkeypatch.chdir(project)
    target = tmp_path / "dist"
    result = CliRunner().invoke(cli, ["build", "--output", str(target)])
    assert result.exit_code == 0
    assert (target / "index.html").exists()


def test_cli_build_reports_errors(project, monkeypatch):
    monkeypatch.chdir(project)
    (project / "src" / "bad.jinja").write_text("{% if %}", encoding="utf-8")
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "src/bad.jinja" in result.output


def test_cli_build_reports_config_errors(project, monkeypatch):
    monkeypatch.chdir(project)
    (project / "sitekit.yaml").write_text("a: [b\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "sitekit.yaml" in result.output


def test_cli_url(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["url", "hero.jpg"], env={"IMAGEKIT_URL": "https://ik.imagekit.io/acct"})
    assert result.output.strip() == "https://ik.imagekit.io/acct/tr:w-1920,f-auto,q-80/hero.jpg"
    result = runner.invoke(
        cli, ["url", "hero.jpg", "--width", "640"], env={"IMAGEKIT_URL": "https://ik.imagekit.io/acct"}
    )
    assert result.output.strip() == "https://ik.imagekit.io/acct/tr:w-640,f-auto,q-80/hero.jpg"


def test_cli_serve_uses_port_override(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    called = {}

    class DummyServer:
        def __init__(self, root, http_port=None):
            called["root"] = root
            called["port"] = http_port

        def start(self):
            called["started"] = True

    monkeypatch.setattr("sitekit.server.DevServer", DummyServer)
    result = CliRunner().invoke(cli, ["serve", "--port", "5050"], catch_exceptions=False)
    assert result.exit_code == 0
    assert called == {"root": tmp_path, "port": 5050, "started": True}


def test_module_main_entrypoint():
    from sitekit.__main__ import main

    assert callable(main)
