from sitekit.server import DevServer, _ChangeHandler


class DummyEvent:
    def __init__(self, path, is_directory=False):
        self.src_path = path
        self.is_directory = is_directory


def test_port_defaults_to_config_and_can_be_overridden(tmp_path):
    assert DevServer(tmp_path).http_port == 8080
    assert DevServer(tmp_path, http_port=5055).http_port == 5055
    (tmp_path / "sitekit.yaml").write_text("bundler:\n  port: 3000\n", encoding="utf-8")
    assert DevServer(tmp_path).http_port == 3000


def test_should_rebuild(tmp_path):
    server = DevServer(tmp_path)
    assert server.should_rebuild(tmp_path / "src" / "index.jinja")
    assert server.should_rebuild(tmp_path / "sitekit.yaml")
    assert not server.should_rebuild(tmp_path / "README.md")
    assert not server.should_rebuild(tmp_path / "_site" / "index.html")
    assert not server.should_rebuild(tmp_path / "_site.staging" / "index.html")
    assert not server.should_rebuild(tmp_path / "src" / "node_modules" / "x.js")


def test_change_handler_triggers_rebuild(tmp_path):
    server = DevServer(tmp_path)
    calls = []
    server.rebuild = lambda: calls.append("rebuild")
    handler = _ChangeHandler(server)

    handler.on_any_event(DummyEvent(str(tmp_path / "_site" / "index.html")))
    handler.on_any_event(DummyEvent(str(tmp_path / "src"), is_directory=True))
    assert calls == []

    handler.on_any_event(DummyEvent(str(tmp_path / "src" / "index.jinja")))
    assert calls == ["rebuild"]


def test_build_swaps_staging_into_output(project):
    server = DevServer(project)
    server.build()
    assert (project / "_site" / "index.html").exists()
    assert not (project / "_site.staging").exists()

    # A second build keeps files left from the previous output.
    (project / "_site" / "extra.txt").write_text("x", encoding="utf-8")
    server.build()
    assert (project / "_site" / "extra.txt").exists()


def test_rebuild_reports_build_errors(project, capsys):
    server = DevServer(project)
    (project / "src" / "bad.jinja").write_text("{% if %}", encoding="utf-8")
    server.rebuild()
    out = capsys.readouterr().out
    assert "Change detected; rebuilding..." in out
    assert "Build failed:" in out
    assert server._rebuilding is False


def test_rebuild_reports_config_errors(project, capsys):
    server = DevServer(project)
    (project / "sitekit.yaml").write_text("bundler: [unclosed\n", encoding="utf-8")
    server.rebuild()
    out = capsys.readouterr().out
    assert "Build failed:" in out
    assert "sitekit.yaml" in out
    assert server._rebuilding is False
