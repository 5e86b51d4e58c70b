"""
Tests for the legacy-ping command line, result rendering and metrics
"""

import json

import pytest

from legacy_ping import __main__ as cli
from legacy_ping import report
from legacy_ping.config import CONFIG_PATH_ENV, ServerConfig
from legacy_ping.metrics import generate_metrics
from legacy_ping.report import QueryResult, format_json, format_text, query_server
from legacy_ping.status import PingIOError, Status, Version

MODERN = Status(motd="A Minecraft Server", online=(5, 20), version=Version(127, "1.8"))
LEGACY = Status(motd="Old server", online=(3, 20))


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)


@pytest.fixture
def fake_ping(monkeypatch):
    """Replace get_status with a lookup keyed by host."""
    answers = {}
    calls = []

    def fake_get_status(address, connect_timeout):
        calls.append((address, connect_timeout))
        answer = answers[address[0]]
        if isinstance(answer, Exception):
            raise answer
        return answer

    monkeypatch.setattr(report, "get_status", fake_get_status)
    return answers, calls


class TestParseTarget:
    """Test HOST[:PORT] parsing"""

    @pytest.mark.parametrize(
        "target, address",
        [
            ("example.org", ("example.org", 25565)),
            ("example.org:25566", ("example.org", 25566)),
            ("[::1]:1234", ("::1", 1234)),
            ("[::1]", ("::1", 25565)),
            ("::1", ("::1", 25565)),
        ],
    )
    def test_valid(self, target, address):
        assert cli.parse_target(target).address == address

    @pytest.mark.parametrize("target", ["host:", "host:0", "host:99999", ":25565", "[::1", "[::1]x"])
    def test_invalid(self, target):
        with pytest.raises(ValueError):
            cli.parse_target(target)


class TestRendering:
    """Test text, JSON and Prometheus output"""

    def results(self):
        return [
            QueryResult(ServerConfig("lobby", "a.example", 25565), 0.012, status=MODERN),
            QueryResult(ServerConfig("old", "b.example", 25565), 0.020, status=LEGACY),
            QueryResult(
                ServerConfig("down", "c.example", 25565), 0.5, error=PingIOError("timed out")
            ),
        ]

    def test_text(self):
        text = format_text(self.results())
        assert "lobby (a.example:25565): 5/20 players [1.8, protocol 127] - A Minecraft Server" in text
        assert "old (b.example:25565): 3/20 players - Old server" in text
        assert "down (c.example:25565): ERROR timed out" in text

    def test_json(self):
        data = json.loads(format_json(self.results()))
        assert data[0]["status"] == {
            "dirty": True,
            "motd": "A Minecraft Server",
            "online": 5,
            "max": 20,
            "version": {"protocol": 127, "server": "1.8"},
        }
        assert data[1]["status"]["version"] is None
        assert data[2]["ok"] is False
        assert data[2]["error"] == {"type": "PingIOError", "message": "timed out"}

    def test_prometheus(self):
        text = generate_metrics(self.results())
        assert "# TYPE legacy_ping_up gauge" in text
        assert 'legacy_ping_up{server="lobby"} 1' in text
        assert 'legacy_ping_up{server="down"} 0' in text
        assert 'legacy_ping_players_online{server="old"} 3' in text
        assert 'legacy_ping_players_max{server="lobby"} 20' in text
        assert 'legacy_ping_protocol_version{server="lobby",version="1.8"} 127' in text
        assert 'legacy_ping_players_online{server="down"}' not in text

    def test_prometheus_escapes_labels(self):
        results = [QueryResult(ServerConfig('we"ird\\', "h", 1), 0.1, status=LEGACY)]
        assert 'server="we\\"ird\\\\"' in generate_metrics(results)


class TestQueryServer:
    """Test the per-server wrapper"""

    def test_success(self, fake_ping):
        answers, calls = fake_ping
        answers["a.example"] = MODERN
        result = query_server(ServerConfig("lobby", "a.example", 25566), 3.0)
        assert result.ok
        assert result.status == MODERN
        assert calls == [(("a.example", 25566), 3.0)]

    def test_failure_is_captured(self, fake_ping, caplog):
        answers, _ = fake_ping
        answers["a.example"] = PingIOError("refused")
        result = query_server(ServerConfig("lobby", "a.example", 25565), 3.0)
        assert not result.ok
        assert isinstance(result.error, PingIOError)
        assert "refused" in caplog.text


class TestMain:
    """Test the CLI entry point"""

    def test_targets_from_command_line(self, fake_ping, capsys):
        answers, calls = fake_ping
        answers["a.example"] = MODERN
        assert cli.main(["a.example:25570", "-t", "1.5"]) == cli.EXIT_OK
        assert calls == [(("a.example", 25570), 1.5)]
        assert "5/20 players" in capsys.readouterr().out

    def test_failure_exit_code(self, fake_ping, capsys):
        answers, _ = fake_ping
        answers["a.example"] = MODERN
        answers["b.example"] = PingIOError("timed out")
        assert cli.main(["a.example", "b.example", "-f", "json"]) == cli.EXIT_QUERY_FAILED
        data = json.loads(capsys.readouterr().out)
        assert [d["ok"] for d in data] == [True, False]

    def test_servers_from_config(self, fake_ping, tmp_path, capsys):
        answers, calls = fake_ping
        answers["cfg.example"] = LEGACY
        path = tmp_path / "config.yaml"
        path.write_text(
            "connect_timeout_seconds: 4\nservers:\n  old:\n    host: cfg.example\n",
            encoding="utf-8",
        )
        assert cli.main(["-c", str(path), "-f", "prometheus"]) == cli.EXIT_OK
        assert calls == [(("cfg.example", 25565), 4.0)]
        assert 'legacy_ping_up{server="old"} 1' in capsys.readouterr().out

    def test_config_from_environment(self, fake_ping, tmp_path, monkeypatch):
        answers, calls = fake_ping
        answers["env.example"] = LEGACY
        path = tmp_path / "config.yaml"
        path.write_text("servers:\n  e:\n    host: env.example\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
        assert cli.main([]) == cli.EXIT_OK
        assert calls[0][0] == ("env.example", 25565)

    def test_nothing_to_query(self, fake_ping):
        assert cli.main([]) == cli.EXIT_USAGE

    def test_bad_target(self, fake_ping):
        assert cli.main(["host:notaport"]) == cli.EXIT_USAGE

    @pytest.mark.parametrize("timeout", ["0", "-1", "nan", "inf"])
    def test_bad_timeout(self, fake_ping, timeout):
        answers, calls = fake_ping
        answers["a.example"] = MODERN
        assert cli.main(["a.example", "-t", timeout]) == cli.EXIT_USAGE
        assert calls == []

    def test_bad_logging_section(self, fake_ping, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("logging: [a, b]\nservers:\n  a:\n    host: a.example\n", encoding="utf-8")
        assert cli.main(["-c", str(path)]) == cli.EXIT_USAGE

    def test_missing_config_file(self, fake_ping, tmp_path):
        assert cli.main(["-c", str(tmp_path / "missing.yaml")]) == cli.EXIT_USAGE
