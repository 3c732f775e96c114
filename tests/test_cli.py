"""Tests for the mouse-gestures command line."""

import json

import yaml
from typer.testing import CliRunner

from mouse_gestures.cli import app
from mouse_gestures.config import EngineConfig, save_config
from mouse_gestures.recorder import GesturePlayer, GestureRecorder

runner = CliRunner()


def write_stroke(path, points, page_url="https://example.com/"):
    player = GesturePlayer.from_points(points, page_url=page_url)
    rec = GestureRecorder(page_url=page_url)
    rec.start()
    for e in player.events():
        rec.add(e.kind, e.to_pointer_event())
    rec.stop()
    rec.save(path)
    return path


RIGHT_DOWN = [(x, 0) for x in range(0, 22, 2)] + [(20, y) for y in range(2, 22, 2)]


class TestRecognize:
    def test_normalized(self, tmp_path):
        path = write_stroke(tmp_path / "s.json", RIGHT_DOWN)
        result = runner.invoke(app, ["recognize", str(path)])
        assert result.exit_code == 0
        assert "Tokens:  RD" in result.output
        assert "Pattern: DR" in result.output
        assert "Action:  close_tab" in result.output

    def test_raw(self, tmp_path):
        path = write_stroke(tmp_path / "s.json", RIGHT_DOWN)
        result = runner.invoke(app, ["recognize", str(path), "--raw"])
        assert result.exit_code == 0
        assert "Pattern: RD" in result.output
        assert "Action:  (none)" in result.output

    def test_link(self, tmp_path):
        path = write_stroke(tmp_path / "s.json", [(x, 0) for x in range(0, 42, 2)])
        result = runner.invoke(app, ["recognize", str(path), "--link", "https://x.test/a"])
        assert "Action:  new_tab" in result.output
        assert "URL:     https://x.test/a" in result.output

    def test_missing_recording(self, tmp_path):
        result = runner.invoke(app, ["recognize", str(tmp_path / "nope.json")])
        assert result.exit_code == 1


class TestReplay:
    def test_replay(self, tmp_path):
        path = write_stroke(tmp_path / "s.json", [(x, 0) for x in range(0, -42, -2)])
        result = runner.invoke(app, ["replay", str(path)])
        assert result.exit_code == 0
        assert "on example.com" in result.output
        assert "back" in result.output
        assert "1 action(s) emitted." in result.output

    def test_replay_on_blocked_site(self, tmp_path):
        path = write_stroke(tmp_path / "s.json", [(x, 0) for x in range(0, -42, -2)])
        cfg_path = tmp_path / "cfg.yml"
        save_config(EngineConfig.from_dict({"domain_list": ["example.com"]}), cfg_path)
        result = runner.invoke(app, ["replay", str(path), "-c", str(cfg_path)])
        assert result.exit_code == 0
        assert "0 action(s) emitted." in result.output

    def test_url_override(self, tmp_path):
        path = write_stroke(tmp_path / "s.json", [(x, 0) for x in range(0, -42, -2)])
        result = runner.invoke(app, ["replay", str(path), "--url", "chrome://settings"])
        assert "0 action(s) emitted." in result.output


class TestCheckSite:
    def test_normal(self):
        result = runner.invoke(app, ["check-site", "example.com"])
        assert result.exit_code == 0
        assert "example.com: normal" in result.output

    def test_require_modifier(self):
        result = runner.invoke(app, ["check-site", "https://gist.github.com/user/1"])
        assert "gist.github.com: require_modifier (hold alt)" in result.output

    def test_restricted(self):
        result = runner.invoke(app, ["check-site", "chrome://extensions"])
        assert "disabled (browser page)" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["check-site", "example.com", "-c", str(tmp_path / "x.yml")])
        assert result.exit_code == 1


class TestConfigCommands:
    def test_show_config(self):
        result = runner.invoke(app, ["show-config"])
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["recognition"]["min_segment_px"] == 18.0
        assert data["action_map"]["L"] == "back"

    def test_export_settings(self, tmp_path):
        out = tmp_path / "export.json"
        result = runner.invoke(app, ["export-settings", str(out)])
        assert result.exit_code == 0
        data = json.loads(out.read_text())
        assert data["meta"]["schema"] == 1
        assert data["cfg"]["link_override"] == "any_forward"


def test_log_level_option(tmp_path):
    result = runner.invoke(app, ["--log-level", "debug", "check-site", "example.com"])
    assert result.exit_code == 0
