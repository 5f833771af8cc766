"""Tests for the skillhub CLI."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from skillhub.cli import main
from skillhub.moderation.models import AuditAction
from tests.conftest import RICH_README, THIN_README, make_account, make_skill


@pytest.fixture
def data_dir(tmp_path, monkeypatch) -> Path:
    monkeypatch.setenv("SKILLHUB_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("SKILLHUB_WEBHOOK_URL", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path / "data"


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "SKILL.md"
    path.write_text(text)
    return path


class TestCheck:
    def test_pass(self, tmp_path, capsys):
        path = _write(tmp_path, RICH_README)
        with patch("sys.argv", ["skillhub", "check", str(path), "--tier", "trusted"]):
            main()
        out = capsys.readouterr().out
        assert "Decision:   pass" in out
        assert "Score:      100" in out

    def test_reject_json(self, tmp_path, capsys):
        path = _write(tmp_path, THIN_README)
        with patch("sys.argv", ["skillhub", "check", str(path), "--json"]):
            main()
        data = json.loads(capsys.readouterr().out)
        assert data["decision"] == "reject"
        assert data["trust_tier"] == "low"

    def test_similar_count(self, tmp_path, capsys):
        path = _write(tmp_path, RICH_README)
        with patch("sys.argv", ["skillhub", "check", str(path), "--similar", "5", "--json"]):
            main()
        assert json.loads(capsys.readouterr().out)["similar_recent_count"] == 5

    def test_missing_file(self, tmp_path, capsys):
        with patch("sys.argv", ["skillhub", "check", str(tmp_path / "nope.md")]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
        assert "file not found" in capsys.readouterr().err


class TestFingerprint:
    def test_prints_fingerprint(self, tmp_path, capsys):
        path = _write(tmp_path, "# Title\n\n- one\n- two three four\n")
        with patch("sys.argv", ["skillhub", "fingerprint", str(path)]):
            main()
        assert capsys.readouterr().out.strip() == "h1:s|b:s|b:m"


class TestHubCommands:
    def test_drain_and_audit(self, data_dir, capsys):
        from skillhub.hub import Hub

        hub = Hub.open(data_dir / "skillhub.db", data_dir / "documents")
        author = make_account(hub, "author")
        comment = hub.state_machine.add(author, make_skill(hub).id, "hello")
        hub.close()

        with patch("sys.argv", ["skillhub", "drain"]):
            main()
        assert "Delivered: 1" in capsys.readouterr().out

        with patch("sys.argv", ["skillhub", "audit", comment.id]):
            main()
        out = capsys.readouterr().out
        assert AuditAction.ADD.value in out
        assert "author" in out

    def test_audit_empty(self, data_dir, capsys):
        with patch("sys.argv", ["skillhub", "audit", "nothing"]):
            main()
        assert "No audit entries" in capsys.readouterr().out


class TestServe:
    def test_serve_calls_runner(self):
        with patch("sys.argv", ["skillhub", "serve"]), patch("skillhub.cli.run_server") as run:
            main()
        run.assert_called_once()


class TestNoCommand:
    def test_prints_help_and_exits(self):
        with patch("sys.argv", ["skillhub"]), pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
