"""Tests for configuration loading and the token usage ledger."""

import json

from specbook.analysis.models import TokenUsage
from specbook.config import (
    DEFAULT_MODEL,
    AnalysisConfig,
    ScannerConfig,
    SpecbookConfig,
    append_token_usage,
    read_token_usage,
)


class TestSpecbookConfig:
    """Tests for SpecbookConfig load/save."""

    def test_defaults(self):
        config = SpecbookConfig()
        assert config.analysis.model == DEFAULT_MODEL
        assert config.analysis.max_tokens == 8192
        assert config.analysis.timeout_seconds == 300.0
        assert config.scanner.max_files == 500

    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SPECBOOK_MODEL", raising=False)
        config = SpecbookConfig.load(tmp_path / "nope.json")
        assert config == SpecbookConfig()

    def test_save_then_load(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SPECBOOK_MODEL", raising=False)
        path = tmp_path / "cfg" / "config.json"
        original = SpecbookConfig(
            analysis=AnalysisConfig(model="other-model", timeout_seconds=30.0),
            scanner=ScannerConfig(max_depth=2),
        )
        original.save(path)

        assert SpecbookConfig.load(path) == original

    def test_unknown_keys_ignored(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SPECBOOK_MODEL", raising=False)
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"analysis": {"max_tokens": 100, "legacy": True}, "extra": 1}))

        config = SpecbookConfig.load(path)
        assert config.analysis.max_tokens == 100
        assert config.analysis.model == DEFAULT_MODEL

    def test_corrupt_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SPECBOOK_MODEL", raising=False)
        path = tmp_path / "config.json"
        path.write_text("not json")
        assert SpecbookConfig.load(path) == SpecbookConfig()

    def test_env_overrides_model(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SPECBOOK_MODEL", "env-model")
        assert SpecbookConfig.load(tmp_path / "nope.json").analysis.model == "env-model"


class TestTokenUsageLedger:
    """Tests for the append-only token usage ledger."""

    def test_empty_ledger(self, tmp_path):
        assert read_token_usage(tmp_path / "usage.json") == []

    def test_append_accumulates(self, tmp_path):
        path = tmp_path / "dir" / "usage.json"
        append_token_usage(TokenUsage(input_tokens=1, output_tokens=2, model="m"), path)
        append_token_usage(TokenUsage(input_tokens=3, output_tokens=4, model="m"), path)

        records = read_token_usage(path)
        assert [r["inputTokens"] for r in records] == [1, 3]
        assert records[1]["outputTokens"] == 4

    def test_corrupt_ledger_restarts(self, tmp_path):
        path = tmp_path / "usage.json"
        path.write_text("{broken")
        append_token_usage(TokenUsage(input_tokens=5), path)
        assert len(read_token_usage(path)) == 1
