"""Tests for the logpipe command-line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from logpipe.cli import app

runner = CliRunner()


@pytest.fixture
def records_file(tmp_path: Path) -> Path:
    """Create a JSON Lines input file."""
    path = tmp_path / "records.jsonl"
    lines = [
        json.dumps("Key1: Value 1\r\nKey2: Value 2"),
        "",
        json.dumps(
            {
                "line": "raw",
                "labels": {"job": "windows"},
                "extracted": {"Message": "test: new value", "test": "existing value"},
            }
        ),
        "{not json",
        json.dumps(42),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _read_output(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestRunCommand:
    """Tests for the run command."""

    def test_default_pipeline(self, records_file: Path, tmp_path: Path) -> None:
        """Test running the default single-stage pipeline."""
        output = tmp_path / "out" / "enriched.jsonl"

        result = runner.invoke(app, ["run", str(records_file), "--output", str(output)])

        assert result.exit_code == 0
        records = _read_output(output)
        assert len(records) == 2
        assert records[0]["line"] == "Key1: Value 1\r\nKey2: Value 2"
        assert records[0]["extracted"]["Key1"] == "Value 1"
        assert records[0]["extracted"]["Key2"] == "Value 2"
        # No "message" source on the second record
        assert records[1]["extracted"] == {"Message": "test: new value", "test": "existing value"}
        assert records[1]["labels"] == {"job": "windows"}

    def test_custom_config(self, records_file: Path, tmp_path: Path) -> None:
        """Test running a pipeline from a configuration file."""
        config = tmp_path / "pipeline.json"
        config.write_text(
            json.dumps(
                {
                    "pipeline_stages": [
                        {"eventlogmessage": {"source": "Message", "overwrite_existing": True}}
                    ]
                }
            )
        )
        output = tmp_path / "enriched.jsonl"

        result = runner.invoke(
            app, ["run", str(records_file), "--config", str(config), "-o", str(output)]
        )

        assert result.exit_code == 0
        records = _read_output(output)
        assert records[1]["extracted"]["test"] == "new value"
        assert "Key1" not in records[0]["extracted"]

    def test_stdout_output(self, tmp_path: Path) -> None:
        """Test writing records to stdout."""
        input_file = tmp_path / "one.jsonl"
        input_file.write_text(json.dumps("A: 1") + "\n", encoding="utf-8")

        result = runner.invoke(app, ["run", str(input_file)])

        assert result.exit_code == 0
        assert '"A": "1"' in result.output

    def test_invalid_config(self, records_file: Path, tmp_path: Path) -> None:
        """Test that an invalid stage configuration exits with an error."""
        config = tmp_path / "pipeline.json"
        config.write_text(json.dumps({"pipeline_stages": [{"eventlogmessage": {"source": "a b"}}]}))

        result = runner.invoke(app, ["run", str(records_file), "--config", str(config)])

        assert result.exit_code == 1
        assert "Config error" in result.output

    def test_missing_config(self, records_file: Path, tmp_path: Path) -> None:
        """Test that a missing configuration file exits with an error."""
        result = runner.invoke(
            app, ["run", str(records_file), "--config", str(tmp_path / "missing.json")]
        )

        assert result.exit_code == 1

    def test_missing_input(self, tmp_path: Path) -> None:
        """Test that the input file must exist."""
        result = runner.invoke(app, ["run", str(tmp_path / "missing.jsonl")])

        assert result.exit_code != 0


class TestFieldsCommand:
    """Tests for the fields command."""

    @pytest.fixture
    def message_file(self, tmp_path: Path) -> Path:
        """Create a message file with LF line endings."""
        path = tmp_path / "msg.txt"
        path.write_text("Subject:\n\tLogon ID:\t\t0x3E7\nRuleName: Usermode\n", encoding="utf-8")
        return path

    def test_fields_table(self, message_file: Path) -> None:
        """Test that parsed fields are listed."""
        result = runner.invoke(app, ["fields", str(message_file)])

        assert result.exit_code == 0
        assert "Subject" in result.output
        assert "_Logon_ID" in result.output
        assert "RuleName" in result.output
        assert "3 field(s)" in result.output

    def test_fields_strict(self, message_file: Path) -> None:
        """Test the strict mode report."""
        result = runner.invoke(app, ["fields", str(message_file), "--strict"])

        assert result.exit_code == 0
        assert "Strict mode would drop every field" in result.output

    def test_fields_strict_all_valid(self, tmp_path: Path) -> None:
        """Test the strict mode report for a fully valid message."""
        path = tmp_path / "valid.txt"
        path.write_text("A: 1\r\nB: 2", encoding="utf-8")

        result = runner.invoke(app, ["fields", str(path), "--strict"])

        assert result.exit_code == 0
        assert "Strict mode would keep every field" in result.output
