from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from snipnet.resonance.cli import _cli as cli
from snipnet.resonance.cli import cli as cli_wrapper
from snipnet.resonance.config import AppConfig
from snipnet.resonance.exceptions import NodeNotFoundError

runner = CliRunner()


def add_node(db, title: str, body: str = "") -> str:
    result = runner.invoke(cli, ["--db", str(db), "add", title, "--body", body])
    assert result.exit_code == 0, result.output
    assert "Added node" in result.output
    return result.output.split("Added node")[1].split()[0]


class TestNodeCommands:
    def test_add_and_score(self, tmp_path):
        db = tmp_path / "cli.lancedb"
        node_id = add_node(db, "First thought", "Some text")

        result = runner.invoke(cli, ["--db", str(db), "score", node_id])
        assert result.exit_code == 0, result.output
        assert "0.000" in result.output

    def test_resonances_empty(self, tmp_path):
        db = tmp_path / "cli.lancedb"
        node_id = add_node(db, "Lonely")

        result = runner.invoke(cli, ["--db", str(db), "resonances", node_id])
        assert result.exit_code == 0, result.output
        assert "No resonances found." in result.output

    def test_pathways(self, tmp_path):
        db = tmp_path / "cli.lancedb"
        node_id = add_node(db, "Starting point")

        result = runner.invoke(cli, ["--db", str(db), "pathways", node_id])
        assert result.exit_code == 0, result.output
        assert "Starting point" in result.output

    def test_clusters_with_stats(self, tmp_path):
        db = tmp_path / "cli.lancedb"
        add_node(db, "Anything")

        result = runner.invoke(cli, ["--db", str(db), "clusters", "--stats"])
        assert result.exit_code == 0, result.output
        assert "Clusters: 0" in result.output
        assert "Most active: None" in result.output

    def test_unknown_node(self, tmp_path):
        db = tmp_path / "cli.lancedb"
        add_node(db, "Anything")

        result = runner.invoke(cli, ["--db", str(db), "score", "missing"])
        assert result.exit_code != 0
        assert isinstance(result.exception, NodeNotFoundError)

    def test_missing_database(self, tmp_path):
        result = runner.invoke(
            cli, ["--db", str(tmp_path / "absent.lancedb"), "process", "x"]
        )
        assert result.exit_code != 0
        assert isinstance(result.exception, FileNotFoundError)


class TestInitConfig:
    def test_writes_default_config(self, tmp_path):
        output = tmp_path / "resonance.yaml"
        result = runner.invoke(cli, ["init-config", str(output)])
        assert result.exit_code == 0, result.output

        data = yaml.safe_load(output.read_text())
        config = AppConfig.model_validate(data)
        assert config.resonance.threshold == 0.70

    def test_refuses_to_overwrite(self, tmp_path):
        output = tmp_path / "resonance.yaml"
        output.write_text("{}")
        result = runner.invoke(cli, ["init-config", str(output)])
        assert result.exit_code == 1
        assert output.read_text() == "{}"

    def test_config_option(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(yaml.safe_dump({"resonance": {"threshold": 0.9}}))
        output = tmp_path / "out.yaml"

        result = runner.invoke(
            cli, ["--config", str(config_file), "init-config", str(output)]
        )
        assert result.exit_code == 0, result.output


class TestCliWrapper:
    def test_reports_resonance_errors(self):
        with patch("snipnet.resonance.cli._cli") as mock_cli:
            mock_cli.side_effect = NodeNotFoundError("abc")

            with pytest.raises(SystemExit) as exc_info:
                cli_wrapper()
            assert exc_info.value.code == 1
