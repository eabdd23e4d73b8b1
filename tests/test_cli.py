import json

import pytest
from typer.testing import CliRunner

from quadstream.main import app

pytestmark = pytest.mark.integration

runner = CliRunner()


def test_match_json_output(nquads_file):
    result = runner.invoke(app, ["match", str(nquads_file), "--subject", "http://ex.org/alice", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["count"] == 2
    assert payload["pattern"] == ["http://ex.org/alice", None, None, None]
    assert "<http://ex.org/alice> <http://ex.org/name> \"Alice\"@en ." in payload["quads"]
    assert payload["stats"]["store_size"] == 4
    assert payload["stats"]["state"] == "ended"


def test_match_new_only_reports_every_imported_quad(nquads_file):
    result = runner.invoke(app, ["match", str(nquads_file), "--graph", "http://ex.org/g1", "--new-only", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["count"] == 2


def test_match_table_output(nquads_file):
    result = runner.invoke(app, ["match", str(nquads_file), "--predicate", "http://ex.org/knows"])
    assert result.exit_code == 0
    assert "Found" in result.stdout


def test_stats_json(nquads_file):
    result = runner.invoke(app, ["stats", str(nquads_file), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["store_size"] == 4
    assert payload["quads_written"] == 4
    assert payload["live_reads"] == 1


def test_syntax_error_exit_code(temp_dir):
    broken = temp_dir / "broken.nq"
    broken.write_text("<http://ex.org/s> <http://ex.org/p> <http://ex.org/o> .\n<http://ex.org/s> <http://ex.org/p>\n", encoding="utf-8")
    result = runner.invoke(app, ["match", str(broken), "--json"])
    assert result.exit_code == 1
    assert "Error:" in result.output
