"""Tests for the serdemap command line."""

import json
import textwrap

import pytest

pytest.importorskip("tree_sitter_rust", reason="requires tree-sitter-rust")

from serdemap.cli import main  # noqa: E402


@pytest.fixture
def crate(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "time.rs").write_text(textwrap.dedent("""
        #[derive(Serialize, Deserialize)]
        pub struct Time(DateTime<Utc>);
    """))
    (src / "genesis.rs").write_text(textwrap.dedent("""
        #[derive(Serialize, Deserialize)]
        pub struct Genesis { genesis_time: Time, app_state: AppState }

        pub struct Plain { x: u32 }
    """))
    return src


class TestMain:
    def test_stdout(self, crate, capsys):
        assert main([str(crate)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("## ")
        assert 'genesis::Genesis,rectangle,green,"time::Time",""' in out
        assert 'genesis::Plain,rectangle,white,"",""' in out
        assert 'time::Time,rectangle,green,"",""' in out

    def test_no_header_json(self, crate, capsys):
        assert main([str(crate), "--no-header", "--json"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            'genesis::Genesis,rectangle,green,"time::Time",""',
            'time::Time,rectangle,green,"",""',
        ]

    def test_output_file(self, crate, tmp_path, capsys):
        out_path = tmp_path / "graph.csv"
        assert main([str(crate), "-n", "-o", str(out_path)]) == 0
        assert capsys.readouterr().out == ""
        assert "genesis::Genesis" in out_path.read_text()

    def test_unresolved_reported(self, crate, capsys):
        status = main([str(crate), "--preset", "none", "-n"])
        captured = capsys.readouterr()
        assert status == 1
        assert "genesis::Genesis" in captured.out
        assert "[genesis::Genesis] unresolved field reference AppState" in captured.err
        assert "[time::Time] unresolved field reference Utc" in captured.err

    def test_fail_fast(self, crate, capsys):
        status = main([str(crate), "--preset", "none", "--fail-fast"])
        captured = capsys.readouterr()
        assert status == 1
        assert captured.out == ""
        assert "error: could not resolve field reference" in captured.err

    def test_exceptions_file(self, crate, tmp_path, capsys):
        rules = tmp_path / "rules.json"
        rules.write_text(json.dumps({
            "skips": [
                {"sources": ["genesis::Genesis"], "reference": "AppState"},
                {"sources": ["time::Time"], "reference": "Utc"},
                {"sources": ["time::Time"], "reference": "DateTime"},
            ],
        }))
        assert main([str(crate), "--preset", "none", "--exceptions", str(rules)]) == 0
        capsys.readouterr()

    def test_verbose_goes_to_stderr(self, crate, capsys):
        assert main([str(crate), "-n", "-v"]) == 0
        captured = capsys.readouterr()
        assert "Found 2 rust files" in captured.err
        assert "Found" not in captured.out
