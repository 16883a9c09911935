"""
Tests for the command-line entry point.
"""

import pytest

from main import main


@pytest.fixture
def model_file(tmp_path, chain_text):
    path = tmp_path / "chain.txt"
    path.write_text(chain_text)
    return path


class TestCLI:
    def test_checkpoint_then_export(self, model_file, tmp_path):
        ckpt = tmp_path / "run.ckpt"
        out = tmp_path / "reports"

        assert main(["checkpoint", "--input", str(model_file), "--output", str(ckpt), "--seed", "3"]) == 0
        assert ckpt.exists()
        assert main(["export", "--checkpoint", str(ckpt), "--out-dir", str(out)]) == 0
        for name in ("beliefs.tsv", "samples.tsv", "colors.tsv", "tree_state.tsv"):
            assert (out / name).exists()

    def test_inspect(self, model_file, capsys):
        assert main(["inspect", "--input", str(model_file), "-v"]) == 0
        captured = capsys.readouterr()
        assert "Directed edges: 4" in captured.out
        assert "AVAILABLE: 3" in captured.out

    def test_bad_model_reports_error(self, tmp_path, capsys):
        path = tmp_path / "bad.txt"
        path.write_text("variables:\nA\n")
        assert main(["inspect", "--input", str(path)]) == 1
        assert "Error" in capsys.readouterr().out

    def test_missing_input(self, capsys):
        assert main(["inspect"]) == 1
