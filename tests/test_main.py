"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest

from gomsort.main import main

UNSORTED = """package test

type Server struct{}

func (s *Server) helper() {}
func (s *Server) Start() error { return nil }
"""


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep config discovery away from the real working and home directories."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def go_file(tmp_path: Path) -> Path:
    path = tmp_path / "test.go"
    path.write_text(UNSORTED)
    return path


def test_dry_run(go_file: Path, capsys: pytest.CaptureFixture) -> None:
    """-n reports the file and leaves it unchanged."""
    assert main(["-n", "-j", "1", str(go_file)]) == 0

    assert f"Would sort methods in: {go_file}" in capsys.readouterr().out
    assert go_file.read_text() == UNSORTED


def test_sorts_in_place(go_file: Path) -> None:
    """Without -n the file is rewritten."""
    assert main(["-j", "1", str(go_file)]) == 0

    content = go_file.read_text()
    assert content.index("func (s *Server) Start()") < content.index("func (s *Server) helper()")


def test_defaults_to_current_directory(go_file: Path) -> None:
    """With no paths the working directory is processed."""
    assert main(["-j", "1"]) == 0

    assert go_file.read_text() != UNSORTED


def test_help(capsys: pytest.CaptureFixture) -> None:
    """-h explains the ordering rules."""
    with pytest.raises(SystemExit) as excinfo:
        main(["-h"])

    out = capsys.readouterr().out
    assert excinfo.value.code == 0
    for text in ["usage:", "gomsort sorts Go methods", "Recursively processes directories like 'go fmt'", "-n", "-v"]:
        assert text in out


def test_errors_set_exit_code(tmp_path: Path, go_file: Path) -> None:
    """A broken file makes the run fail but the good one is still sorted."""
    (tmp_path / "broken.go").write_text("package test\n\nfunc (\n")

    assert main(["-j", "1", str(tmp_path)]) == 1
    assert go_file.read_text() != UNSORTED


def test_invalid_config(tmp_path: Path, go_file: Path) -> None:
    """A broken config file is reported with exit code 2."""
    config = tmp_path / "bad.json"
    config.write_text("{oops")

    assert main(["-c", str(config), str(go_file)]) == 2
    assert go_file.read_text() == UNSORTED


def test_invalid_jobs(go_file: Path) -> None:
    """Zero workers makes no sense."""
    assert main(["-j", "0", str(go_file)]) == 2


def test_init_config(tmp_path: Path) -> None:
    """--init-config writes the defaults."""
    target = tmp_path / ".msort.json"

    assert main(["--init-config", str(target)]) == 0

    data = json.loads(target.read_text())
    assert data["sort_criteria"]["exported_first"] is True
    assert data["include"] == ["*.go"]


def test_config_file_is_used(tmp_path: Path, go_file: Path) -> None:
    """Criteria from .msort.json change the result."""
    (tmp_path / ".msort.json").write_text(json.dumps({
        "sort_criteria": {
            "group_by_receiver": False,
            "exported_first": False,
            "sort_by_depth": False,
            "sort_by_in_degree": False,
        }
    }))

    assert main(["-j", "1", str(go_file)]) == 0
    assert go_file.read_text() == UNSORTED


def test_json_report(go_file: Path, capsys: pytest.CaptureFixture) -> None:
    """--report json prints the analysis."""
    assert main(["-n", "-j", "1", "--report", "json", str(go_file)]) == 0

    out = capsys.readouterr().out
    report = json.loads(out[out.index("{"):])
    methods = report["files"][0]["methods"]
    assert [m["name"] for m in methods] == ["Start", "helper"]
    assert report["files"][0]["changed"] is True
    assert report["files"][0]["written"] is False


def test_text_report(go_file: Path, capsys: pytest.CaptureFixture) -> None:
    """--report text prints receivers and methods."""
    assert main(["-n", "-j", "1", "--report", "text", str(go_file)]) == 0

    out = capsys.readouterr().out
    assert "[Server]" in out
    assert "- Start  depth=0 in=0" in out
    assert "(moved)" in out
