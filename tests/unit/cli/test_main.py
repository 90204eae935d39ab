"""Unit tests for CLI command handling."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cli.main import main


@pytest.fixture(autouse=True)
def _cli_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHEDB_HANDLE_SIGNALS", "false")
    monkeypatch.setenv("CACHEDB_AUTOSAVE_INTERVAL", "0.05")


def test_cli_init_creates_empty_file(tmp_path: Path, capsys) -> None:
    """Init should write an empty JSON array and print the path."""
    data_file = tmp_path / "users.json"

    exit_code = main(["--data-file", str(data_file), "init"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output == str(data_file.resolve())
    assert json.loads(data_file.read_text(encoding="utf-8")) == []


def test_cli_add_then_show_by_name(tmp_path: Path, capsys) -> None:
    """Added record should be printable by name."""
    data_file = str(tmp_path / "users.json")
    main(["--data-file", data_file, "add", "--name", "Jason", "--age", "19"])
    record_id = capsys.readouterr().out.strip()

    exit_code = main(["--data-file", data_file, "show", "--name", "Jason"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert output.splitlines() == [f"ID: {record_id}", "Name: Jason", "Age: 19"]


def test_cli_show_missing_record_exits_one(tmp_path: Path, capsys) -> None:
    """Show of an unknown id should report and exit 1."""
    exit_code = main(
        [
            "--data-file",
            str(tmp_path / "users.json"),
            "show",
            "--id",
            "00000000-0000-4000-8000-000000000001",
        ]
    )

    assert exit_code == 1
    assert "No record found" in capsys.readouterr().out


def test_cli_remove_by_name(tmp_path: Path, capsys) -> None:
    """Remove should drop the record from the saved file."""
    data_file = str(tmp_path / "users.json")
    main(["--data-file", data_file, "add", "--name", "Bob", "--age", "50"])
    capsys.readouterr()

    exit_code = main(["--data-file", data_file, "remove", "--name", "Bob"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output == "removed"
    assert json.loads(Path(data_file).read_text(encoding="utf-8")) == []


def test_cli_remove_missing_reports_not_found(tmp_path: Path, capsys) -> None:
    """Removing an absent name should exit 1."""
    exit_code = main(["--data-file", str(tmp_path / "users.json"), "remove", "--name", "Zed"])

    assert exit_code == 1 and capsys.readouterr().out.strip() == "not-found"


def test_cli_list_prints_tab_separated_rows(tmp_path: Path, capsys) -> None:
    """List should print one row per record."""
    data_file = str(tmp_path / "users.json")
    main(["--data-file", data_file, "add", "--name", "Sarah", "--age", "22"])
    capsys.readouterr()

    main(["--data-file", data_file, "list"])
    rows = capsys.readouterr().out.strip().splitlines()

    assert len(rows) == 1 and rows[0].split("\t")[1:3] == ["Sarah", "22"]


def test_cli_corrupt_file_reports_error(tmp_path: Path, capsys) -> None:
    """Corrupt data file should print an error and exit 1."""
    data_file = tmp_path / "users.json"
    data_file.write_text("{not json", encoding="utf-8")

    exit_code = main(["--data-file", str(data_file), "list"])

    assert exit_code == 1 and capsys.readouterr().err.startswith("error:")


def test_cli_demo_generates_and_persists(tmp_path: Path, capsys) -> None:
    """Demo should add seed plus random records and save them."""
    data_file = tmp_path / "users.json"

    exit_code = main(
        ["--data-file", str(data_file), "demo", "--count", "5", "--seed", "7", "--fresh"]
    )
    rows = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0 and len(rows) == 5
    assert len(json.loads(data_file.read_text(encoding="utf-8"))) == 8


def test_cli_config_file_sets_data_file(tmp_path: Path, capsys) -> None:
    """YAML config should supply the data file path."""
    config_path = tmp_path / "cachedb.yaml"
    config_path.write_text("data_file: store/users.json\n", encoding="utf-8")

    exit_code = main(["--config", str(config_path), "init"])

    assert exit_code == 0
    assert (tmp_path / "store" / "users.json").is_file()
