"""Tests de los casos de error."""

from pathlib import Path

import pytest

from conciliapagos import ConciliaPagosError, NoChequeRecordsError, NoRecognizableColumnsError
from conciliapagos.cli import main
from conciliapagos.config import Config, ConfigError, ConfigFileError
from conciliapagos.io_excel import ExcelFileError


def test_config_load_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigFileError, match="inexistente"):
        Config.load(tmp_path / "no.json")


def test_config_load_invalid_json(tmp_path: Path) -> None:
    bad = tmp_path / "config.json"
    bad.write_text("{ json inválido }", encoding="utf-8")
    with pytest.raises(ConfigFileError, match="JSON inválido"):
        Config.load(bad)


def test_config_load_not_dict(tmp_path: Path) -> None:
    bad = tmp_path / "config.json"
    bad.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ConfigFileError, match="objeto JSON"):
        Config.load(bad)


def test_error_hierarchy() -> None:
    for exc in (ConfigError, ConfigFileError, ExcelFileError, NoChequeRecordsError, NoRecognizableColumnsError):
        assert issubclass(exc, ConciliaPagosError)
    assert issubclass(ConfigError, ValueError)


def test_cli_missing_files_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    exit_code = main(["match", "--providers", str(tmp_path / "a.xlsx"), "--ledger", str(tmp_path / "b.xlsx")])
    assert exit_code == 1
    assert "Error:" in capsys.readouterr().out


def test_cli_bad_config_exit_code(tmp_path: Path) -> None:
    exit_code = main(
        ["match", "-p", str(tmp_path / "a.xlsx"), "-l", str(tmp_path / "b.xlsx"), "-c", str(tmp_path / "c.json")]
    )
    assert exit_code == 1
