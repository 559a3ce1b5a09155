from __future__ import annotations

from pathlib import Path

import pytest

import refdata_import.cli.__main__ as cli
from refdata_import.cli.__main__ import main as cli_main
from refdata_import.models.config_models import DatabaseConfig, ImportConfig


def test_cli_success(write_config, source_files, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Sources: 2 file(s)" in out
    assert "INFO Successfully imported 2 records to Assembly" in out
    assert "INFO mode=mock imported_rows=4" in out
    assert "SUMMARY files=2/2 success=2 failed=0 imported=4 skipped=0 warnings=0 elapsed_sec=" in out


def test_cli_partial_failure(write_config, source_files, capsys):
    source_files[1].unlink()
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "ERROR file=products.csv entity=Product READ_ERROR" in out
    assert "SUMMARY files=2/2 success=1 failed=1" in out


def test_cli_missing_config(temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_cli_explicit_config_path(write_config, source_files, capsys):
    moved = write_config.parent / "other.yml"
    write_config.rename(moved)
    assert cli_main(["--config", str(moved)]) == 0


def test_cli_debug_mode(write_config, source_files, capsys):
    assert cli_main(["--debug"]) == 0
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG entity=Assembly header_row=2" in out


def test_cli_invalid_timezone(write_config, source_files, capsys):
    text = write_config.read_text(encoding="utf-8").replace("timezone: UTC", "timezone: Nowhere/City")
    write_config.write_text(text, encoding="utf-8")
    assert cli_main([]) == 1
    assert "ERROR processing: Invalid timezone" in capsys.readouterr().out


def test_cli_inspect_data(write_config, source_files, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: assemblies.csv entity=Assembly" in out
    assert "header_row=2" in out
    assert "FILE: products.csv entity=Product" in out
    assert "ASM001" in out
    assert "SUMMARY" not in out


def test_cli_inspect_data_unreadable_file(write_config, source_files, capsys):
    source_files[0].unlink()
    assert cli_main(["--inspect-data"]) == 0
    assert "read_error:" in capsys.readouterr().out


def test_cli_export_mock_mode_prints_header(write_config, capsys):
    code = cli_main(["--export", "Product"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Product Code,Product Description,Product Group" in out


def test_cli_export_to_file(write_config, temp_workdir: Path, capsys):
    target = temp_workdir / "out.csv"
    assert cli_main(["--export", "UL_ASM", "--output", str(target)]) == 0
    assert target.read_text(encoding="utf-8").startswith("Assembly Number,Assembly Date")
    assert f"INFO exported Assembly to {target}" in capsys.readouterr().out


def test_cli_export_unknown_entity(write_config, capsys):
    assert cli_main(["--export", "Invoice"]) == 1
    assert "ERROR export: Database Invoice is not supported for CSV import" in capsys.readouterr().out


def test_cli_db_failure_falls_back_to_mock(write_config, source_files, monkeypatch, capsys):
    monkeypatch.delenv("DISABLE_DB_CONNECT")

    def refuse(cfg):
        raise OSError("connection refused")

    monkeypatch.setattr(cli, "_connect", refuse)
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO DB connection failed -> fallback to mock mode: connection refused" in out
    assert "mode=mock" in out


def test_cli_export_requires_database(write_config, monkeypatch, capsys):
    monkeypatch.delenv("DISABLE_DB_CONNECT")

    def refuse(cfg):
        raise OSError("connection refused")

    monkeypatch.setattr(cli, "_connect", refuse)
    assert cli_main(["--export", "Product"]) == 1
    assert "ERROR export: database unavailable" in capsys.readouterr().out


class FakeCursor:
    def __init__(self) -> None:
        self.executed: list[str] = []
        self.rowcount = 0

    def execute(self, sql, params=None):
        self.executed.append(sql)

    def fetchall(self):
        return []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeConnection:
    def __init__(self) -> None:
        self.cur = FakeCursor()
        self.closed = False

    def cursor(self):
        return self.cur

    def close(self):
        self.closed = True


def test_cli_live_mode(write_config, source_files, monkeypatch, capsys):
    import refdata_import.db.batch_insert as bi

    monkeypatch.delenv("DISABLE_DB_CONNECT")
    conn = FakeConnection()
    inserts = []
    monkeypatch.setattr(cli, "_connect", lambda cfg: conn)
    monkeypatch.setattr(bi, "execute_values", lambda cur, sql, rows, page_size=1000: inserts.append((sql, rows)))

    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO mode=live imported_rows=4" in out
    assert conn.closed is True
    # table override from the config
    assert 'CREATE TABLE IF NOT EXISTS "ul_asm"' in conn.cur.executed[0]
    assert conn.cur.executed.count("BEGIN") == 2
    assert conn.cur.executed.count("COMMIT") == 2
    assert [len(rows) for _, rows in inserts] == [2, 2]


@pytest.mark.parametrize(
    "env, expected",
    [
        ({"DATABASE_URL": "postgresql://u@h/db"}, "postgresql://u@h/db"),
        ({"PGDSN": "dbname=x"}, "dbname=x"),
        ({}, "host=cfghost port=6543 user=cfguser dbname=cfgdb password=pw"),
        ({"PGHOST": "envhost"}, "host=envhost port=6543 user=cfguser dbname=cfgdb password=pw"),
    ],
)
def test_resolve_dsn(monkeypatch, env, expected):
    for var in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE"):
        monkeypatch.delenv(var, raising=False)
    for k, v in env.items():
        monkeypatch.setenv(k, v)
    cfg = ImportConfig(
        sources=[],
        database=DatabaseConfig(host="cfghost", port=6543, user="cfguser", password="pw", database="cfgdb"),
    )
    assert cli._resolve_dsn(cfg) == expected


def test_dotenv_overrides_environment(write_config, source_files, temp_workdir: Path, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "0")
    (temp_workdir / ".env").write_text("DISABLE_DB_CONNECT=1\n", encoding="utf-8")
    monkeypatch.setattr(cli, "_connect", lambda cfg: pytest.fail("should not connect"))
    assert cli_main([]) == 0
    assert "mode=mock" in capsys.readouterr().out
