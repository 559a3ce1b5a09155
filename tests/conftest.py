# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest

from refdata_import.logging.init import reset_logging

TODAY = date(2024, 3, 1)


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
        yield p


@pytest.fixture()
def assembly_csv() -> str:
    return (
        "Assembly Export,,,\n"
        "Generated 01/03/2024,,,\n"
        "\n"
        "Assembly Number,Assembly Date,Assemble By,Status,Product Code,Product Description,"
        "Source Warehouse,Destination Warehouse,Assembly Type,Auto,Assembled Quantity\n"
        "ASM001,15/01/2024,Jane,active,P100,\"Widget, large\",WH001,WH002,main,y,10\n"
        "ASM002,2024-01-16,Omar,in progress,P200,Gadget,WH003,WH004,sub,n,\"1,250\"\n"
    )


@pytest.fixture()
def product_csv() -> str:
    return (
        "Product Code,Product Description,Product Group,Bin Location,Base Pack,Allocated,On Hand,Base Unit\r\n"
        "P100,Widget,Hardware,B2-C3,12,4,40,BOX\r\n"
        "P200,Gadget,Electronics,A1-A2,1,0,7,PCS\r\n"
    )


@pytest.fixture()
def testdoc_csv() -> str:
    return (
        "Product Code,Document Description,Document Number,Version,Type\n"
        "P100,Final inspection,DOC-1,2.1,QA\n"
        "P200,Burn-in procedure,DOC-2,1.0,Functional\n"
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sources:
  - entity: Assembly
    file: ./data/assemblies.csv
  - entity: Product
    file: ./data/products.csv
tables:
  Assembly: ul_asm
timezone: UTC
error_log_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def source_files(temp_workdir: Path, assembly_csv: str, product_csv: str) -> list[Path]:
    files = [
        temp_workdir / "data" / "assemblies.csv",
        temp_workdir / "data" / "products.csv",
    ]
    files[0].write_text(assembly_csv, encoding="utf-8")
    files[1].write_text(product_csv, encoding="utf-8")
    return files
