"""
CLI and configuration tests. Each command runs against an in-memory store.
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from itrcore.config import Settings
from itrcore.main import build_store, main
from itrcore.storage.record_store import RecordStore
from itrcore.storage.substrate import FileSubstrate, MemorySubstrate
from demo_records import ASHA_DEDUCTIONS, ASHA_INCOME
from conftest import ManualScheduler


# ---------------------------------------------------------------------------
# Settings / build_store
# ---------------------------------------------------------------------------

def test_settings_defaults() -> None:
    config = Settings(_env_file=None)
    assert config.storage_key == "itr-data"
    assert config.autosave_delay_ms == 5000
    assert config.autosave_delay_seconds == pytest.approx(5.0)


def test_settings_read_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ITR_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("ITR_AUTOSAVE_DELAY_MS", "1500")
    config = Settings(_env_file=None)
    assert config.storage_backend == "memory"
    assert config.autosave_delay_seconds == pytest.approx(1.5)


def test_build_store_memory_backend() -> None:
    store = build_store(Settings(_env_file=None, storage_backend="memory", storage_key="k", autosave_delay_ms=250))
    assert isinstance(store.substrate, MemorySubstrate)
    assert store.key == "k"
    assert store.autosave_delay == pytest.approx(0.25)


def test_build_store_file_backend(tmp_path: Path) -> None:
    store = build_store(Settings(_env_file=None, storage_backend="file", storage_dir=str(tmp_path)))
    assert isinstance(store.substrate, FileSubstrate)
    assert store.substrate.directory == tmp_path


def test_build_store_uses_given_scheduler() -> None:
    scheduler = ManualScheduler()
    store = build_store(Settings(_env_file=None, storage_backend="memory", autosave_delay_ms=1000), scheduler=scheduler)
    assert store.scheduler is scheduler

    # no event loop needed: the debounce runs on the injected scheduler
    store.auto_save({"deductions": ASHA_DEDUCTIONS})
    scheduler.advance(1.0)
    assert store.load() == {"deductions": ASHA_DEDUCTIONS}


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@pytest.fixture
def filled_store(store: RecordStore) -> RecordStore:
    store.save({"incomeDetails": ASHA_INCOME, "deductions": ASHA_DEDUCTIONS})
    return store


def test_status_command(filled_store: RecordStore, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["status"], store=filled_store) == 0
    lines = capsys.readouterr().out.splitlines()
    assert any(line.startswith("incomeDetails") and line.endswith("done") for line in lines)
    assert any(line.startswith("taxSummary") and line.endswith("-") for line in lines)


def test_export_command_to_file(filled_store: RecordStore, tmp_path: Path) -> None:
    target = tmp_path / "backup.json"
    assert main(["export", "-o", str(target)], store=filled_store) == 0
    assert json.loads(target.read_text(encoding="utf-8")) == filled_store.load()


def test_export_command_to_stdout(filled_store: RecordStore, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["export"], store=filled_store) == 0
    assert json.loads(capsys.readouterr().out) == filled_store.load()


def test_import_command(store: RecordStore, tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text(json.dumps({"deductions": ASHA_DEDUCTIONS}), encoding="utf-8")
    assert main(["import", str(backup)], store=store) == 0
    assert store.load() == {"deductions": ASHA_DEDUCTIONS}


def test_import_command_malformed_file(store: RecordStore, tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text("{oops", encoding="utf-8")
    assert main(["import", str(backup)], store=store) == 1
    assert store.load() == {}


def test_import_command_missing_file(store: RecordStore, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    missing = tmp_path / "nope.json"
    assert main(["import", str(missing)], store=store) == 1
    assert "could not import" in capsys.readouterr().err
    assert store.load() == {}


def test_compare_command(filled_store: RecordStore, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["compare"], store=filled_store) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["better"] == "new"
    assert output["old"]["total_tax_liability"] == pytest.approx(179_400, abs=1)


def test_compare_command_needs_both_sections(store: RecordStore) -> None:
    store.save({"incomeDetails": ASHA_INCOME})
    assert main(["compare"], store=store) == 1


def test_summary_command_writes_back(filled_store: RecordStore, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["summary", "--regime", "old", "--advance-tax", "29400"], store=filled_store) == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["regime"] == "old"
    assert printed["refundOrPayable"] == pytest.approx(0, abs=1)
    assert filled_store.completion_status()["taxSummary"] is True


def test_summary_command_invalid_data_exits_1(store: RecordStore, capsys: pytest.CaptureFixture[str]) -> None:
    store.save({
        "incomeDetails": {"salaryIncome": {"hasIncome": True, "employers": [{"id": "e", "grossSalary": -5}]}},
        "deductions": {},
    })
    assert main(["summary"], store=store) == 1
    assert "invalid" in capsys.readouterr().err


def test_clear_command(filled_store: RecordStore) -> None:
    assert main(["clear"], store=filled_store) == 0
    assert filled_store.has_data() is False
