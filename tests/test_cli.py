import importlib.util
import os

import pytest
from click.testing import CliRunner


SCRIPT_PATH = os.path.join(os.path.dirname(__file__), "..", "scripts", "migrate_registrations.py")


@pytest.fixture
def cli(monkeypatch, fake_store):
    spec = importlib.util.spec_from_file_location("migrate_registrations", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    class StoreContext:
        def __init__(self, settings):
            self.settings = settings

        def __enter__(self):
            return fake_store.open()

        def __exit__(self, *exc):
            fake_store.close()

    monkeypatch.setattr(module, "FirestoreClient", StoreContext)
    return module.main


def test_cli_migrates(cli, fake_db, fake_store):
    fake_db.add_registration("u1", "r1", eventId="/events/e1")
    fake_db.add_registration("u1", "r2")

    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 0
    assert "Migrated 1 registrations, deleted 1, skipped 1" in result.output
    assert fake_db.migrated("e1", "u1") is not None
    assert fake_store.closed is True


def test_cli_dry_run(cli, fake_db):
    fake_db.add_registration("u1", "r1", eventId="e1")
    before = dict(fake_db.docs)

    result = CliRunner().invoke(cli, ["--dry-run"])

    assert result.exit_code == 0
    assert "[dry-run] Migrated 1 registrations, deleted 0" in result.output
    assert fake_db.docs == before


def test_cli_failure_exits_nonzero(cli, fake_db, fake_store):
    fake_db.add_registration("u1", "r1", eventId="e1")
    fake_db.failures["delete"] = RuntimeError("permission denied")

    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 1
    assert "Error: permission denied" in result.output
    assert fake_store.closed is True
