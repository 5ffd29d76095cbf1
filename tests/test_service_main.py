import pytest

from tasktracker.errors import MigrationError
from tasktracker.service import main


@pytest.fixture
def calls(monkeypatch):
    seen = []
    monkeypatch.setattr(main, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(main, "create_app", lambda: "app")
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: seen.append(("serve", app)))
    return seen


def test_failed_migration_exits_before_serving(monkeypatch, calls):
    def fail(url):
        raise MigrationError("boom")

    monkeypatch.setattr(main, "run_migrations", fail)
    with pytest.raises(SystemExit) as exc:
        main.run()
    assert exc.value.code == 1
    assert calls == []


def test_migrations_run_before_serving(monkeypatch, calls):
    monkeypatch.setattr(main, "run_migrations", lambda url: calls.append(("migrate", url)))
    main.run()
    assert [step for step, _ in calls] == ["migrate", "serve"]
    assert calls[0][1] == main.get_settings().DATABASE_SYNC_URL
    assert calls[1][1] == "app"
