import asyncio
import logging

import pytest

from taskboard.core.exceptions import InvalidIdentifier, NotFound, StoreError, ValidationError
from taskboard.core.store import TodoStore
from taskboard.models import ExportFormat
from taskboard.services.export import render_export

from conftest import utc


def test_create_then_get(service):
    created = asyncio.run(service.create({"title": "A", "description": "d", "priority": "high"}))

    assert TodoStore.is_valid_id(created["id"])
    assert created["priority"] == "high"
    assert created["completed"] is False
    assert created["createdAt"] == created["updatedAt"]
    assert asyncio.run(service.get(created["id"])) == created


def test_invalid_create_stores_nothing(service):
    with pytest.raises(ValidationError):
        asyncio.run(service.create({"title": "", "description": "d"}))
    assert asyncio.run(service.list()) == []


def test_list_is_newest_first(service):
    for title in ("first", "second", "third"):
        asyncio.run(service.create({"title": title, "description": "d"}))
    assert [t["title"] for t in asyncio.run(service.list())] == ["third", "second", "first"]


def test_update_returns_stored_state(service):
    created = asyncio.run(service.create({"title": "A", "description": "d"}))
    updated = asyncio.run(service.update(created["id"], {"completed": True, "tags": ["x"]}))

    assert updated["completed"] is True
    assert updated["tags"] == ["x"]
    assert updated["id"] == created["id"]
    assert updated["createdAt"] == created["createdAt"]
    assert updated["updatedAt"] >= created["updatedAt"]
    assert asyncio.run(service.get(created["id"])) == updated


def test_update_validates_before_touching_store(service):
    created = asyncio.run(service.create({"title": "A", "description": "d"}))
    with pytest.raises(ValidationError):
        asyncio.run(service.update(created["id"], {"title": ""}))
    assert asyncio.run(service.get(created["id"]))["title"] == "A"


def test_missing_and_malformed_ids(service):
    missing = TodoStore.new_id()
    for call in (service.get(missing), service.update(missing, {"completed": True}), service.delete(missing)):
        with pytest.raises(NotFound):
            asyncio.run(call)

    with pytest.raises(InvalidIdentifier):
        asyncio.run(service.get("not-an-id"))
    with pytest.raises(InvalidIdentifier):
        asyncio.run(service.update("not-an-id", {}))
    with pytest.raises(InvalidIdentifier):
        asyncio.run(service.delete("not-an-id"))


def test_update_does_not_upsert(service):
    with pytest.raises(NotFound):
        asyncio.run(service.update(TodoStore.new_id(), {"title": "ghost", "description": "d"}))
    assert asyncio.run(service.list()) == []


def test_delete_then_get_is_not_found(service):
    created = asyncio.run(service.create({"title": "A", "description": "d"}))
    assert asyncio.run(service.delete(created["id"])) == {"message": "Todo deleted successfully"}
    with pytest.raises(NotFound):
        asyncio.run(service.get(created["id"]))


def test_bulk_complete_and_delete(service):
    ids = [asyncio.run(service.create({"title": f"t{n}", "description": "d"}))["id"] for n in range(3)]

    assert asyncio.run(service.bulk_complete(ids[:2], True)) == 2
    states = {t["id"]: t["completed"] for t in asyncio.run(service.list())}
    assert states == {ids[0]: True, ids[1]: True, ids[2]: False}

    assert asyncio.run(service.bulk_delete([ids[0], TodoStore.new_id()])) == 1
    assert len(asyncio.run(service.list())) == 2


def test_bulk_rejects_malformed_ids_before_changes(service):
    created = asyncio.run(service.create({"title": "A", "description": "d"}))
    with pytest.raises(InvalidIdentifier):
        asyncio.run(service.bulk_delete([created["id"], "bad"]))
    assert len(asyncio.run(service.list())) == 1


def test_store_failures_become_store_errors(service, store, monkeypatch):
    async def broken(*args, **kwargs):
        raise OSError("disk unavailable")

    monkeypatch.setattr(store, "find", broken)
    with pytest.raises(StoreError):
        asyncio.run(service.list())


def test_csv_export_has_header_and_rows(service):
    asyncio.run(service.create({"title": "A", "description": "d", "tags": ["x", "y"]}))
    asyncio.run(service.create({"title": "B", "description": "d"}))

    content, media_type, filename = asyncio.run(service.export(ExportFormat.CSV))
    lines = content.strip().splitlines()

    assert media_type == "text/csv"
    assert filename.endswith(".csv")
    assert lines[0].startswith("id,title,description,completed,priority")
    assert len(lines) == 3
    assert "x;y" in lines[2]


def test_store_failures_are_logged_with_traceback(service, store, monkeypatch, caplog):
    async def broken(*args, **kwargs):
        raise OSError("disk unavailable")

    monkeypatch.setattr(store, "find", broken)
    with caplog.at_level(logging.ERROR, logger="taskboard.core.service"):
        with pytest.raises(StoreError):
            asyncio.run(service.list())

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert errors
    assert all(r.exc_info for r in errors)


def test_corrupt_store_is_logged_with_traceback(service, store, caplog):
    store.data_file.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="taskboard.core.service"):
        with pytest.raises(StoreError):
            asyncio.run(service.list())

    assert any(r.exc_info for r in caplog.records if r.levelno == logging.ERROR)


def test_update_is_not_found_when_read_back_finds_nothing(service, store, monkeypatch):
    created = asyncio.run(service.create({"title": "A", "description": "d"}))

    async def vanished(doc_id):
        return None

    monkeypatch.setattr(store, "find_one", vanished)
    with pytest.raises(NotFound):
        asyncio.run(service.update(created["id"], {"completed": True}))


def test_export_file_name_uses_given_time():
    _, media_type, filename = render_export([], ExportFormat.JSON, now=utc(2024, 5, 15, 12, 0, 5))
    assert media_type == "application/json"
    assert filename == "todos_20240515_120005.json"
