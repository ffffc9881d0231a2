# Last reviewed: 2026-10-18 13:29:40 UTC (User: Teeksss)
import json
import os
from unittest.mock import patch

import pytest

from pageversions.core.exceptions import PartialRestoreUnsupportedError, VersionWriteDeniedError
from pageversions.models.page import PageRecord
from pageversions.repositories.page_repository import SqlPageStore
from pageversions.schemas.page_version import VersionAction
from pageversions.services.restore_engine import TEMP_VERSION_MARKER, is_temp_version_description

def test_restore_scenario(service, page, page_store):
    version = service.add_version(page, "hello version", user_id=7)
    before = service.get_version_info(page, version)
    page.set("title", "World")
    page_store.save(page)

    restored = service.restore_version(page, version)

    assert restored is not None
    assert restored.version_info is None
    assert page_store.get_fresh(page.id).get("title") == "Hello"
    # Geri yükleme versiyonun kendi geçmişini değiştirmez
    after = service.get_version_info(page, version)
    assert after.created == before.created
    assert after.created_by == before.created_by == 7
    assert after.description == "hello version"
    assert service.count_versions(page) == 1

def test_restore_from_version_copy(service, page, page_store):
    service.add_version(page)
    page.set("body", "Changed body")
    page_store.save(page)

    copy = service.get_version(page, 2)
    restored = service.restore_version(copy)

    assert restored.get("body") == "First body"
    assert page_store.get_fresh(page.id).get("body") == "First body"

def test_restore_missing_version(service, page):
    assert service.restore_version(page, 42) is None
    assert service.restore_version(page, 0) is None

def test_restore_brings_back_files(service, page, page_store, write_file):
    live = service.assets.live_files_path(page)
    write_file(live, "photo.jpg", b"\xff\xd8 jpeg bytes")
    page.set("images", ["photo.jpg"])
    page_store.save(page)

    version = service.add_version(page)
    assert os.path.exists(os.path.join(live, "v2", "photo.jpg"))

    os.remove(os.path.join(live, "photo.jpg"))
    page.set("images", [])
    page_store.save(page)

    service.restore_version(page, version)

    with open(os.path.join(live, "photo.jpg"), "rb") as f:
        assert f.read() == b"\xff\xd8 jpeg bytes"
    assert page_store.get_fresh(page.id).get("images") == ["photo.jpg"]

def test_restore_whole_dir_for_legacy_files(service, page_store, legacy_template, write_file):
    legacy = page_store.create(legacy_template, values={"title": "L", "attachments": ["a.txt"]}, id=710)
    live = service.assets.live_files_path(legacy)
    write_file(live, "a.txt", b"original")

    version = service.add_version(legacy)
    write_file(live, "a.txt", b"changed")
    write_file(live, "added.txt", b"added")

    service.restore_version(legacy, version)

    assert sorted(n for n in os.listdir(live) if os.path.isfile(os.path.join(live, n))) == ["a.txt"]
    with open(os.path.join(live, "a.txt"), "rb") as f:
        assert f.read() == b"original"

def test_partial_restore(service, page, page_store):
    version = service.add_version(page)
    page.set("title", "World")
    page.set("body", "Second body")
    page_store.save(page)

    service.restore_version(page, version, names=["title"])

    fresh = page_store.get_fresh(page.id)
    assert fresh.get("title") == "Hello"
    assert fresh.get("body") == "Second body"

def test_partial_restore_unsupported_leaves_page_unchanged(service, page_store, legacy_template, db_session):
    legacy = page_store.create(legacy_template, values={"title": "L", "attachments": ["a.txt"]}, id=720)
    version = service.add_version(legacy)
    legacy.set("title", "Live title")
    page_store.save(legacy)
    stored_before = db_session.get(PageRecord, 720).data

    with pytest.raises(PartialRestoreUnsupportedError):
        service.restore_version(legacy, version, names=["attachments"])

    db_session.expire_all()
    assert db_session.get(PageRecord, 720).data == stored_before
    assert service.count_versions(legacy) == 1

def test_restore_uses_temp_version_for_nested_repeaters(service, page_store, nested_template):
    nested = page_store.create(
        nested_template,
        values={"title": "N", "blocks": [{"caption": "outer", "inner": [{"caption": "x"}]}]},
        id=730
    )
    version = service.add_version(nested)
    nested.set("blocks", [])
    page_store.save(nested)

    with patch.object(service.snapshots, "add_version", wraps=service.snapshots.add_version) as add_version:
        restored = service.restore_version(nested, version)

    add_version.assert_called_once()
    assert is_temp_version_description(add_version.call_args.kwargs["description"])
    assert restored.get("blocks") == [{"caption": "outer", "inner": [{"caption": "x"}]}]
    # Geçici versiyon temizlenmiş olmalı
    assert [i.version for i in service.get_version_infos(nested)] == [version]

def test_restore_without_temp_version_when_disabled(service, page_store, nested_template):
    nested = page_store.create(nested_template, values={"title": "N"}, id=740)
    version = service.add_version(nested)

    with patch.object(service.snapshots, "add_version") as add_version:
        service.restore_version(nested, version, use_temp_version=False)

    add_version.assert_not_called()

def test_fatal_save_leaves_temp_version(service, page, page_store):
    version = service.add_version(page)

    with patch.object(SqlPageStore, "save", side_effect=RuntimeError("database went away")):
        with pytest.raises(RuntimeError):
            service.restore_version(page, version, use_temp_version=True)

    infos = service.get_version_infos(page, sort="version")
    assert len(infos) == 2
    assert infos[1].description.startswith(TEMP_VERSION_MARKER)

    # Sonraki başarılı geri yükleme artığı temizler
    service.restore_version(page, version)
    assert [i.version for i in service.get_version_infos(page)] == [version]

def test_save_guard_rejects_version_copy(service, page, page_store):
    service.add_version(page)
    copy = service.get_version(page, 2)

    with pytest.raises(VersionWriteDeniedError):
        page_store.save(copy)

    # Canlı sayfa hala kaydedilebilir
    page_store.save(page)

    # Açık izinle kayıt yapılabilir
    page_store.save(copy, allow_version_write=True)

def test_version_row_holds_native_properties(service, page):
    version = service.add_version(page)
    data = json.loads(service.repository.get_version(service.db, page.id, version).data)

    assert data["name"] == "hello"
    assert service.restore_version(page, version) is not None
    assert service.pop_notices() == []

@pytest.mark.parametrize("names", [["comments"], ["title", "no_such_field"]])
def test_partial_restore_rejects_unversioned_names(service, page, page_store, db_session, names):
    version = service.add_version(page)
    page.set("title", "World")
    page_store.save(page)
    stored_before = db_session.get(PageRecord, page.id).data

    with pytest.raises(PartialRestoreUnsupportedError) as exc_info:
        service.restore_version(page, version, names=names)

    assert exc_info.value.names == [n for n in names if n != "title"]
    db_session.expire_all()
    assert db_session.get(PageRecord, page.id).data == stored_before

def test_partial_restore_accepts_native_properties(service, page, page_store):
    version = service.add_version(page)
    page.set("name", "renamed")
    page_store.save(page)

    service.restore_version(page, version, names=["name"])

    assert page_store.get_fresh(page.id).get("name") == "hello"

def test_failed_restore_clears_restore_flag(service, page, page_store):
    version = service.add_version(page)
    copy = service.get_version(page, version)

    with patch.object(SqlPageStore, "save", side_effect=RuntimeError("database went away")):
        with pytest.raises(RuntimeError):
            service.restore_version(copy, use_temp_version=False)

    assert copy.version_info.action == VersionAction.NONE
    # Başarısız geri yüklemeden sonra kopya canlı sayfanın üzerine yazılamaz
    with pytest.raises(VersionWriteDeniedError):
        page_store.save(copy)

def test_unloadable_temp_version_is_removed(service, page):
    version = service.add_version(page)
    copy = service.get_version(page, version)

    with patch.object(service.snapshots, "get_version", return_value=None):
        assert service.restore_version(copy, use_temp_version=True) is None

    assert [i.version for i in service.get_version_infos(page)] == [version]
