# Last reviewed: 2026-10-18 13:14:08 UTC (User: Teeksss)
import os
import time
from unittest.mock import MagicMock, patch

import pytest

from pageversions.core.exceptions import VersionAddRetryExhaustedError
from pageversions.models.fields import Field, Template
from pageversions.models.fieldtypes import FieldVersioning, VersionedFieldtype
from pageversions.models.page_version import PageFieldVersion, PageVersion
from pageversions.repositories.page_version_repository import PageVersionRepository
from pageversions.schemas.page_version import VersionInfo
from pageversions.services.page_versioning import PageVersioningService
from pageversions.services.snapshot_engine import PARTIAL_FALLBACK_NOTICE

def test_add_version_scenario(service, page, page_store):
    # İlk versiyon 2 olmalı (1 ayrılmış)
    version = service.add_version(page, "first")
    assert version == 2

    page.set("title", "World")
    page_store.save(page)

    copy = page.copy()
    assert service.load_version(copy, 2) is True
    assert copy.get("title") == "Hello"
    assert copy.version_info.version == 2
    assert page_store.get_fresh(page.id).get("title") == "World"

def test_add_version_numbers_increase(service, page):
    versions = [service.add_version(page) for _ in range(4)]

    assert versions == [2, 3, 4, 5]
    assert 1 not in versions

def test_add_version_retries_on_duplicate(service, page, db_session):
    service.repository.insert_version(db_session, page.id, 2, {}, description="concurrent")

    # Yarışı kaybeden ayırıcıyı taklit et: hep 2 önerilir
    with patch.object(PageVersionRepository, "get_next_version_number", return_value=2):
        version = service.add_version(page, "mine")

    assert version == 3
    assert service.get_version_info(page, 2).description == "concurrent"
    assert service.get_version_info(page, 3).description == "mine"

def test_add_version_retry_exhausted(db_session, page_store, page):
    service = PageVersioningService(db_session, page_store, max_attempts=2)
    service.repository.insert_version(db_session, page.id, 2, {})
    service.repository.insert_version(db_session, page.id, 3, {})

    with patch.object(PageVersionRepository, "get_next_version_number", return_value=2):
        with pytest.raises(VersionAddRetryExhaustedError):
            service.add_version(page)

def test_round_trip(service, page, page_store):
    page.set("items", [{"caption": "one"}, {"caption": "two"}])
    page_store.save(page)
    version = service.add_version(page)
    live = page_store.get_fresh(page.id)

    page.set("title", "Changed")
    page.set("counter", 99)
    page.set("items", [])
    page.set_property("name", "changed-name")
    page_store.save(page)

    copy = service.get_version(page, version)

    for name in ("title", "body", "counter", "items"):
        assert copy.get(name) == live.get(name)
    for name in ("name", "status", "created", "published", "created_by"):
        assert copy.get(name) == live.get(name)
    assert copy.get("published").tzinfo is not None
    # Versiyonlanmayan alanlar canlı değerini taşır
    assert copy.get("comments") == ["nice"]

def test_partial_version_keeps_live_values(service, page, page_store):
    version = service.add_version(page, names=["title"])
    assert service.get_version_fields(page, version) == ["title"]

    page.set("title", "World")
    page.set("body", "Second body")
    page_store.save(page)

    copy = page.copy()
    assert service.load_version(copy, version) is True
    assert copy.get("title") == "Hello"
    # Versiyona alınmamış alan boşalmamalı
    assert copy.get("body") == "Second body"
    assert service.pop_notices() == []

def test_partial_version_falls_back_for_legacy_files(service, page_store, legacy_template):
    legacy = page_store.create(legacy_template, values={"title": "L", "body": "B"}, id=700)

    version = service.add_version(legacy, names=["attachments"])

    assert version == 2
    assert sorted(service.get_version_fields(legacy, version)) == ["attachments", "body", "title"]
    notices = service.pop_notices()
    assert any(PARTIAL_FALLBACK_NOTICE in n for n in notices)

def test_save_version_is_idempotent(service, page, db_session):
    version = service.add_version(page, "keep me")
    first = service.get_version_info(page, version)

    time.sleep(1.1)
    assert service.save_version(page, version) == version
    assert service.save_version(page, version) == version

    rows = db_session.query(PageFieldVersion).filter(PageFieldVersion.version == version).all()
    keys = [(r.page_id, r.field_id, r.version) for r in rows]
    assert len(keys) == len(set(keys))
    assert db_session.query(PageVersion).count() == 1

    db_session.expire_all()
    info = service.get_version_info(page, version)
    assert info.created == first.created
    assert info.modified > first.modified
    assert info.description == "keep me"

def test_save_version_zero_on_live_page_adds(service, page):
    assert service.save_version(page, 0) == 2
    assert service.save_version(page) == 3

def test_save_version_zero_on_version_copy(service, page):
    service.add_version(page)
    copy = service.get_version(page, 2)
    copy.values["title"] = "edited in version"

    assert service.save_version(copy) == 2
    assert service.get_field_version(page, "title", 2) == "edited in version"
    assert service.count_versions(page) == 1

def test_payload_too_large_skips_field(db_session, page_store, page):
    service = PageVersioningService(db_session, page_store, max_data_length=30)
    page.values["body"] = "x" * 100

    version = service.add_version(page)

    assert version == 2
    assert "body" not in service.get_version_fields(page, version)
    assert "title" in service.get_version_fields(page, version)
    assert any("too large" in n for n in service.pop_notices())

def test_get_field_version_raw(service, page):
    page.values["counter"] = 12
    version = service.add_version(page)

    assert service.get_field_version(page, "counter", version) == 12
    assert service.get_field_version(page, "title", "v2", raw=True) == "Hello"
    assert service.get_field_version(page, "missing", version) is None
    assert service.get_field_version(page, "comments", version) is None

def test_version_number(service, page):
    assert service.version_number(page, 4) == 4
    assert service.version_number(page, "5") == 5
    assert service.version_number(page, "v6") == 6
    assert service.version_number(page, "nope") == 0
    assert service.version_number(page, VersionInfo(version=7)) == 7
    assert service.version_number(page, 0) == 0

    copy = page.copy()
    copy.version_info = VersionInfo(version=8, page_id=page.id)
    assert service.version_number(copy) == 8

def test_get_versions(service, page):
    for description in ("a", "b", "c"):
        service.add_version(page, description)

    infos = service.get_versions(page, sort="version", get_info=True)
    assert [i.version for i in infos] == [2, 3, 4]
    assert [i.description for i in infos] == ["a", "b", "c"]

    copies = service.get_versions(page, sort="-version")
    assert [c.version_info.version for c in copies] == [4, 3, 2]
    assert all(c.id == page.id for c in copies)

    assert service.get_version(page, 99) is None
    assert service.load_version(page.copy(), 99) is False

def test_self_managed_field(db_session, page_store, page):
    fieldtype = MagicMock(spec=VersionedFieldtype)
    fieldtype.type_id = "draft"
    fieldtype.stores_data = True
    fieldtype.has_files = False
    fieldtype.version_capability.return_value = FieldVersioning.SELF_MANAGED
    fieldtype.save_field_version.return_value = True
    fieldtype.get_field_version.return_value = "from fieldtype"
    fieldtype.restore_hazard.return_value = False
    fieldtype.sleep_value.side_effect = lambda p, f, v: v
    fieldtype.blank_value.return_value = None
    field = Field(id=50, name="draft", type=fieldtype)
    template = Template(name="draft-page", fields=[field])
    draft_page = page_store.create(template, id=800)
    service = PageVersioningService(db_session, page_store)

    version = service.add_version(draft_page)

    fieldtype.save_field_version.assert_called_once_with(draft_page, field, version)
    # Kendi kendini yöneten alanlar version_values tablosuna yazılmaz
    assert db_session.query(PageFieldVersion).filter(PageFieldVersion.page_id == 800).count() == 0
    copy = service.get_version(draft_page, version)
    assert copy.get("draft") == "from fieldtype"

    service.delete_version(draft_page, version)
    fieldtype.delete_field_version.assert_called_once()

def test_disallowed_page_type(service, page_store, user_template):
    user = page_store.create(user_template, values={"title": "admin"}, id=900)

    assert service.add_version(user) == 0
    assert service.get_versions(user) == []
    assert service.has_version(user) == 0

def test_version_files_are_copied(service, page, write_file):
    live = service.assets.live_files_path(page)
    write_file(live, "photo.jpg", b"photo")
    page.values["images"] = ["photo.jpg"]

    version = service.add_version(page)

    assert os.path.exists(os.path.join(service.files_path(page, version), "photo.jpg"))
    copy = service.get_version(page, version)
    assert service.files_path(copy) == service.assets.version_files_path(page, version)

def test_partial_version_without_file_fields_copies_no_files(service, page, write_file):
    live = service.assets.live_files_path(page)
    write_file(live, "photo.jpg", b"photo")
    page.values["images"] = ["photo.jpg"]

    version = service.add_version(page, names=["title"])
    assert not os.path.exists(os.path.join(service.files_path(page, version), "photo.jpg"))

    version = service.add_version(page, names=["title", "images"])
    assert os.listdir(service.files_path(page, version)) == ["photo.jpg"]
