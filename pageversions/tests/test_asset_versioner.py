# Last reviewed: 2026-10-18 13:01:54 UTC (User: Teeksss)
import os
from unittest.mock import patch

import pytest

from pageversions.schemas.page_version import VersionInfo
from pageversions.services.asset_versioner import AssetVersioner
from pageversions.services.field_capabilities import FieldCapabilityRegistry
from pageversions.services.notices import VersionNotices

@pytest.fixture
def notices():
    return VersionNotices()

@pytest.fixture
def assets(page_store, notices):
    return AssetVersioner(page_store, FieldCapabilityRegistry(), notices, prefix="v")

@pytest.fixture
def legacy_page(page_store, legacy_template):
    return page_store.create(legacy_template, values={"title": "Legacy", "attachments": ["a.txt"]}, id=600)

def test_paths(assets, page, files_root):
    live = os.path.join(files_root, "500") + os.sep
    assert assets.live_files_path(page) == live
    assert assets.version_files_path(page, 2) == os.path.join(live, "v2") + os.sep

    copy = page.copy()
    copy.version_info = VersionInfo(version=3, page_id=page.id)
    # Versiyon kopyasının dosyaları versiyon dizininde
    assert assets.page_files_path(copy) == os.path.join(live, "v3") + os.sep

def test_copy_without_files_dir_is_noop(assets, page):
    result = assets.copy_to_version(page, 2)
    assert result.copied == []
    assert result.failed == []
    assert not os.path.isdir(assets.version_files_path(page, 2))

def test_copy_field_files_only(assets, page, write_file):
    live = assets.live_files_path(page)
    write_file(live, "photo.jpg", b"photo")
    write_file(live, "other.jpg", b"other")
    page.values["images"] = ["photo.jpg"]

    result = assets.copy_to_version(page, 2)

    assert result.copied == ["photo.jpg"]
    target = assets.version_files_path(page, 2)
    assert os.listdir(target) == ["photo.jpg"]

def test_copy_whole_dir_skips_subdirectories(assets, legacy_page, write_file):
    live = assets.live_files_path(legacy_page)
    write_file(live, "a.txt", b"a")
    write_file(live, "b.txt", b"b")
    write_file(os.path.join(live, "v2"), "old.txt", b"old")

    result = assets.copy_to_version(legacy_page, 3)

    assert sorted(result.copied) == ["a.txt", "b.txt"]
    assert sorted(os.listdir(assets.version_files_path(legacy_page, 3))) == ["a.txt", "b.txt"]

def test_copy_onto_itself_is_skipped(assets, legacy_page, write_file):
    live = assets.live_files_path(legacy_page)
    write_file(os.path.join(live, "v2"), "a.txt", b"a")
    copy = legacy_page.copy()
    copy.version_info = VersionInfo(version=2, page_id=legacy_page.id)

    result = assets.copy_dir_to_version(copy, 2)

    assert result.copied == []
    assert result.failed == []

def test_restore_dir_keeps_version_dirs(assets, legacy_page, write_file):
    live = assets.live_files_path(legacy_page)
    write_file(os.path.join(live, "v2"), "a.txt", b"version a")
    write_file(live, "a.txt", b"live a")
    write_file(live, "new.txt", b"new")

    result = assets.restore_dir_from_version(legacy_page, 2)

    assert result.success
    assert sorted(name for name in os.listdir(live) if os.path.isfile(os.path.join(live, name))) == ["a.txt"]
    with open(os.path.join(live, "a.txt"), "rb") as f:
        assert f.read() == b"version a"
    assert os.path.isdir(os.path.join(live, "v2"))

def test_restore_field_files(assets, page, write_file):
    live = assets.live_files_path(page)
    write_file(os.path.join(live, "v2"), "photo.jpg", b"photo")
    write_file(live, "replacement.jpg", b"replacement")
    page.values["images"] = ["replacement.jpg"]
    source = page.copy()
    source.values["images"] = ["photo.jpg"]

    result = assets.restore_from_version(page, source, 2)

    assert result.copied == ["photo.jpg"]
    assert not os.path.exists(os.path.join(live, "replacement.jpg"))
    assert os.path.exists(os.path.join(live, "photo.jpg"))

def test_copy_failures_are_reported(assets, legacy_page, write_file, notices):
    live = assets.live_files_path(legacy_page)
    write_file(live, "a.txt", b"a")
    write_file(live, "b.txt", b"b")

    with patch("pageversions.utils.files.shutil.copy2", side_effect=[OSError("disk full"), None]):
        result = assets.copy_to_version(legacy_page, 2)

    # Hata kopyalamayı durdurmaz
    assert result.failed == ["a.txt"]
    assert result.copied == ["b.txt"]
    assert "1 file(s) failed" in notices.last()

def test_delete_version_assets(assets, legacy_page, write_file):
    live = assets.live_files_path(legacy_page)
    write_file(os.path.join(live, "v2", "nested"), "x.txt", b"x")
    write_file(os.path.join(live, "v3"), "y.txt", b"y")
    write_file(live, "a.txt", b"a")

    assert assets.version_numbers_on_disk(legacy_page) == [2, 3]
    assert assets.delete_version_assets(legacy_page, 2) is True
    assert assets.delete_version_assets(legacy_page, 2) is False
    assert assets.delete_all_version_assets(legacy_page) == 1
    assert assets.version_numbers_on_disk(legacy_page) == []
    assert os.path.exists(os.path.join(live, "a.txt"))

def test_total_version_size(assets, legacy_page, write_file):
    live = assets.live_files_path(legacy_page)
    write_file(live, "a.txt", b"12345")
    write_file(os.path.join(live, "v2"), "a.txt", b"123")

    assert assets.total_version_size(legacy_page, 2) == 3
    # Canlı dizin ölçülürken versiyon dizinleri sayılmaz
    assert assets.total_version_size(legacy_page) == 5

def test_missing_field_file_is_reported(assets, page, write_file, notices):
    live = assets.live_files_path(page)
    write_file(live, "photo.jpg", b"photo")
    page.values["images"] = ["missing.jpg", "photo.jpg"]

    result = assets.copy_to_version(page, 2)

    assert result.copied == ["photo.jpg"]
    assert result.failed == ["missing.jpg"]
    assert not result.success
    assert "1 file(s) could not be copied" in notices.last()
