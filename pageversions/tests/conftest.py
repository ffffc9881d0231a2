# Last reviewed: 2026-10-18 12:31:10 UTC (User: Teeksss)
import os
import pytest
from datetime import datetime, timezone
from typing import Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pageversions.db.database import Base
from pageversions.db.init_db import init_db
from pageversions.models.fields import Field, Template
from pageversions.models.fieldtypes import (
    CommentsFieldtype,
    FieldsetFieldtype,
    FileFieldtype,
    IntegerFieldtype,
    LegacyFileFieldtype,
    RepeaterFieldtype,
    TextFieldtype,
)
from pageversions.repositories.page_repository import SqlPageStore
from pageversions.repositories.page_version_repository import PageVersionRepository
from pageversions.services.page_versioning import PageVersioningService

@pytest.fixture
def db_engine():
    """Her test için ayrı bellek içi SQLite veritabanı"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def files_root(tmp_path) -> str:
    root = tmp_path / "files"
    root.mkdir()
    return str(root)

@pytest.fixture
def fields() -> Dict[str, Field]:
    """Test şablonunun alanları"""
    caption = Field(id=20, name="caption", type=TextFieldtype())
    inner = Field(id=21, name="inner", type=RepeaterFieldtype([caption]))
    return {
        "title": Field(id=1, name="title", type=TextFieldtype()),
        "body": Field(id=2, name="body", type=TextFieldtype()),
        "counter": Field(id=3, name="counter", type=IntegerFieldtype()),
        "tab": Field(id=4, name="tab", type=FieldsetFieldtype()),
        "comments": Field(id=5, name="comments", type=CommentsFieldtype()),
        "images": Field(id=6, name="images", type=FileFieldtype()),
        "attachments": Field(id=7, name="attachments", type=LegacyFileFieldtype()),
        "items": Field(id=8, name="items", type=RepeaterFieldtype([caption])),
        "blocks": Field(id=9, name="blocks", type=RepeaterFieldtype([caption, inner])),
    }

@pytest.fixture
def basic_template(fields) -> Template:
    """Dosya alanı alan bazında kopyalanabilen şablon"""
    return Template(
        name="basic-page",
        fields=[fields[n] for n in ("title", "body", "counter", "tab", "comments", "images", "items")]
    )

@pytest.fixture
def legacy_template(fields) -> Template:
    """Eski dosya alanı yüzünden tüm dizin kopyalanan şablon"""
    return Template(name="legacy-page", fields=[fields[n] for n in ("title", "body", "attachments")])

@pytest.fixture
def nested_template(fields) -> Template:
    """İç içe repeater içeren şablon"""
    return Template(name="nested-page", fields=[fields[n] for n in ("title", "blocks")])

@pytest.fixture
def user_template(fields) -> Template:
    return Template(name="user", fields=[fields["title"]], page_type="user")

@pytest.fixture
def templates(basic_template, legacy_template, nested_template, user_template) -> Dict[str, Template]:
    return {t.name: t for t in (basic_template, legacy_template, nested_template, user_template)}

@pytest.fixture
def page_store(db_session, templates, files_root) -> SqlPageStore:
    return SqlPageStore(db_session, templates, files_root)

@pytest.fixture
def repository() -> PageVersionRepository:
    return PageVersionRepository()

@pytest.fixture
def service(db_session, page_store) -> PageVersioningService:
    return PageVersioningService(db_session, page_store, user_id=41)

@pytest.fixture
def page(page_store, basic_template):
    """id=500 olan, title="Hello" sayfa"""
    return page_store.create(
        basic_template,
        values={"title": "Hello", "body": "First body", "counter": 3, "comments": ["nice"]},
        id=500,
        name="hello",
        status=1,
        published=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    )

@pytest.fixture
def write_file():
    """Test dosyası yazan yardımcı"""
    def _write(directory: str, name: str, content: bytes) -> str:
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, name)
        with open(path, "wb") as f:
            f.write(content)
        return path
    return _write
