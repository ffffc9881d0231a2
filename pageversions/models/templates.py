# Last reviewed: 2026-10-18 12:03:31 UTC (User: Teeksss)
from typing import Dict

from .fields import Field, Template
from .fieldtypes import (
    CommentsFieldtype,
    FieldsetFieldtype,
    FileFieldtype,
    IntegerFieldtype,
    RepeaterFieldtype,
    TextFieldtype,
)

def default_templates() -> Dict[str, Template]:
    """
    Uygulamanın varsayılan şablonları

    Alan ID'leri şablonlar arasında paylaşılır; aynı ada sahip alan
    her şablonda aynı ID'yi taşır.
    """
    title = Field(id=1, name="title", type=TextFieldtype(), label="Title")
    body = Field(id=2, name="body", type=TextFieldtype(), label="Body")
    summary = Field(id=3, name="summary", type=TextFieldtype(), label="Summary")
    sort_order = Field(id=4, name="sort_order", type=IntegerFieldtype(), label="Sort order")
    images = Field(id=5, name="images", type=FileFieldtype(), label="Images")
    comments = Field(id=6, name="comments", type=CommentsFieldtype(), label="Comments")
    meta_tab = Field(id=7, name="meta_tab", type=FieldsetFieldtype(), label="Meta")
    item_title = Field(id=8, name="item_title", type=TextFieldtype(), label="Item title")
    items = Field(id=9, name="items", type=RepeaterFieldtype([item_title]), label="Items")

    templates = [
        Template(name="basic-page", fields=[title, body, summary, images, comments]),
        Template(name="article", fields=[title, summary, body, meta_tab, sort_order, images, items, comments]),
        Template(name="user", fields=[title], page_type="user"),
        Template(name="role", fields=[title], page_type="role"),
    ]
    return {t.name: t for t in templates}
