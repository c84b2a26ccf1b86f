import datetime
import decimal

import pytest

from ..models import (
    DocumentRepr,
    ErrorRepr,
    LinkageRepr,
    LinkObjectRepr,
    LinksRepr,
    ResourceIdRepr,
    ResourceRepr,
    SourceRepr,
)


@pytest.fixture
def target():
    from ..renderer import ReprRenderer

    return ReprRenderer


def test_render_resource(target):
    result = target().render_resource(
        ResourceRepr(
            type="articles",
            id="1",
            attributes=[
                ("title", "JSON:API paints my bikeshed!"),
                ("published_at", datetime.datetime(2020, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)),
                ("price", decimal.Decimal("1.50")),
                ("tags", ["a", "b"]),
                ("extra", {"day": datetime.date(2020, 1, 2)}),
            ],
            relationships=[
                (
                    "author",
                    LinkageRepr(
                        links=LinksRepr({"related": "/articles/1/author"}),
                        data=ResourceIdRepr(type="people", id="9"),
                    ),
                ),
                (
                    "comments",
                    LinkageRepr(
                        data=[
                            ResourceIdRepr(type="comments", id="5"),
                            ResourceIdRepr(type="comments", id="12"),
                        ],
                    ),
                ),
                (
                    "editor",
                    LinkageRepr(data=None),
                ),
                (
                    "reviews",
                    LinkageRepr(
                        links=LinksRepr({"related": LinkObjectRepr(href="/r", meta={"n": 1})}),
                    ),
                ),
            ],
        )
    )

    assert result == {
        "type": "articles",
        "id": "1",
        "attributes": {
            "title": "JSON:API paints my bikeshed!",
            "published_at": "2020-01-02T03:04:05+00:00",
            "price": "1.50",
            "tags": ["a", "b"],
            "extra": {"day": "2020-01-02"},
        },
        "relationships": {
            "author": {
                "links": {"related": "/articles/1/author"},
                "data": {"type": "people", "id": "9"},
            },
            "comments": {
                "data": [
                    {"type": "comments", "id": "5"},
                    {"type": "comments", "id": "12"},
                ],
            },
            "editor": {"data": None},
            "reviews": {"links": {"related": {"href": "/r", "meta": {"n": 1}}}},
        },
    }


def test_render_resource_without_id(target):
    assert target().render_resource(ResourceRepr(type="articles", id=None)) == {
        "type": "articles"
    }


def test_naive_datetime(target):
    resource = ResourceRepr(
        type="articles",
        id="1",
        attributes=[("published_at", datetime.datetime(2020, 1, 2))],
    )
    with pytest.raises(ValueError, match="^articles/1:/attributes/published_at: naive datetime"):
        target().render_resource(resource)

    result = target(assume_naive_timezone_as=datetime.timezone.utc).render_resource(resource)
    assert result["attributes"]["published_at"] == "2020-01-02T00:00:00+00:00"


def test_unsupported_type(target):
    with pytest.raises(TypeError, match="^articles/1:/attributes/x/0: unsupported type"):
        target().render_resource(
            ResourceRepr(type="articles", id="1", attributes=[("x", [object()])])
        )


def test_render_document(target):
    result = target()(
        DocumentRepr(
            data=[ResourceRepr(type="foos", id="1", attributes=[("a", 1)])],
            included=[ResourceRepr(type="bars", id="2")],
            links=LinksRepr({"self": "/foos"}),
            meta={"total": 1},
        )
    )
    assert result == {
        "links": {"self": "/foos"},
        "meta": {"total": 1},
        "data": [{"type": "foos", "id": "1", "attributes": {"a": 1}}],
        "included": [{"type": "bars", "id": "2"}],
    }


def test_render_errors(target):
    result = target()(
        DocumentRepr(
            errors=[
                ErrorRepr(
                    status="422",
                    title="Invalid Attribute",
                    source=SourceRepr(pointer="/data/attributes/title"),
                )
            ],
        )
    )
    assert result == {
        "errors": [
            {
                "status": "422",
                "title": "Invalid Attribute",
                "source": {"pointer": "/data/attributes/title"},
            }
        ],
    }
