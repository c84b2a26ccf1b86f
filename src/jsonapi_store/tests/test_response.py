import pytest

from .. import network
from ..config import NetworkConfig
from ..exceptions import TransportError
from ..network import RawResponse
from ..serde.exceptions import DeserializationError
from .testing import BlogStore, RecordingFetch, article_document


@pytest.fixture
def target():
    from ..response import Response

    return Response


def test_sync(target):
    store = BlogStore()
    response = target(RawResponse(data=article_document(), status=200), store)
    assert response.error is None
    assert response.data is store.find("articles", "1")
    assert response.links.self_ == "http://example.com/articles/1"
    assert response.meta == {}
    assert response.errors == ()
    assert response.body == article_document()


def test_without_store(target):
    response = target(RawResponse(data=article_document(), status=200))
    assert response.error is None
    assert response.data is None
    assert response.document is not None
    assert response.document.primary[0].id == "1"


def test_meta_only(target):
    store = BlogStore()
    response = target(RawResponse(data={"meta": {"total": 3}}, status=200), store)
    assert response.error is None
    assert response.data is None
    assert response.meta == {"total": 3}
    assert len(store) == 0


def test_empty(target):
    response = target(RawResponse())
    assert response.data is None
    assert response.document is None
    assert response.meta == {}
    assert response.links is None
    assert response.jsonapi == {}
    assert response.errors == ()


def test_malformed_body(target):
    store = BlogStore()
    response = target(
        RawResponse(data={"data": {"id": "1", "attributes": {}}}, status=200), store
    )
    assert isinstance(response.error, DeserializationError)
    assert response.data is None
    assert response.document is None
    assert response.body == {"data": {"id": "1", "attributes": {}}}
    assert len(store) == 0


def test_transport_error_wins(target):
    store = BlogStore()
    error = TransportError("Invalid HTTP status: 502", 502)
    response = target(RawResponse(data={"data": "garbage"}, status=502, error=error), store)
    assert response.error is error
    assert response.data is None


def test_error_document(target):
    store = BlogStore()
    response = target(
        RawResponse(
            data={
                "errors": [
                    {
                        "status": 422,
                        "title": "Invalid Attribute",
                        "source": {"pointer": "/data/attributes/title"},
                    }
                ]
            },
            status=422,
            error=TransportError("Invalid HTTP status: 422", 422),
        ),
        store,
    )
    assert response.status == 422
    assert response.data is None
    assert [(e.status, e.source.pointer) for e in response.errors] == [
        ("422", "/data/attributes/title")
    ]


def test_repr(target):
    assert repr(target(RawResponse(status=204))) == "<Response status=204 error=None data=None>"


@pytest.mark.asyncio
async def test_fetch_link(target, monkeypatch):
    recorder = RecordingFetch(
        json_body={"data": [{"type": "articles", "id": "2"}], "links": {"next": None}}
    )
    monkeypatch.setattr(network, "config", NetworkConfig(fetch_reference=recorder))
    store = BlogStore()
    document = {
        "data": [{"type": "articles", "id": "1"}],
        "links": {"next": "http://example.com/articles?page=2"},
    }
    first = target(RawResponse(data=document, status=200), store)

    second = await first.fetch_link("next")
    assert recorder.calls[0][0] == "http://example.com/articles?page=2"
    assert [a.id for a in second.data] == ["2"]
    assert second.store is store
    assert len(store.find_all("articles")) == 2

    last = await second.fetch_link("next")
    assert last.data is None
    assert len(recorder.calls) == 1

    missing = await first.fetch_link("prev")
    assert missing.data is None
    assert len(recorder.calls) == 1
