import pytest

from ..records import Record
from ..serde.models import LinksRepr
from .testing import Article, BlogStore, Comment, Person, article_document


@pytest.fixture
def target():
    return BlogStore


class TestSync:
    def test_single_resource_with_included(self, target):
        store = target()
        article = store.sync(
            {
                "data": {
                    "id": "1",
                    "type": "article",
                    "attributes": {"title": "T"},
                    "relationships": {"author": {"data": {"id": "5", "type": "person"}}},
                },
                "included": [{"id": "5", "type": "person", "attributes": {"name": "N"}}],
            }
        )
        assert article["title"] == "T"
        assert article.title == "T"
        assert article.author is store.find("person", "5")
        assert article.author.name == "N"

    def test_sync_twice_does_not_duplicate(self, target):
        document = {
            "data": {
                "id": "1",
                "type": "article",
                "attributes": {"title": "T"},
                "relationships": {"author": {"data": {"id": "5", "type": "person"}}},
            },
            "included": [{"id": "5", "type": "person", "attributes": {"name": "N"}}],
        }
        store = target()
        first = store.sync(document)
        second = store.sync(document)
        assert first is second
        assert len(store) == 2
        assert len(store.find_all("article")) == 1
        assert len(store.find_all("person")) == 1

    def test_idempotent(self, target):
        once = target()
        once.sync(article_document())

        twice = target()
        twice.sync(article_document())
        twice.sync(article_document())

        assert len(once) == len(twice)
        for record in once:
            other = twice.find(*record.key)
            assert other is not None
            assert dict(other.attributes) == dict(record.attributes)
            assert dict(other.relationships) == dict(record.relationships)

    def test_registered_types(self, target):
        store = target()
        article = store.sync(article_document())
        assert isinstance(article, Article)
        assert isinstance(article.author, Person)
        assert all(isinstance(c, Comment) for c in article.comments)

    def test_forward_and_nested_references(self, target):
        store = target()
        article = store.sync(article_document())
        assert [c.id for c in article.comments] == ["5", "12"]
        assert article.comments[1].author is article.author
        # people/2 appears nowhere
        assert article.comments[0].author is None
        assert article.comments[0].ref("author") is None

    def test_reference_to_later_data_entry(self, target):
        store = target()
        result = store.sync(
            {
                "data": [
                    {
                        "type": "comments",
                        "id": "1",
                        "relationships": {"parent": {"data": {"type": "comments", "id": "2"}}},
                    },
                    {"type": "comments", "id": "2", "attributes": {"body": "root"}},
                ],
            }
        )
        assert [c.id for c in result] == ["1", "2"]
        assert result[0].parent is result[1]

    def test_reference_to_record_already_in_store(self, target):
        store = target()
        person = store.sync({"data": {"type": "people", "id": "9", "attributes": {"name": "N"}}})
        article = store.sync(
            {
                "data": {
                    "type": "articles",
                    "id": "1",
                    "relationships": {"author": {"data": {"type": "people", "id": "9"}}},
                },
            }
        )
        assert article.author is person

    def test_missing_reference(self, target):
        store = target()
        article = store.sync(
            {
                "data": {
                    "type": "articles",
                    "id": "1",
                    "relationships": {
                        "author": {"data": {"type": "people", "id": "404"}},
                        "comments": {
                            "data": [
                                {"type": "comments", "id": "404"},
                            ]
                        },
                    },
                },
            }
        )
        assert article.author is None
        assert article.comments == [None]
        assert store.find("people", "404") is None
        assert len(store) == 1

    def test_links_extraction(self, target):
        store = target()
        article = store.sync(
            {
                "data": {
                    "type": "articles",
                    "id": "1",
                    "relationships": {
                        "comments": {"links": {"related": "/articles/1/comments"}},
                    },
                },
            }
        )
        assert isinstance(article.commentsLinks, LinksRepr)
        assert article.commentsLinks == {"related": "/articles/1/comments"}
        assert article.commentsLinks == LinksRepr({"related": "/articles/1/comments"})
        assert "comments" not in article.relationships

    def test_links_and_data_together(self, target):
        article = target().sync(article_document())
        assert article["authorLinks"]["related"] == "http://example.com/articles/1/author"
        assert article.author.twitter == "dgeb"

    def test_update_in_place(self, target):
        store = target()
        article = store.sync(article_document())
        author = article.author

        store.sync(
            {
                "data": {
                    "type": "people",
                    "id": "9",
                    "attributes": {"twitter": "dgeb2"},
                },
            }
        )
        assert store.find("people", "9") is author
        assert author.twitter == "dgeb2"
        # merge: untouched keys survive
        assert author.firstName == "Dan"
        assert article.author is author

    def test_relink_replaces_reference(self, target):
        store = target()
        article = store.sync(article_document())
        store.sync(
            {
                "data": {
                    "type": "articles",
                    "id": "1",
                    "relationships": {"comments": {"data": []}},
                },
            }
        )
        assert article.comments == []
        # the author relationship was not mentioned and is kept
        assert article.author.id == "9"

    def test_null_data_leaves_reference_alone(self, target):
        store = target()
        article = store.sync(article_document())
        store.sync(
            {
                "data": {
                    "type": "articles",
                    "id": "1",
                    "relationships": {"author": {"data": None}},
                },
            }
        )
        assert article.author.id == "9"

    def test_unregistered_type(self, target):
        store = target()
        tag = store.sync({"data": {"type": "tags", "id": "1", "attributes": {"label": "x"}}})
        assert type(tag) is Record
        assert tag.type == "tags"

        again = store.sync({"data": {"type": "tags", "id": "1", "attributes": {"label": "y"}}})
        assert again is tag
        assert tag.label == "y"
        assert len(store.find_all("tags")) == 1

    def test_shapes(self, target):
        store = target()
        assert store.sync({"data": None}) is None
        assert store.sync({"meta": {"total": 0}}) is None
        assert store.sync({"data": []}) == []
        result = store.sync(
            {
                "data": [
                    {"type": "people", "id": "2"},
                    {"type": "people", "id": "1"},
                ],
                "included": [{"type": "people", "id": "3"}],
            }
        )
        assert [p.id for p in result] == ["2", "1"]
        assert store.find("people", "3") is not None

    def test_malformed_document_leaves_store_untouched(self, target):
        from ..serde.exceptions import DeserializationError

        store = target()
        with pytest.raises(DeserializationError):
            store.sync(
                {
                    "data": {"type": "articles", "id": "1"},
                    "included": [{"id": "9", "attributes": {"name": "no type"}}],
                }
            )
        assert len(store) == 0

    def test_sync_repr(self, target):
        from ..serde.deserializer import ReprDeserializer

        store = target()
        article = store.sync(ReprDeserializer()(article_document()))
        assert article.title == "JSON:API paints my bikeshed!"

    def test_sync_repr_without_id(self, target):
        from ..exceptions import InvalidRecordError
        from ..serde.deserializer import ReprDeserializer

        document = ReprDeserializer(require_id=False)({"data": {"type": "articles"}})
        with pytest.raises(InvalidRecordError):
            target().sync(document)


class TestCollection:
    def test_add_flat(self, target):
        store = target()
        article = store.add({"id": "1", "title": "T"}, "articles")
        assert isinstance(article, Article)
        assert article.collection is store
        assert store.find("articles", "1") is article
        assert ("articles", "1") in store

        same = store.add({"id": "1", "type": "articles", "body": "B"})
        assert same is article
        assert article.title == "T"
        assert article.body == "B"

    def test_add_record(self, target):
        from ..exceptions import DuplicateRecordError

        store = target()
        record = Record({"type": "tags", "id": "1"})
        assert store.add(record) is record
        assert store.add(record) is record
        with pytest.raises(DuplicateRecordError):
            store.add(Record({"type": "tags", "id": "1"}))

    def test_add_invalid(self, target):
        from ..exceptions import InvalidRecordError

        store = target()
        with pytest.raises(InvalidRecordError):
            store.add({"id": "1"})
        with pytest.raises(InvalidRecordError):
            store.add({"type": "articles"})

    def test_remove(self, target):
        store = target()
        article = store.sync(article_document())
        author = store.remove("people", "9")
        assert author is not None
        assert author.collection is None
        assert store.find("people", "9") is None
        assert article.author is None
        assert store.remove("people", "9") is None

    def test_readd_after_remove(self, target):
        store = target()
        article = store.sync(article_document())
        store.remove("people", "9")
        person = store.sync({"data": {"type": "people", "id": "9", "attributes": {"n": 1}}})
        assert store.find("people", "9") is person
        assert article.author is person
        assert len(store.find_all("people")) == 1

    def test_reset(self, target):
        store = target()
        article = store.sync(article_document())
        store.reset()
        assert len(store) == 0
        assert article.collection is None

    def test_types_argument(self):
        from ..store import Store

        store = Store(types=[Person])
        assert store.registry == {"people": Person}
        assert isinstance(store.sync({"data": {"type": "people", "id": "1"}}), Person)
        assert type(store.sync({"data": {"type": "articles", "id": "1"}})) is Record

    def test_type_without_name(self):
        from ..exceptions import InvalidRecordError
        from ..store import Store

        class Nameless(Record):
            pass

        with pytest.raises(InvalidRecordError):
            Store(types=[Nameless])
