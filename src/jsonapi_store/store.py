"""
:py:mod:`jsonapi_store.store` holds the canonical records and merges JSON:API documents into them.

Synopsis
--------

.. code-block:: python

   class Article(Record):
       type = "articles"


   class People(Record):
       type = "people"


   class BlogStore(Store):
       types = [Article, People]


   store = BlogStore()
   article = store.sync(
       {
           "data": {
               "type": "articles",
               "id": "1",
               "attributes": {"title": "Rails is Omakase"},
               "relationships": {"author": {"data": {"type": "people", "id": "9"}}},
           },
           "included": [
               {"type": "people", "id": "9", "attributes": {"name": "dgeb"}},
           ],
       }
   )
   assert article.author is store.find("people", "9")

"""

import typing
from collections import OrderedDict

import structlog

from .exceptions import DuplicateRecordError, InvalidRecordError
from .flattening import flatten_record
from .records import Record, RecordKey
from .serde.deserializer import ReprDeserializer
from .serde.models import DocumentRepr, Missing, ResourceIdRepr, ResourceRepr
from .serde.types import RawDocument

logger = structlog.get_logger()

SyncResult = typing.Union[None, Record, typing.List[Record]]


class Collection:
    """
    A keyed collection of canonical records; at most one record exists per ``(type, id)``.

    :param Optional[Iterable[Type[Record]]] types: the record classes to construct for their
        types; defaults to the ``types`` class attribute.
    """

    types: typing.ClassVar[typing.Sequence[typing.Type[Record]]] = ()

    _registry: typing.Dict[str, typing.Type[Record]]
    _records: "OrderedDict[RecordKey, Record]"

    @property
    def registry(self) -> typing.Mapping[str, typing.Type[Record]]:
        return self._registry

    def record_class_for(self, type: str) -> typing.Type[Record]:
        """
        Return the record class registered for ``type``, or :py:class:`Record` for unknown types.
        """
        return self._registry.get(type, Record)

    def find(self, type: str, id: str) -> typing.Optional[Record]:
        return self._records.get((type, id))

    def find_all(self, type: str) -> typing.List[Record]:
        return [r for (t, _), r in self._records.items() if t == type]

    def add(
        self,
        model: typing.Union[Record, typing.Mapping[str, typing.Any]],
        type: typing.Optional[str] = None,
    ) -> Record:
        """
        Add a record, or build one from a flattened mapping and add it.

        Adding a mapping whose ``(type, id)`` is already present updates the existing record in
        place and returns it.

        :param model: a :py:class:`Record` or a flattened record.
        :param Optional[str] type: the type to use when the mapping does not name one.
        :raises InvalidRecordError: if no type or no id can be determined.
        :raises DuplicateRecordError: if a different record object is already registered for the
            same ``(type, id)``.
        """
        if isinstance(model, Record):
            if model.id is None:
                raise InvalidRecordError("a record without an id cannot be added")
            existing = self._records.get(model.key)
            if existing is not None and existing is not model:
                raise DuplicateRecordError(*model.key)
            self._records[model.key] = model
            model.attach(self)
            return model

        type_ = model.get("type") or type
        if not type_:
            raise InvalidRecordError("a record needs a type")
        id_ = model.get("id")
        if id_ is None:
            raise InvalidRecordError(f'a record of type "{type_}" needs an id')

        existing = self._records.get((type_, id_))
        if existing is not None:
            return existing.update(model)

        data = dict(model)
        data["type"] = type_
        record = self.record_class_for(type_)(data, self)
        self._records[record.key] = record
        return record

    def remove(self, type: str, id: str) -> typing.Optional[Record]:
        """
        Remove the record of ``(type, id)`` and return it, or :py:const:`None` if there was none.
        References to it from other records resolve to :py:const:`None` afterwards.
        """
        record = self._records.pop((type, id), None)
        if record is not None:
            record.attach(None)
        return record

    def reset(self) -> None:
        for record in self._records.values():
            record.attach(None)
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> typing.Iterator[Record]:
        return iter(list(self._records.values()))

    def __contains__(self, key: typing.Any) -> bool:
        return key in self._records

    def __init__(self, types: typing.Optional[typing.Iterable[typing.Type[Record]]] = None):
        types = self.types if types is None else tuple(types)
        self._registry = {}
        for record_class in types:
            if record_class.type is None:
                raise InvalidRecordError(
                    f"{record_class.__name__} cannot be registered without a type name"
                )
            self._registry[record_class.type] = record_class
        self._records = OrderedDict()


class Store(Collection):
    """
    A :py:class:`Collection` that can merge JSON:API documents into itself.
    """

    _deserializer: ReprDeserializer

    def _resolve(self, resource: ResourceRepr) -> typing.Tuple[Record, bool]:
        assert resource.id is not None
        record = self.find(resource.type, resource.id)
        flattened = flatten_record(resource)
        if record is not None:
            record.update(flattened)
            return record, False
        record = self.record_class_for(resource.type)(flattened, self)
        self._records[record.key] = record
        return record, True

    def _find_ref(self, owner: Record, name: str, id_: ResourceIdRepr) -> typing.Optional[Record]:
        found = self.find(id_.type, id_.id)
        if found is None:
            logger.debug(
                "record.unresolved_reference",
                owner=owner.key,
                relationship=name,
                target=id_.key,
            )
        return found

    def _link(self, resource: ResourceRepr) -> None:
        assert resource.id is not None
        record = self.find(resource.type, resource.id)
        if record is None:
            return

        for name, linkage in resource.relationships.items():
            data = linkage.data
            if data is None or data is Missing:
                continue
            if isinstance(data, ResourceIdRepr):
                record.assign_ref(
                    name,
                    self._find_ref(record, name, data),
                    resource.type,
                    targets=(data.key,),
                )
            else:
                ids = typing.cast(typing.Sequence[ResourceIdRepr], data)
                record.assign_ref(
                    name,
                    [self._find_ref(record, name, id_) for id_ in ids],
                    resource.type,
                    targets=[id_.key for id_ in ids],
                )

    def sync(self, document: typing.Union[RawDocument, DocumentRepr]) -> SyncResult:
        """
        Merge a JSON:API document into the store.

        Every resource of ``included`` and ``data`` is first created or updated in place, and only
        then are relationships linked, so references to resources that appear later in the
        document resolve. A reference to a record that is neither in the document nor in the store
        resolves to :py:const:`None`.

        :param document: a parsed JSON document or a :py:class:`DocumentRepr`.
        :return: the records of ``data``, in the shape of ``data`` (a record, a list of records, or
            :py:const:`None`).
        :raises DeserializationError: if ``document`` is not a well-formed document; the store is
            left untouched.
        """
        if not isinstance(document, DocumentRepr):
            document = self._deserializer(document)

        primary = document.primary
        entries = list(document.included) + list(primary)
        if any(resource.id is None for resource in entries):
            raise InvalidRecordError("resources without an id cannot be synced")

        created = 0
        records: typing.List[Record] = []
        for resource in entries:
            record, is_new = self._resolve(resource)
            created += is_new
            records.append(record)

        for resource in entries:
            self._link(resource)

        logger.debug(
            "store.sync",
            data=len(primary),
            included=len(document.included),
            created=created,
            updated=len(entries) - created,
        )

        results = records[len(document.included) :]
        if document.is_collection:
            return results
        elif isinstance(document.data, ResourceRepr):
            return results[0]
        else:
            return None

    def __init__(
        self,
        types: typing.Optional[typing.Iterable[typing.Type[Record]]] = None,
        deserializer: typing.Optional[ReprDeserializer] = None,
    ):
        super().__init__(types)
        self._deserializer = deserializer if deserializer is not None else ReprDeserializer()
