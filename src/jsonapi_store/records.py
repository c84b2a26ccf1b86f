import dataclasses
import types
import typing
from collections import OrderedDict

from .flattening import LINKS_SUFFIX, links_attribute_name
from .serde.models import (
    LinkageData,
    LinkageRepr,
    LinksRepr,
    Missing,
    ResourceIdRepr,
    ResourceRepr,
)
from .serde.renderer import ReprRenderer
from .serde.types import MutableJSONObject

if typing.TYPE_CHECKING:
    from .network import RequestOptions
    from .response import Response
    from .store import Collection

RecordKey = typing.Tuple[str, str]


@dataclasses.dataclass(frozen=True)
class RecordRef:
    """
    The content of a relationship slot.

    Only identity keys are kept, so a record never holds on to the records it refers to.
    ``keys`` is what the relationship resolves through: a key is :py:const:`None` where the
    referenced record could not be found when the relationship was linked. ``targets`` are the
    identifiers the linkage named, found or not, and are what the record is rendered from.
    """

    keys: typing.Tuple[typing.Optional[RecordKey], ...]
    many: bool
    owner_type: str
    targets: typing.Tuple[typing.Optional[RecordKey], ...] = ()


class Record:
    """
    A canonical record: the one in-memory object for a ``(type, id)`` pair in a collection.

    Records of a type registered on the store are instances of the registered subclass,
    which names its type with the ``type`` class attribute:

    .. code-block:: python

       class Article(Record):
           type = "articles"

    Records of unregistered types are plain :py:class:`Record` instances.

    Attributes can be read with ``record["title"]`` or ``record.title``, relationships with
    ``record["author"]``, ``record.author`` or :py:meth:`ref`. Names that clash with the
    methods below are only reachable through the subscript form.
    """

    type: typing.Optional[str] = None
    id: str
    _attributes: "OrderedDict[str, typing.Any]"
    _refs: "OrderedDict[str, RecordRef]"
    _collection: typing.Optional["Collection"] = None

    @property
    def key(self) -> RecordKey:
        assert self.type is not None
        return (self.type, self.id)

    @property
    def attributes(self) -> typing.Mapping[str, typing.Any]:
        return types.MappingProxyType(self._attributes)

    @property
    def relationships(self) -> typing.Mapping[str, RecordRef]:
        return types.MappingProxyType(self._refs)

    @property
    def collection(self) -> typing.Optional["Collection"]:
        return self._collection

    def attach(self, collection: typing.Optional["Collection"]) -> None:
        self._collection = collection

    def update(self, data: typing.Mapping[str, typing.Any]) -> "Record":
        """
        Merge ``data`` into the attributes. Keys absent from ``data`` are left untouched;
        ``id`` and ``type`` never change.
        """
        for key, value in data.items():
            if key in ("id", "type"):
                continue
            self._attributes[key] = value
        return self

    def assign_ref(
        self,
        name: str,
        value: typing.Union[None, "Record", typing.Sequence[typing.Optional["Record"]]],
        owner_type: str,
        targets: typing.Optional[typing.Sequence[typing.Optional[RecordKey]]] = None,
    ) -> None:
        """
        Point the relationship ``name`` at ``value``: a single record (or :py:const:`None`)
        for a to-one relationship, a sequence for a to-many relationship.

        :param str owner_type: the type of the resource object the linkage came from.
        :param targets: the identifiers the linkage named, in order; taken from ``value`` when
            omitted. They are kept even where ``value`` holds :py:const:`None`.
        """
        if value is None or isinstance(value, Record):
            keys: typing.Tuple[typing.Optional[RecordKey], ...] = (
                value.key if value is not None else None,
            )
            many = False
        else:
            keys = tuple(r.key if r is not None else None for r in value)
            many = True
        self._refs[name] = RecordRef(
            keys=keys,
            many=many,
            owner_type=owner_type,
            targets=keys if targets is None else tuple(targets),
        )

    def _lookup(self, key: typing.Optional[RecordKey]) -> typing.Optional["Record"]:
        if key is None or self._collection is None:
            return None
        return self._collection.find(*key)

    def ref(
        self, name: str
    ) -> typing.Union[None, "Record", typing.List[typing.Optional["Record"]]]:
        """
        Resolve the relationship ``name`` through the collection the record lives in.

        :raises KeyError: if no relationship of that name was ever linked.
        """
        ref = self._refs[name]
        if ref.many:
            return [self._lookup(key) for key in ref.keys]
        else:
            return self._lookup(ref.keys[0])

    def get(self, name: str, default: typing.Any = None) -> typing.Any:
        try:
            return self[name]
        except KeyError:
            return default

    def __getitem__(self, name: str) -> typing.Any:
        if name == "id":
            return self.id
        elif name == "type":
            return self.type
        elif name in self._attributes:
            return self._attributes[name]
        else:
            return self.ref(name)

    def __contains__(self, name: str) -> bool:
        return name in ("id", "type") or name in self._attributes or name in self._refs

    def __getattr__(self, name: str) -> typing.Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                f"{self.__class__.__name__!r} object has no attribute or relationship {name!r}"
            ) from None

    def _linkage_data(self, ref: RecordRef) -> LinkageData:
        if ref.many:
            return [
                ResourceIdRepr(type=key[0], id=key[1]) for key in ref.targets if key is not None
            ]
        key = ref.targets[0] if ref.targets else None
        return ResourceIdRepr(type=key[0], id=key[1]) if key is not None else None

    def to_repr(self) -> ResourceRepr:
        """
        Build the resource object that represents the record on the wire.
        The ``"<name>Links"`` attributes are put back into the relationships they came from.
        """
        assert self.type is not None
        attributes = []
        links: "OrderedDict[str, LinksRepr]" = OrderedDict()
        for key, value in self._attributes.items():
            if isinstance(value, LinksRepr) and key.endswith(LINKS_SUFFIX):
                links[key[: -len(LINKS_SUFFIX)]] = value
            else:
                attributes.append((key, value))

        relationships = []
        for name in list(self._refs) + [n for n in links if n not in self._refs]:
            ref = self._refs.get(name)
            relationships.append(
                (
                    name,
                    LinkageRepr(
                        data=self._linkage_data(ref) if ref is not None else Missing,
                        links=links.get(name),
                    ),
                )
            )

        return ResourceRepr(
            type=self.type,
            id=self.id,
            attributes=attributes,
            relationships=relationships,
        )

    def to_jsonapi(self, renderer: typing.Optional[ReprRenderer] = None) -> MutableJSONObject:
        """
        Render the record as a resource object, ready to be sent as ``data`` of a request body.
        """
        return (renderer or ReprRenderer()).render_resource(self.to_repr())

    async def fetch_link(
        self,
        name: str,
        link_name: str = "related",
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        options: typing.Optional["RequestOptions"] = None,
    ) -> "Response":
        """
        Follow a link of the relationship ``name``, syncing the result into the record's store.

        When the relationship carries no such link, the returned response wraps :py:const:`None`
        and no request is made.
        """
        from .network import fetch_link

        links = self._attributes.get(links_attribute_name(name))
        link = links.get(link_name) if isinstance(links, LinksRepr) else None
        return await fetch_link(link, self._collection, headers, options)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} type={self.type!r} id={self.id!r}>"

    def __init__(
        self,
        data: typing.Mapping[str, typing.Any],
        collection: typing.Optional["Collection"] = None,
    ):
        """
        :param Mapping[str, Any] data: a flattened record; must contain ``id``, and ``type``
            unless the class names its type.
        :param Optional[Collection] collection: the collection the record belongs to.
        """
        type_ = data.get("type") or self.__class__.type
        if type_ is None:
            raise ValueError("record type is not specified")
        self.type = type_
        self.id = data["id"]
        self._attributes = OrderedDict()
        self._refs = OrderedDict()
        self._collection = collection
        self.update(data)
