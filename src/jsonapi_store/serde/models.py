"""
Classes in :py:mod:`jsonapi_store.serde.models` are the typed representation of the JSON:API
document elements a server sends back.

They are produced by :py:class:`jsonapi_store.serde.deserializer.ReprDeserializer`, consumed by
the store during a sync, and rendered back to JSON by
:py:class:`jsonapi_store.serde.renderer.ReprRenderer` when a record is sent to the server.
"""

import collections.abc
import dataclasses
import typing
from collections import OrderedDict

from .utils import JSONPointer

Source = typing.Union[JSONPointer, str]


class MissingType:
    """
    The type of :py:data:`Missing`, which marks a member that is absent from the document
    (as opposed to a member that is present and ``null``).
    """

    def __bool__(self):
        return False

    def __repr__(self):
        return "Missing"

    def __init__(self):
        raise TypeError("Not directly instantiable")


Missing = object.__new__(MissingType)


@dataclasses.dataclass
class Repr:
    """
    The base class for any model objects.
    """

    _source_: typing.Optional[Source] = None


@dataclasses.dataclass(init=False)
class LinkObjectRepr(Repr):
    """
    :py:class:`LinkObjectRepr` represents a link given in the object form (``{"href": ..., "meta": ...}``).

    Ref. `Links <https://jsonapi.org/format/#document-links>`_
    """

    href: str = ""
    meta: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __init__(
        self,
        *,
        href: str,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param str href: the URL the link points to.
        :param Optional[Dict[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(_source_=_source_)
        self.href = href
        self.meta = meta if meta is not None else {}


Link = typing.Union[str, LinkObjectRepr]


@dataclasses.dataclass(init=False, eq=False)
class LinksRepr(Repr, collections.abc.Mapping):
    """
    :py:class:`LinksRepr` class represents a ``links`` node of JSON:API.

    It behaves as a read-only mapping from a link name to either a URL string or a
    :py:class:`LinkObjectRepr`. Any link name is accepted.
    It compares equal to any mapping holding the same links.

    Ref.

    * `Document Links <https://jsonapi.org/format/#document-links>`_
    * `Related Resource Links <https://jsonapi.org/format/#document-resource-object-related-resource-links>`_
    """

    links: "OrderedDict[str, typing.Optional[Link]]" = dataclasses.field(
        default_factory=OrderedDict
    )

    @property
    def self_(self) -> typing.Optional[Link]:
        return self.links.get("self")

    @property
    def related(self) -> typing.Optional[Link]:
        return self.links.get("related")

    def __getitem__(self, name: str) -> typing.Optional[Link]:
        return self.links[name]

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self.links)

    def __len__(self) -> int:
        return len(self.links)

    def __init__(
        self,
        links: typing.Union[
            typing.Mapping[str, typing.Optional[Link]],
            typing.Iterable[typing.Tuple[str, typing.Optional[Link]]],
        ] = (),
        *,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param links: a mapping or a sequence of name-link pairs.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(_source_=_source_)
        self.links = OrderedDict(links)


@dataclasses.dataclass(init=False)
class MetaContainerRepr(Repr):
    """
    :py:class:`MetaContainerRepr` is an abstract base for classes containing ``meta`` node.
    """

    meta: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __init__(
        self,
        *,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        super().__init__(_source_=_source_)
        self.meta = meta if meta is not None else {}


@dataclasses.dataclass(init=False)
class NodeRepr(MetaContainerRepr):
    """
    :py:class:`NodeRepr` is an abstract base for classes containing ``links`` node.
    """

    links: typing.Optional[LinksRepr] = None

    def __init__(
        self,
        *,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        super().__init__(meta=meta, _source_=_source_)
        self.links = links


@dataclasses.dataclass(init=False)
class ResourceIdRepr(MetaContainerRepr):
    """
    Instances of :py:class:`ResourceIdRepr` represent `Resource Identifier Objects <https://jsonapi.org/format/#document-resource-identifier-objects>`_
    """

    type: str  # type: ignore
    id: str  # type: ignore

    @property
    def key(self) -> typing.Tuple[str, str]:
        return (self.type, self.id)

    def __init__(
        self,
        *,
        type: str,
        id: str,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param str id: a value for ``id`` property.
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(meta=meta, _source_=_source_)
        self.type = type
        self.id = id


LinkageData = typing.Union[None, MissingType, ResourceIdRepr, typing.Sequence[ResourceIdRepr]]


@dataclasses.dataclass(init=False)
class LinkageRepr(NodeRepr):
    """
    :py:class:`LinkageRepr` represents a relationship entry with its `Resource Linkage <https://jsonapi.org/format/#document-resource-object-linkage>`_.

    ``data`` is :py:data:`Missing` when the entry carries no ``data`` member at all, and
    :py:const:`None` when it is explicitly ``null``.
    """

    data: LinkageData = None

    @property
    def is_to_many(self) -> bool:
        return isinstance(self.data, collections.abc.Sequence)

    def __init__(
        self,
        *,
        data: LinkageData = Missing,
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Union[None, Missing, ResourceIdRepr, Sequence[ResourceIdRepr]] data: a value for ``data`` property.
        :param Optional[LinksRepr] links: a value for ``links`` property.
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(links=links, meta=meta, _source_=_source_)
        self.data = data


AttributeValue = typing.Any


@dataclasses.dataclass(init=False)
class ResourceRepr(NodeRepr):
    """
    :py:class:`ResourceRepr` class represents a `Resource Object <https://jsonapi.org/format/#document-resource-objects>`_.
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore
    attributes: typing.Mapping[str, AttributeValue] = dataclasses.field(default_factory=OrderedDict)  # type: ignore
    relationships: typing.Mapping[str, LinkageRepr] = dataclasses.field(default_factory=OrderedDict)  # type: ignore

    def __getitem__(self, name):
        return self.attributes[name]

    def __init__(
        self,
        *,
        type: str,
        id: typing.Optional[str],
        attributes: typing.Union[
            typing.Mapping[str, AttributeValue],
            typing.Iterable[typing.Tuple[str, AttributeValue]],
        ] = (),
        relationships: typing.Union[
            typing.Mapping[str, LinkageRepr],
            typing.Iterable[typing.Tuple[str, LinkageRepr]],
        ] = (),
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param str id: an optional value for ``id` property.
        :param attributes: a mapping or a sequence of tuples each of which represents a key-value pair of an attribute.
        :param relationships: a mapping or a sequence of tuples each of which represent a key-value pair of a relationship.
        :param Optional[LinksRepr] links: a value for ``links`` property.
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(links=links, meta=meta, _source_=_source_)
        self.type = type
        self.id = id
        self.attributes = OrderedDict(attributes)
        self.relationships = OrderedDict(relationships)


@dataclasses.dataclass(init=False)
class SourceRepr(Repr):
    """
    :py:class:`SourceRepr` represents a value for the ``source`` property of an `Error Object <https://jsonapi.org/format/#error-objects>`_.
    """

    pointer: typing.Optional[str] = None
    parameter: typing.Optional[str] = None

    def __init__(
        self,
        pointer: typing.Optional[str] = None,
        parameter: typing.Optional[str] = None,
        _source_: typing.Optional[Source] = None,
    ):
        super().__init__(_source_=_source_)
        self.pointer = pointer
        self.parameter = parameter


@dataclasses.dataclass
class ErrorRepr(NodeRepr):
    id: typing.Optional[str] = None
    status: typing.Optional[str] = None
    code: typing.Optional[str] = None
    title: typing.Optional[str] = None
    detail: typing.Optional[str] = None
    source: typing.Optional[SourceRepr] = None


DocumentData = typing.Union[None, MissingType, ResourceRepr, typing.Sequence[ResourceRepr]]


@dataclasses.dataclass(init=False)
class DocumentRepr(NodeRepr):
    """
    :py:class:`DocumentRepr` represents a top-level `Document <https://jsonapi.org/format/#document-top-level>`_.

    ``data`` is :py:data:`Missing` for documents that only carry ``meta`` or ``errors``.
    """

    data: DocumentData = None
    jsonapi: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)
    errors: typing.Sequence[ErrorRepr] = ()
    included: typing.Sequence[ResourceRepr] = ()

    @property
    def is_collection(self) -> bool:
        return isinstance(self.data, collections.abc.Sequence)

    @property
    def primary(self) -> typing.Sequence[ResourceRepr]:
        """
        The primary resources as a sequence, regardless of the shape of ``data``.
        """
        if isinstance(self.data, ResourceRepr):
            return (self.data,)
        elif isinstance(self.data, collections.abc.Sequence):
            return self.data
        else:
            return ()

    def __init__(
        self,
        *,
        data: DocumentData = Missing,
        jsonapi: typing.Optional[typing.Dict[str, typing.Any]] = None,
        errors: typing.Optional[typing.Sequence[ErrorRepr]] = None,
        included: typing.Sequence[ResourceRepr] = (),
        links: typing.Optional[LinksRepr] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Union[None, Missing, ResourceRepr, Sequence[ResourceRepr]] data: the primary data.
        :param Optional[Dict[str, Any]] jsonapi:
        :param Optional[Sequence[ErrorRepr]] errors: a sequence of :py:class:`ErrorRepr`.
        :param Sequence[ResourceRepr] included: a sequence of :py:class:`ResourceRepr`.
        :param Optional[LinksRepr] links: a value for ``links`` property.
        :param Optional[Dict[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(links=links, meta=meta, _source_=_source_)
        self.data = data
        self.jsonapi = jsonapi if jsonapi is not None else {}
        self.errors = tuple(errors or ())
        self.included = tuple(included)
