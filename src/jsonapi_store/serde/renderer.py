"""
:py:mod:`jsonapi_store.serde.renderer` renders the internal representation of a JSON:API document
back to JSON, which is how records are turned into request bodies.

Synopsis
--------

.. code-block:: python

   import json

   from jsonapi_store.serde.renderer import ReprRenderer

   renderer = ReprRenderer()

   internal_repr = DocumentRepr(
       data=ResourceRepr(
           type="articles",
           id="1",
           attributes=[
               ("title", "JSON:API paints my bikeshed!"),
           ],
           relationships=[
               (
                   "author",
                   LinkageRepr(
                       links=LinksRepr({"related": "/articles/1/author"}),
                       data=ResourceIdRepr(type="people", id="9"),
                   ),
               ),
           ],
       ),
   )

   print(json.dumps(renderer(internal_repr)))

"""

import base64
import collections.abc
import datetime
import decimal
import typing
from collections import OrderedDict

from .models import (
    DocumentRepr,
    ErrorRepr,
    LinkageRepr,
    LinkObjectRepr,
    LinksRepr,
    Missing,
    Repr,
    ResourceIdRepr,
    ResourceRepr,
    SourceRepr,
)
from .types import JSONValue, MutableJSONObject
from .utils import JSONPointer


class ReprRendererContext:
    path: JSONPointer
    anchor: typing.Optional[Repr]

    def describe(self) -> str:
        """
        The path of the node, qualified with the identity of the resource it belongs to.
        """
        if isinstance(self.anchor, ResourceRepr):
            return f"{self.anchor.type}/{self.anchor.id}:{self.path}"
        return str(self.path)

    def __truediv__(self, component: str) -> "ReprRendererContext":
        return self.replace(path=(self.path / component))

    def __or__(self, anchor: Repr) -> "ReprRendererContext":
        return self.replace(anchor=anchor)

    def __getitem__(self, index: int) -> "ReprRendererContext":
        return self.replace(path=(self.path[index]))

    def replace(
        self, *, anchor: typing.Optional[Repr] = None, path: typing.Optional[JSONPointer] = None
    ):
        anchor = self.anchor if anchor is None else anchor
        path = self.path if path is None else path
        return ReprRendererContext(anchor=anchor, path=path)

    def __init__(
        self,
        anchor: typing.Optional[Repr] = None,
        path: typing.Optional[JSONPointer] = None,
    ):
        self.anchor = anchor
        self.path = JSONPointer() if path is None else path


class ReprRenderer:
    _render_decimal_as_str: bool = True
    _assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None

    def _dict_factory(self, items: typing.Iterable[typing.Tuple[str, typing.Any]]):
        return OrderedDict(items)

    def _render_datetime(self, ctx: ReprRendererContext, value: typing.Any) -> JSONValue:
        _value = typing.cast(datetime.datetime, value)
        if _value.tzinfo is None:
            if self._assume_naive_timezone_as is None:
                raise ValueError(f"{ctx.describe()}: naive datetime {_value}")
            _value = _value.replace(tzinfo=self._assume_naive_timezone_as)
        return _value.astimezone(datetime.timezone.utc).isoformat()

    def _render_date(self, ctx: ReprRendererContext, value: typing.Any) -> JSONValue:
        return typing.cast(datetime.date, value).isoformat()

    def _render_decimal(self, ctx: ReprRendererContext, value: typing.Any) -> JSONValue:
        _value = typing.cast(decimal.Decimal, value)
        return str(_value) if self._render_decimal_as_str else float(_value)

    def _render_bytes(self, ctx: ReprRendererContext, value: typing.Any) -> JSONValue:
        return base64.b64encode(typing.cast(bytes, value)).decode("ascii")

    def _render_passthrough(self, ctx: ReprRendererContext, value: typing.Any) -> JSONValue:
        return value

    _supported_types: typing.ClassVar[typing.Dict[type, typing.Callable]] = {
        datetime.datetime: _render_datetime,
        datetime.date: _render_date,
        decimal.Decimal: _render_decimal,
        bytes: _render_bytes,
        str: _render_passthrough,
        int: _render_passthrough,
        float: _render_passthrough,
        bool: _render_passthrough,
        None.__class__: _render_passthrough,
    }

    def _render_value(self, ctx: ReprRendererContext, value: typing.Any) -> JSONValue:
        # fast pass
        r = self._supported_types.get(type(value))
        if r is not None:
            return r(self, ctx, value)

        for type_, r in self._supported_types.items():
            if isinstance(value, type_):
                return r(self, ctx, value)

        if isinstance(value, collections.abc.Mapping):
            return self._dict_factory((k, self._render_value(ctx / k, v)) for k, v in value.items())
        elif isinstance(value, collections.abc.Sequence):
            return [self._render_value(ctx[i], v) for i, v in enumerate(value)]

        raise TypeError(f"{ctx.describe()}: unsupported type {value!r}")

    def _render_link(self, ctx: ReprRendererContext, repr_: typing.Any) -> JSONValue:
        if isinstance(repr_, LinkObjectRepr):
            retval: MutableJSONObject = {"href": repr_.href}
            if repr_.meta:
                retval["meta"] = repr_.meta
            return retval
        return repr_

    def _render_links(self, ctx: ReprRendererContext, repr_: LinksRepr) -> MutableJSONObject:
        return self._dict_factory((k, self._render_link(ctx / k, v)) for k, v in repr_.items())

    def _render_resource_link(
        self, ctx: ReprRendererContext, repr_: ResourceIdRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {
            "type": repr_.type,
            "id": repr_.id,
        }
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_relationship(
        self, ctx: ReprRendererContext, repr_: LinkageRepr
    ) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.links is not None:
            retval["links"] = self._render_links((ctx / "links") | repr_, repr_.links)
        if repr_.data is None:
            retval["data"] = None
        elif isinstance(repr_.data, ResourceIdRepr):
            retval["data"] = self._render_resource_link((ctx / "data") | repr_, repr_.data)
        elif repr_.data is not Missing:
            retval["data"] = [
                self._render_resource_link((ctx / "data")[i] | repr_, item)
                for i, item in enumerate(typing.cast(typing.Sequence[ResourceIdRepr], repr_.data))
            ]
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_resource(self, ctx: ReprRendererContext, repr_: ResourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {"type": repr_.type}
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.attributes:
            new_ctx = (ctx / "attributes") | repr_
            retval["attributes"] = self._dict_factory(
                (k, self._render_value(new_ctx / k, v)) for k, v in repr_.attributes.items()
            )
        if repr_.relationships:
            new_ctx = (ctx / "relationships") | repr_
            retval["relationships"] = self._dict_factory(
                (k, self._render_relationship(new_ctx / k, v))
                for k, v in repr_.relationships.items()
            )
        if repr_.links:
            retval["links"] = self._render_links((ctx / "links") | repr_, repr_.links)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_source(self, ctx: ReprRendererContext, repr_: SourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.pointer is not None:
            retval["pointer"] = repr_.pointer
        if repr_.parameter is not None:
            retval["parameter"] = repr_.parameter
        return retval

    def _render_error(self, ctx: ReprRendererContext, repr_: ErrorRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.links is not None:
            retval["links"] = self._render_links((ctx / "links") | repr_, repr_.links)
        if repr_.status is not None:
            retval["status"] = repr_.status
        if repr_.code is not None:
            retval["code"] = repr_.code
        if repr_.title is not None:
            retval["title"] = repr_.title
        if repr_.detail is not None:
            retval["detail"] = repr_.detail
        if repr_.source is not None:
            retval["source"] = self._render_source((ctx / "source") | repr_, repr_.source)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def render_resource(self, repr_: ResourceRepr) -> MutableJSONObject:
        """
        Render a single resource object, as found under ``data`` of a request body.
        """
        return self._render_resource(ReprRendererContext(), repr_)

    def __call__(self, repr_: DocumentRepr) -> MutableJSONObject:
        ctx = ReprRendererContext()
        retval: MutableJSONObject = {}
        if repr_.jsonapi:
            retval["jsonapi"] = repr_.jsonapi
        if repr_.links is not None:
            retval["links"] = self._render_links((ctx / "links") | repr_, repr_.links)
        if repr_.errors:
            new_ctx = (ctx / "errors") | repr_
            retval["errors"] = [
                self._render_error(new_ctx[i], e) for i, e in enumerate(repr_.errors)
            ]
        if repr_.meta:
            retval["meta"] = repr_.meta
        if isinstance(repr_.data, ResourceRepr):
            retval["data"] = self._render_resource((ctx / "data") | repr_, repr_.data)
        elif repr_.data is None:
            retval["data"] = None
        elif repr_.data is not Missing:
            retval["data"] = [
                self._render_resource((ctx / "data")[i] | repr_, item)
                for i, item in enumerate(typing.cast(typing.Sequence[ResourceRepr], repr_.data))
            ]
        if repr_.included:
            new_ctx = (ctx / "included") | repr_
            retval["included"] = [
                self._render_resource(new_ctx[i], r) for i, r in enumerate(repr_.included)
            ]
        return retval

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
    ):
        self._render_decimal_as_str = render_decimal_as_str
        self._assume_naive_timezone_as = assume_naive_timezone_as
