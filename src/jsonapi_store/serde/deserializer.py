import collections.abc
import json
import typing

from .exceptions import DeserializationError, DeserializationErrorItem
from .models import (
    DocumentData,
    DocumentRepr,
    ErrorRepr,
    LinkageData,
    LinkageRepr,
    LinkObjectRepr,
    LinksRepr,
    Missing,
    ResourceIdRepr,
    ResourceRepr,
    SourceRepr,
)
from .types import JSONValue, RawDocument
from .utils import JSONPointer


class DeserializerContext:
    errors: typing.List[DeserializationErrorItem]

    def validation_error_occurred(self, pointer: JSONPointer, message: str) -> None:
        self.errors.append(DeserializationErrorItem(pointer, message))

    def __init__(self):
        self.errors = []


def _describe(value: JSONValue) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


def _json_type_name(value: JSONValue) -> str:
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, (int, float)):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, collections.abc.Mapping):
        return "object"
    elif isinstance(value, collections.abc.Sequence):
        return "array"
    else:
        return type(value).__name__


class ReprDeserializer:
    """
    :py:class:`ReprDeserializer` turns a parsed JSON:API document into a :py:class:`DocumentRepr`.

    The whole payload is validated before anything is returned; every problem is recorded with the
    pointer where it was found, and a single :py:class:`DeserializationError` listing all of them
    is raised at the end.

    :param bool require_id: reject resource objects without an ``id``. Documents coming back from a
        server always carry one; a document built for a creation request may not.
    """

    _require_id: bool

    def _expect_object(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[typing.Mapping[str, JSONValue]]:
        if not isinstance(value, collections.abc.Mapping):
            ctx.validation_error_occurred(
                pointer,
                f"value has type {_json_type_name(value)} ({_describe(value)}) where object expected",
            )
            return None
        return value

    def _expect_array(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[typing.Sequence[JSONValue]]:
        if isinstance(value, (str, bytes)) or not isinstance(value, collections.abc.Sequence):
            ctx.validation_error_occurred(
                pointer,
                f"value has type {_json_type_name(value)} ({_describe(value)}) where array expected",
            )
            return None
        return value

    def _expect_string(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[str]:
        if not isinstance(value, str):
            ctx.validation_error_occurred(
                pointer,
                f"value has type {_json_type_name(value)} ({_describe(value)}) where string expected",
            )
            return None
        return value

    def _convert_meta(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: typing.Mapping[str, JSONValue]
    ) -> typing.Optional[typing.Dict[str, typing.Any]]:
        if "meta" not in value:
            return None
        meta = self._expect_object(ctx, pointer / "meta", value["meta"])
        return dict(meta) if meta is not None else None

    def _convert_link(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Union[None, str, LinkObjectRepr]:
        if value is None or isinstance(value, str):
            return value
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None
        if "href" not in obj:
            ctx.validation_error_occurred(pointer, 'value must have a property "href"')
            return None
        href = self._expect_string(ctx, pointer / "href", obj["href"])
        if href is None:
            return None
        return LinkObjectRepr(
            href=href,
            meta=self._convert_meta(ctx, pointer, obj),
            _source_=pointer,
        )

    def _convert_links(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[LinksRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None
        return LinksRepr(
            [(k, self._convert_link(ctx, pointer / k, v)) for k, v in obj.items()],
            _source_=pointer,
        )

    def _convert_resource_id(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[ResourceIdRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None
        type_: typing.Optional[str] = None
        id_: typing.Optional[str] = None
        for k in ("type", "id"):
            if k not in obj:
                ctx.validation_error_occurred(pointer / k, f'value must have a property "{k}"')
        if "type" in obj:
            type_ = self._expect_string(ctx, pointer / "type", obj["type"])
        if "id" in obj:
            id_ = self._expect_string(ctx, pointer / "id", obj["id"])
        if type_ is None or id_ is None:
            return None
        return ResourceIdRepr(
            type=type_,
            id=id_,
            meta=self._convert_meta(ctx, pointer, obj),
            _source_=pointer,
        )

    def _convert_linkage(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[LinkageRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None

        data: LinkageData = Missing
        if "data" in obj:
            data_ = obj["data"]
            _pointer = pointer / "data"
            if data_ is None:
                data = None
            elif isinstance(data_, collections.abc.Mapping):
                data = self._convert_resource_id(ctx, _pointer, data_)
            else:
                items = self._expect_array(ctx, _pointer, data_)
                if items is not None:
                    ids = [self._convert_resource_id(ctx, _pointer[i], v) for i, v in enumerate(items)]
                    data = [id_ for id_ in ids if id_ is not None]

        links: typing.Optional[LinksRepr] = None
        if "links" in obj:
            links = self._convert_links(ctx, pointer / "links", obj["links"])

        return LinkageRepr(
            data=data,
            links=links,
            meta=self._convert_meta(ctx, pointer, obj),
            _source_=pointer,
        )

    def _convert_resource(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[ResourceRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None

        type_: typing.Optional[str] = None
        if "type" not in obj:
            ctx.validation_error_occurred(pointer / "type", 'value must have a property "type"')
        else:
            type_ = self._expect_string(ctx, pointer / "type", obj["type"])

        id_: typing.Optional[str] = None
        if obj.get("id") is None:
            if self._require_id:
                ctx.validation_error_occurred(pointer / "id", 'value must have a property "id"')
        else:
            id_ = self._expect_string(ctx, pointer / "id", obj["id"])

        attributes: typing.Mapping[str, JSONValue] = {}
        if "attributes" in obj:
            attributes = self._expect_object(ctx, pointer / "attributes", obj["attributes"]) or {}

        relationships: typing.List[typing.Tuple[str, LinkageRepr]] = []
        if "relationships" in obj:
            _pointer = pointer / "relationships"
            rels = self._expect_object(ctx, _pointer, obj["relationships"]) or {}
            for k, v in rels.items():
                linkage = self._convert_linkage(ctx, _pointer / k, v)
                if linkage is not None:
                    relationships.append((k, linkage))

        links: typing.Optional[LinksRepr] = None
        if "links" in obj:
            links = self._convert_links(ctx, pointer / "links", obj["links"])

        if type_ is None:
            return None
        return ResourceRepr(
            type=type_,
            id=id_,
            attributes=attributes,
            relationships=relationships,
            links=links,
            meta=self._convert_meta(ctx, pointer, obj),
            _source_=pointer,
        )

    def _convert_error(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[ErrorRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None

        def _str(k: str) -> typing.Optional[str]:
            v = obj.get(k)
            # some servers send the status as a number
            return None if v is None else str(v)

        source: typing.Optional[SourceRepr] = None
        if "source" in obj:
            source_ = self._expect_object(ctx, pointer / "source", obj["source"])
            if source_ is not None:
                source = SourceRepr(
                    pointer=source_.get("pointer"),
                    parameter=source_.get("parameter"),
                    _source_=pointer / "source",
                )

        links: typing.Optional[LinksRepr] = None
        if "links" in obj:
            links = self._convert_links(ctx, pointer / "links", obj["links"])

        return ErrorRepr(
            id=_str("id"),
            status=_str("status"),
            code=_str("code"),
            title=_str("title"),
            detail=_str("detail"),
            source=source,
            links=links,
            meta=self._convert_meta(ctx, pointer, obj) or {},
            _source_=pointer,
        )

    def _convert_resources(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.List[ResourceRepr]:
        items = self._expect_array(ctx, pointer, value)
        if items is None:
            return []
        resources = [self._convert_resource(ctx, pointer[i], v) for i, v in enumerate(items)]
        return [r for r in resources if r is not None]

    def _convert_document(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[DocumentRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None

        data: DocumentData = Missing
        if "data" in obj:
            data_ = obj["data"]
            if data_ is None:
                data = None
            elif isinstance(data_, collections.abc.Mapping):
                data = self._convert_resource(ctx, pointer / "data", data_)
            else:
                data = self._convert_resources(ctx, pointer / "data", data_)

        included: typing.List[ResourceRepr] = []
        if "included" in obj:
            included = self._convert_resources(ctx, pointer / "included", obj["included"])

        errors: typing.Optional[typing.List[ErrorRepr]] = None
        if "errors" in obj:
            _pointer = pointer / "errors"
            items = self._expect_array(ctx, _pointer, obj["errors"]) or []
            errors = [
                e
                for e in (self._convert_error(ctx, _pointer[i], v) for i, v in enumerate(items))
                if e is not None
            ]

        links: typing.Optional[LinksRepr] = None
        if "links" in obj:
            links = self._convert_links(ctx, pointer / "links", obj["links"])

        jsonapi: typing.Optional[typing.Dict[str, typing.Any]] = None
        if "jsonapi" in obj:
            jsonapi_ = self._expect_object(ctx, pointer / "jsonapi", obj["jsonapi"])
            jsonapi = dict(jsonapi_) if jsonapi_ is not None else None

        return DocumentRepr(
            data=data,
            jsonapi=jsonapi,
            errors=errors,
            included=included,
            links=links,
            meta=self._convert_meta(ctx, pointer, obj),
            _source_=pointer,
        )

    def __call__(self, document: RawDocument) -> DocumentRepr:
        ctx = DeserializerContext()
        retval = self._convert_document(ctx, JSONPointer(), document)
        if ctx.errors:
            raise DeserializationError(document, ctx.errors)
        assert retval is not None
        return retval

    def __init__(self, require_id: bool = True):
        self._require_id = require_id
