import typing

from .serde.deserializer import ReprDeserializer
from .serde.exceptions import DeserializationError
from .serde.models import DocumentRepr, ErrorRepr, LinksRepr, Missing
from .serde.types import JSONValue

if typing.TYPE_CHECKING:
    from .network import RawResponse, RequestOptions
    from .records import Record
    from .store import Store


class Response:
    """
    The envelope of one request.

    ``data`` holds the records the primary data was synced into, or :py:const:`None` when the
    request failed, the document carried no primary data, or no store was given. Callers are
    expected to check ``error`` rather than rely on exceptions: it is set for transport failures,
    statuses of 400 and above, and bodies that are not well-formed documents. The parsed body is
    kept in ``body`` in every case.
    """

    data: typing.Union[None, "Record", typing.List["Record"]]
    status: typing.Optional[int]
    headers: typing.Dict[str, str]
    request_headers: typing.Dict[str, str]
    error: typing.Optional[Exception]
    body: JSONValue
    document: typing.Optional[DocumentRepr]
    store: typing.Optional["Store"]
    options: typing.Optional["RequestOptions"]

    @property
    def meta(self) -> typing.Dict[str, typing.Any]:
        return self.document.meta if self.document is not None else {}

    @property
    def links(self) -> typing.Optional[LinksRepr]:
        return self.document.links if self.document is not None else None

    @property
    def jsonapi(self) -> typing.Dict[str, typing.Any]:
        return self.document.jsonapi if self.document is not None else {}

    @property
    def errors(self) -> typing.Sequence[ErrorRepr]:
        return self.document.errors if self.document is not None else ()

    async def fetch_link(
        self,
        name: str,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        options: typing.Optional["RequestOptions"] = None,
    ) -> "Response":
        """
        Follow the document-level link ``name`` (``self``, ``related``, ...) with the same store.
        """
        from .network import fetch_link

        link = self.links.get(name) if self.links is not None else None
        return await fetch_link(link, self.store, headers, options)

    def __repr__(self) -> str:
        return f"<Response status={self.status!r} error={self.error!r} data={self.data!r}>"

    def __init__(
        self,
        raw: "RawResponse",
        store: typing.Optional["Store"] = None,
        options: typing.Optional["RequestOptions"] = None,
    ):
        self.status = raw.status
        self.headers = raw.headers
        self.request_headers = raw.request_headers
        self.error = raw.error
        self.body = raw.data
        self.store = store
        self.options = options
        self.document = None
        self.data = None

        if raw.data is not None:
            try:
                self.document = ReprDeserializer()(typing.cast(typing.Mapping, raw.data))
            except DeserializationError as e:
                if self.error is None:
                    self.error = e

        if (
            self.error is None
            and self.document is not None
            and self.document.data is not Missing
            and store is not None
        ):
            self.data = store.sync(self.document)
