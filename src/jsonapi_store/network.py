"""
:py:mod:`jsonapi_store.network` issues requests and wraps what comes back in a
:py:class:`jsonapi_store.response.Response`.

Every request goes through :py:func:`base_fetch`, which never raises for an ordinary failure: a
network error, an unparsable body, or a status of 400 and above all end up in the ``error`` of the
returned envelope, next to whatever status, headers and body were already known.

Two seams can be replaced on :py:data:`config`: ``fetch_reference`` swaps only the HTTP call, while
``base_fetch`` swaps the whole pipeline and must return a :py:class:`RawResponse` itself.

.. code-block:: python

   from jsonapi_store import network

   network.config.base_url = "https://example.com/api/"

   response = await network.read(store, "articles", options=network.RequestOptions(include=["author"]))
   if response.error is not None:
       ...
"""

import collections.abc
import dataclasses
import inspect
import json
import typing
from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

import httpx
import structlog

from .config import NetworkConfig, RawResponseLike, RequestInit
from .exceptions import TransportError
from .records import Record
from .response import Response
from .serde.models import DocumentRepr, LinkObjectRepr
from .serde.renderer import ReprRenderer
from .serde.types import JSONValue

if typing.TYPE_CHECKING:
    from .store import Store

logger = structlog.get_logger()

config = NetworkConfig()

Headers = typing.Mapping[str, str]
RequestBody = typing.Union[None, Record, DocumentRepr, JSONValue]
LinkLike = typing.Union[None, str, LinkObjectRepr, typing.Mapping[str, typing.Any]]


@dataclasses.dataclass
class RequestOptions:
    """
    Query parameters of a request, rendered the way JSON:API spells them.

    :param include: relationship paths to side-load (``include=author,comments``).
    :param fields: sparse fieldsets per type (``fields[articles]=title,body``).
    :param filter: filter values (``filter[tag]=news``); sequences are comma-joined.
    :param sort: sort fields, prefixed with ``-`` for descending order.
    :param params: any other parameters, passed through as they are.
    """

    include: typing.Sequence[str] = ()
    fields: typing.Mapping[str, typing.Sequence[str]] = dataclasses.field(default_factory=dict)
    filter: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)
    sort: typing.Sequence[str] = ()
    params: typing.Sequence[typing.Tuple[str, str]] = ()

    def query(self) -> typing.List[typing.Tuple[str, str]]:
        query: typing.List[typing.Tuple[str, str]] = []
        if self.include:
            query.append(("include", ",".join(self.include)))
        for type_, names in self.fields.items():
            query.append((f"fields[{type_}]", ",".join(names)))
        for key, value in self.filter.items():
            if isinstance(value, collections.abc.Sequence) and not isinstance(value, str):
                value = ",".join(str(v) for v in value)
            query.append((f"filter[{key}]", str(value)))
        if self.sort:
            query.append(("sort", ",".join(self.sort)))
        query.extend(self.params)
        return query


@dataclasses.dataclass
class RawResponse:
    """
    What the transport layer produced for one request, before it is turned into a
    :py:class:`Response`.
    """

    data: JSONValue = None
    status: typing.Optional[int] = None
    headers: typing.Dict[str, str] = dataclasses.field(default_factory=dict)
    request_headers: typing.Dict[str, str] = dataclasses.field(default_factory=dict)
    error: typing.Optional[Exception] = None


class HTTPXFetcher:
    """
    The default ``fetch_reference``: performs the request with :py:class:`httpx.AsyncClient`.

    :param Optional[httpx.AsyncClient] client: a client to reuse; a short-lived client is opened
        per request otherwise.
    :param float timeout: the timeout of the short-lived clients, in seconds.
    """

    _client: typing.Optional[httpx.AsyncClient]
    _timeout: float

    async def __call__(self, url: str, init: RequestInit) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(
                init["method"], url, headers=init["headers"], content=init["body"]
            )
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.request(
                init["method"], url, headers=init["headers"], content=init["body"]
            )

    def __init__(self, client: typing.Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self._client = client
        self._timeout = timeout


def _pipeline() -> typing.Callable[..., typing.Awaitable["RawResponse"]]:
    return config.base_fetch or base_fetch


def build_url(url: str, options: typing.Optional[RequestOptions] = None) -> str:
    """
    Resolve ``url`` against ``config.base_url`` and append the query of ``options``.
    """
    url = urljoin(config.base_url, url)
    if options is None:
        return url
    query = options.query()
    if not query:
        return url
    scheme, netloc, path, existing, fragment = urlsplit(url)
    encoded = urlencode(query, safe=",[]")
    if existing:
        encoded = f"{existing}&{encoded}"
    return urlunsplit((scheme, netloc, path, encoded, fragment))


def _render_body(body: RequestBody) -> typing.Optional[str]:
    if body is None:
        return None
    if isinstance(body, Record):
        body = {"data": body.to_jsonapi()}
    elif isinstance(body, DocumentRepr):
        body = ReprRenderer()(body)
    return json.dumps(body)


async def _parse_body(response: RawResponseLike) -> JSONValue:
    if response.status_code == 204:
        return None
    content = getattr(response, "content", None)
    if isinstance(content, (bytes, str)) and not content.strip():
        return None
    data = response.json()
    if inspect.isawaitable(data):
        data = await data
    return data


async def base_fetch(
    method: str,
    url: str,
    body: RequestBody = None,
    request_headers: typing.Optional[Headers] = None,
) -> RawResponse:
    """
    Issue one request through ``config.fetch_reference`` and collect the outcome.

    The stages are: build the request, await the response, parse the body, classify the status.
    Any failure along the way is recorded as a :py:class:`TransportError` in the result.
    """
    data: JSONValue = None
    status: typing.Optional[int] = None
    headers: typing.Dict[str, str] = {}
    sent_headers: typing.Dict[str, str] = dict(config.default_headers)
    sent_headers.update(request_headers or {})
    fetch = config.fetch_reference or HTTPXFetcher()

    try:
        init = RequestInit(method=method, headers=sent_headers, body=_render_body(body))
        logger.debug("request.sent", method=method, url=url)
        response = await fetch(url, init)
        status = response.status_code
        headers = dict(response.headers)
        data = await _parse_body(response)
        if status >= 400:
            raise TransportError(f"Invalid HTTP status: {status}", status)
    except TransportError as e:
        error: typing.Optional[TransportError] = e
    except Exception as e:
        error = TransportError(str(e) or e.__class__.__name__, status)
        error.__cause__ = e
    else:
        error = None

    if error is not None:
        logger.warning(
            "request.failed", method=method, url=url, status=status, error=error.message
        )
    return RawResponse(
        data=data,
        status=status,
        headers=headers,
        request_headers=sent_headers,
        error=error,
    )


async def read(
    store: typing.Optional["Store"],
    url: str,
    headers: typing.Optional[Headers] = None,
    options: typing.Optional[RequestOptions] = None,
) -> Response:
    """
    Fetch ``url`` with ``GET`` and sync the returned document into ``store``.
    """
    raw = await _pipeline()("GET", build_url(url, options), None, headers)
    return Response(raw, store, options)


async def create(
    store: typing.Optional["Store"],
    url: str,
    data: RequestBody = None,
    headers: typing.Optional[Headers] = None,
    options: typing.Optional[RequestOptions] = None,
) -> Response:
    """
    ``POST`` ``data`` to ``url``. ``data`` may be a :py:class:`Record`, a :py:class:`DocumentRepr`,
    or an already JSON-compatible document.
    """
    raw = await _pipeline()("POST", build_url(url, options), data, headers)
    return Response(raw, store, options)


async def update(
    store: typing.Optional["Store"],
    url: str,
    data: RequestBody = None,
    headers: typing.Optional[Headers] = None,
    options: typing.Optional[RequestOptions] = None,
) -> Response:
    raw = await _pipeline()("PATCH", build_url(url, options), data, headers)
    return Response(raw, store, options)


async def remove(
    store: typing.Optional["Store"],
    url: str,
    headers: typing.Optional[Headers] = None,
    options: typing.Optional[RequestOptions] = None,
) -> Response:
    raw = await _pipeline()("DELETE", build_url(url, options), None, headers)
    return Response(raw, store, options)


async def fetch_link(
    link: LinkLike,
    store: typing.Optional["Store"],
    headers: typing.Optional[Headers] = None,
    options: typing.Optional[RequestOptions] = None,
) -> Response:
    """
    Follow a link, given as a URL or a link object.
    A falsy link produces a response wrapping :py:const:`None` without issuing a request.
    """
    href: typing.Optional[str]
    if isinstance(link, LinkObjectRepr):
        href = link.href
    elif isinstance(link, collections.abc.Mapping):
        href = link.get("href")
    else:
        href = link
    if not href:
        return Response(RawResponse(data=None), store)
    return await read(store, href, headers, options)
