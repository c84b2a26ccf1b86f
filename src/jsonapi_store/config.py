"""Request configuration using Pydantic Settings."""

import typing

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class RawResponseLike(typing.Protocol):
    """
    What a fetch implementation hands back: an :py:class:`httpx.Response` qualifies.
    ``json()`` may also return an awaitable.
    """

    status_code: int
    headers: typing.Mapping[str, str]

    def json(self) -> typing.Any:
        ...  # pragma: nocover


class RequestInit(typing.TypedDict):
    method: str
    headers: typing.Dict[str, str]
    body: typing.Optional[str]


FetchReference = typing.Callable[[str, RequestInit], typing.Awaitable[RawResponseLike]]


class NetworkConfig(BaseSettings):
    """
    Settings for the requests issued by :py:mod:`jsonapi_store.network`.

    Values can come from ``JSONAPI_STORE_*`` environment variables and be overridden on the
    instance at any time before a request is issued.
    """

    model_config = SettingsConfigDict(
        env_prefix="JSONAPI_STORE_",
        extra="ignore",
        arbitrary_types_allowed=True,
    )

    # Base URL relative request URLs are resolved against
    base_url: str = "/"

    # Sent with every request; per-request headers take precedence
    default_headers: typing.Dict[str, str] = Field(
        default_factory=lambda: {"content-type": JSONAPI_MEDIA_TYPE}
    )

    # None selects the httpx based default
    fetch_reference: typing.Optional[typing.Callable[..., typing.Awaitable[typing.Any]]] = Field(
        default=None, exclude=True
    )

    # Called as (method, url, body, request_headers) in place of network.base_fetch;
    # must return a network.RawResponse and never raise
    base_fetch: typing.Optional[typing.Callable[..., typing.Awaitable[typing.Any]]] = Field(
        default=None, exclude=True
    )

