"""Recorded HTTP interactions and the requests resolved against them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from yarl import URL

from ..datastructures.type_aliases import (
    HostName,
    HttpMethod,
    QueryKey,
    QueryMapping,
    ResponseBody,
    StatusCode,
    UrlPath,
)

if TYPE_CHECKING:
    import httpx
    from aiohttp import web


def _host_with_port(host: str | None, port: int | None) -> HostName:
    if not host:
        return ""
    return host if port is None else f"{host}:{port}"


def _first_values(pairs: Iterable[tuple[str, str]]) -> dict[QueryKey, str]:
    # repeated keys compare on their first value
    values: dict[QueryKey, str] = {}
    for key, value in pairs:
        values.setdefault(key, value)
    return values


def query_from_string(query_string: str) -> dict[QueryKey, str]:
    """Parse an URL-encoded query string (``a=1&b=%7B%7D``)."""
    if not query_string:
        return {}
    parsed = URL.build(query_string=query_string, encoded=True)
    return _first_values(parsed.query.items())


def _url_parts(url: str | URL) -> tuple[HostName, UrlPath, dict[QueryKey, str]]:
    parsed = url if isinstance(url, URL) else URL(url)
    return (
        _host_with_port(parsed.host, parsed.explicit_port),
        parsed.path,
        _first_values(parsed.query.items()),
    )


@dataclass(frozen=True, slots=True)
class IncomingRequest:
    """Read-only view of a request needing resolution."""

    method: HttpMethod
    host: HostName
    path: UrlPath
    query: QueryMapping = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "query", MappingProxyType(dict(self.query)))

    @classmethod
    def from_url(cls, method: HttpMethod, url: str | URL) -> IncomingRequest:
        host, path, query = _url_parts(url)
        return cls(method=method, host=host, path=path, query=query)

    @classmethod
    def from_httpx(cls, request: httpx.Request) -> IncomingRequest:
        return cls(
            method=request.method,
            host=_host_with_port(request.url.host, request.url.port),
            path=request.url.path,
            query=_first_values(request.url.params.multi_items()),
        )

    @classmethod
    def from_aiohttp(cls, request: web.Request) -> IncomingRequest:
        return cls(
            method=request.method,
            host=request.host,
            path=request.path,
            query=_first_values(request.query.items()),
        )

    @property
    def url(self) -> str:
        base = URL.build(scheme="https", authority=self.host, path=self.path)
        return str(base.with_query(dict(self.query)))


@dataclass(frozen=True, slots=True)
class RecordedInteraction:
    """One recorded request/response pair."""

    method: HttpMethod
    host: HostName
    path: UrlPath
    query: QueryMapping = field(default_factory=dict)
    response_body: ResponseBody = ""
    response_status: StatusCode = 200

    def __post_init__(self) -> None:
        object.__setattr__(self, "query", MappingProxyType(dict(self.query)))

    @classmethod
    def from_url(
        cls,
        method: HttpMethod,
        url: str | URL,
        response_body: ResponseBody = "",
        response_status: StatusCode = 200,
    ) -> RecordedInteraction:
        host, path, query = _url_parts(url)
        return cls(
            method=method,
            host=host,
            path=path,
            query=query,
            response_body=response_body,
            response_status=response_status,
        )


@dataclass(frozen=True, slots=True)
class Stub:
    """A test-declared interaction with its own ignorable query keys.

    ``query`` is the URL-encoded query string the request is expected to
    carry, e.g. ``"state=%7B%22age%22%3A%2220%22%7D"``.
    """

    method: HttpMethod
    path: UrlPath
    query: str = ""
    response_body: ResponseBody = ""
    response_status_code: StatusCode = 200
    ignore_query_keys: frozenset[QueryKey] = frozenset()
    host: HostName | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "ignore_query_keys", frozenset(self.ignore_query_keys)
        )

    def to_interaction(self, default_host: HostName) -> RecordedInteraction:
        return RecordedInteraction(
            method=self.method,
            host=self.host or default_host,
            path=self.path,
            query=query_from_string(self.query),
            response_body=self.response_body,
            response_status=self.response_status_code,
        )


@dataclass(frozen=True, slots=True)
class Cassette:
    """Ordered, immutable collection of recorded interactions."""

    interactions: tuple[RecordedInteraction, ...] = ()

    @classmethod
    def of(cls, *interactions: RecordedInteraction) -> Cassette:
        return cls(tuple(interactions))

    def appended(self, interaction: RecordedInteraction) -> Cassette:
        return Cassette(self.interactions + (interaction,))

    def __iter__(self) -> Iterator[RecordedInteraction]:
        return iter(self.interactions)

    def __len__(self) -> int:
        return len(self.interactions)

    def __getitem__(self, index: int) -> RecordedInteraction:
        return self.interactions[index]

