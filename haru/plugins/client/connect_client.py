"""HTTP transport used by the generated endpoint modules.

Every generated function ends in a single :func:`call`. Point the module at a
server once before using the endpoints::

    from . import connect_client_default

    connect_client_default.configure('https://api.example.com')

To replace the transport, put a ``connect_client.py`` exposing ``call`` and
``ClientRequestInit`` next to the generated modules and regenerate.
"""

from typing import Any, TypedDict
from urllib.parse import quote

import httpx
from pydantic_core import to_jsonable_python

__all__ = [
    'ClientRequestInit',
    'ClientResponseError',
    'ConnectClient',
    'call',
    'configure',
]

_QUERY_METHODS = frozenset({'GET', 'DELETE', 'HEAD'})


class ClientRequestInit(TypedDict, total=False):
    """Per-call options accepted by every generated function."""

    headers: dict[str, str]
    timeout: float | None


class ClientResponseError(Exception):
    """The server answered with a non-2xx status.

    Attributes:
        status_code: The HTTP status code.
        reason: The reason phrase.
        response: The raw response.
    """

    def __init__(
        self, status_code: int, reason: str, response: httpx.Response | None = None
    ):
        self.status_code = status_code
        self.reason = reason
        self.response = response
        super().__init__(f'HTTP {status_code}: {reason}')


class ConnectClient:
    """Sends one request per :meth:`call`.

    Args:
        base_url: Prefix of every request path.
        headers: Headers sent with every request.
        http_client: Client to send requests with. Without one, a short-lived
            :class:`httpx.AsyncClient` is opened per call.
    """

    def __init__(
        self,
        base_url: str = '',
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url
        self.headers = dict(headers or {})
        self.http_client = http_client

    async def call(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        init: ClientRequestInit | None = None,
    ) -> Any:
        init = init or {}
        url = path
        remaining = dict(params or {})

        for key, value in list(remaining.items()):
            placeholder = f'{{{key}}}'
            if placeholder in url:
                url = url.replace(placeholder, quote(str(value), safe=''))
                del remaining[key]

        request_kwargs: dict[str, Any] = {
            'headers': {**self.headers, **init.get('headers', {})},
        }
        if 'timeout' in init:
            request_kwargs['timeout'] = init['timeout']

        if remaining and method.upper() in _QUERY_METHODS:
            request_kwargs['params'] = {
                key: to_jsonable_python(value)
                for key, value in remaining.items()
                if value is not None
            }
        elif remaining:
            request_kwargs['json'] = to_jsonable_python(remaining, by_alias=True)

        if self.http_client is not None:
            response = await self.http_client.request(
                method, f'{self.base_url}{url}', **request_kwargs
            )
        else:
            async with httpx.AsyncClient(base_url=self.base_url) as client:
                response = await client.request(method, url, **request_kwargs)

        return self._read(response)

    @staticmethod
    def _read(response: httpx.Response) -> Any:
        if not response.is_success:
            raise ClientResponseError(
                response.status_code, response.reason_phrase, response
            )

        if response.status_code == 204 or not response.content:
            return None

        if 'application/json' in response.headers.get('content-type', ''):
            return response.json()
        return response.text


_client = ConnectClient()


def configure(
    base_url: str = '',
    headers: dict[str, str] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ConnectClient:
    """Replace the client :func:`call` sends requests with."""
    global _client
    _client = ConnectClient(base_url, headers=headers, http_client=http_client)
    return _client


async def call(
    method: str,
    path: str,
    params: dict[str, Any] | None = None,
    init: ClientRequestInit | None = None,
) -> Any:
    return await _client.call(method, path, params, init)
