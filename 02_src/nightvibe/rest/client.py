"""Authenticated HTTP client for the NightVibe REST API."""

from typing import Any, Protocol

import httpx

from ..config import DEFAULT_HTTP_TIMEOUT
from ..errors import NotAuthenticatedError, ServerRejectedError, TransportError
from ..logging_config import get_logger
from ..storage import ICredentialStore

logger = get_logger(__name__)


class IApiClient(Protocol):
    """JSON over HTTPS with bearer-token auth."""

    async def request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = True,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Issue a request and return the parsed JSON body."""
        ...

    async def get(self, path: str, **kwargs: Any) -> Any: ...

    async def post(self, path: str, **kwargs: Any) -> Any: ...

    async def put(self, path: str, **kwargs: Any) -> Any: ...

    async def delete(self, path: str, **kwargs: Any) -> Any: ...

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        ...


class ApiClient:
    """httpx-based REST client reading the auth token from the credential store."""

    def __init__(
        self,
        base_url: str,
        store: ICredentialStore,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._store = store
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = True,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Issue a request and return the parsed JSON body.

        Raises:
            NotAuthenticatedError: auth required but no token is stored;
                nothing is sent.
            TransportError: the request never got a response.
            ServerRejectedError: the server answered with status >= 400.
        """
        headers = {}
        if auth:
            token = await self._store.get_token()
            if not token:
                raise NotAuthenticatedError()
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransportError(str(e)) from e

        body = self._parse_body(response)

        if response.status_code >= 400:
            server_message = body.get("message") if isinstance(body, dict) else None
            logger.warning(
                "%s %s rejected with %s: %s",
                method,
                path,
                response.status_code,
                server_message,
            )
            raise ServerRejectedError(response.status_code, server_message)

        return body

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        await self._client.aclose()

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}
