"""
HTTP client for a Conductor-compatible task queue server.

Endpoints:
- GET  {server}/tasks/poll/{taskType}?workerid=...&domain=...  -> Task JSON, or 204 when idle
- POST {server}/tasks                                          -> acknowledgement text
- POST {server}/token                                          -> {"token": ...} for key credentials
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from taskpoller.core.constants import DEFAULT_REQUEST_TIMEOUT
from taskpoller.core.errors import QueueAuthError, QueueServiceError

from .base import Task, TaskQueueService, TaskResult

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Authorization"


def _describe(error: Exception) -> str:
    # Timeouts carry no message of their own
    return str(error) or type(error).__name__


class ConductorTaskClient(TaskQueueService):
    """
    Queue service backed by the Conductor task REST API.

    The client owns its aiohttp session unless one is passed in. When key
    credentials are configured, a token is fetched lazily and dropped again
    on any 401 so the next call re-authenticates.
    """

    def __init__(
        self,
        server_url: str,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize client.

        Args:
            server_url: API root, e.g. http://localhost:8080/api
            key_id: Optional access key id
            key_secret: Optional access key secret
            request_timeout: Total timeout per request (seconds)
            session: Existing session to use instead of creating one
        """
        self.server_url = server_url.rstrip("/")
        self.key_id = key_id
        self.key_secret = key_secret
        self.request_timeout = request_timeout
        self._session = session
        self._owns_session = session is None
        self._token: Optional[str] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.request_timeout))
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _authenticate(self) -> str:
        session = self._get_session()
        payload = {"keyId": self.key_id, "keySecret": self.key_secret}
        try:
            async with session.post(f"{self.server_url}/token", json=payload) as resp:
                body = await resp.text()
                if resp.status != 200:
                    raise QueueAuthError("authenticate", resp.status, body)
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise QueueServiceError("authenticate", reason=_describe(e)) from e

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise QueueAuthError("authenticate", reason="response did not contain a token")
        logger.debug("Obtained queue service token")
        return token

    async def _headers(self) -> Dict[str, str]:
        if not (self.key_id and self.key_secret):
            return {}
        if self._token is None:
            self._token = await self._authenticate()
        return {AUTH_HEADER: self._token}

    def _check(self, operation: str, status: int, body: str) -> None:
        if status == 401:
            self._token = None
            raise QueueAuthError(operation, status, body)
        if status >= 400:
            raise QueueServiceError(operation, status, body)

    async def poll(self, task_type: str, worker_id: str, domain: Optional[str] = None) -> Optional[Task]:
        params = {"workerid": worker_id}
        if domain:
            params["domain"] = domain

        session = self._get_session()
        headers = await self._headers()
        try:
            async with session.get(
                f"{self.server_url}/tasks/poll/{task_type}", params=params, headers=headers
            ) as resp:
                body = await resp.text()
                self._check("poll", resp.status, body)
                if resp.status == 204 or not body.strip():
                    return None
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise QueueServiceError("poll", reason=_describe(e)) from e

        if not isinstance(data, dict):
            return None
        return Task.from_wire(data)

    async def update_task(self, result: TaskResult) -> Any:
        session = self._get_session()
        headers = await self._headers()
        try:
            async with session.post(f"{self.server_url}/tasks", json=result.to_wire(), headers=headers) as resp:
                body = await resp.text()
                self._check("update", resp.status, body)
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise QueueServiceError("update", reason=_describe(e)) from e
