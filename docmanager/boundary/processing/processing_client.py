"""
HTTP client for the external document-processing backend.

POSTs an ingestion payload to the backend's trigger endpoint and maps
every transport or protocol failure onto ProcessingFailure, so the job
manager only ever sees a response or a classified failure.

Dependencies: httpx, docmanager.configs, docmanager.core
System role: ProcessingClient implementation used by the job manager
"""

import logging
from typing import Any

import httpx

from docmanager.configs.processing import ProcessingSettings
from docmanager.core.exceptions import ProcessingFailure

logger = logging.getLogger(__name__)


class HttpProcessingClient:
    """
    Processing backend client over a shared httpx.AsyncClient.

    Responses must be 2xx with a JSON body (an empty body is treated as {}).
    """

    def __init__(
        self,
        base_url: str,
        trigger_path: str = "/api/ingestion/trigger",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize processing client.

        Args:
            base_url: Processing backend base URL
            trigger_path: Path that accepts ingestion payloads
            timeout: Default per-call timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.trigger_path = trigger_path
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: ProcessingSettings) -> "HttpProcessingClient":
        return cls(
            base_url=settings.backend_url,
            trigger_path=settings.trigger_path,
            timeout=settings.timeout_seconds,
        )

    async def submit(self, payload: dict[str, Any], timeout: float | None = None) -> Any:
        """
        Submit one ingestion payload.

        Args:
            payload: Request body built from the job
            timeout: Overrides the default timeout for this call

        Returns:
            Decoded JSON response body

        Raises:
            ProcessingFailure: timeout, connection error, non-2xx, or non-JSON body
        """
        job_id = payload.get("job_id")
        effective_timeout = timeout if timeout is not None else self.timeout

        try:
            response = await self._client.post(
                self.trigger_path,
                json=payload,
                timeout=effective_timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(
                "Processing backend timed out",
                extra={"job_id": job_id, "timeout_seconds": effective_timeout},
            )
            raise ProcessingFailure(
                f"Processing backend timed out after {effective_timeout:g} seconds",
                ProcessingFailure.TIMEOUT,
            ) from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(
                "Processing backend returned error status",
                extra={"job_id": job_id, "status_code": status_code},
            )
            raise ProcessingFailure(
                f"Processing backend returned HTTP {status_code}: {e.response.text[:200]}",
                ProcessingFailure.HTTP_STATUS,
                status_code=status_code,
            ) from e
        except httpx.RequestError as e:
            logger.warning(
                "Processing backend unreachable",
                extra={"job_id": job_id, "error_type": type(e).__name__},
            )
            raise ProcessingFailure(
                f"Processing backend request failed: {type(e).__name__}: {e}",
                ProcessingFailure.CONNECTION,
            ) from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ProcessingFailure(
                "Processing backend returned a non-JSON response",
                ProcessingFailure.INVALID_RESPONSE,
                status_code=response.status_code,
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
