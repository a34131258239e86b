# landval/clients/valuation_api.py
"""
Async client for the upstream Valuation API.

Single place that knows the upstream envelope ({"success": ..., "valuation": ...})
and how HTTP failures are classified. Reads retry with backoff; creates never
retry because a retried POST could start a second valuation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from landval.clients.errors import (
    ValuationApiError,
    ValuationApiNonRetryableError,
    ValuationApiRetryableError,
    ValuationNotFoundError,
)
from landval.core.config import settings
from landval.schemas.valuation import PropertyForm, ValuationResource

logger = logging.getLogger("landval.clients.valuation_api")


def _backoff_seconds(attempt: int) -> float:
    return min(2.0, 0.25 * (2 ** attempt))


def _upstream_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase


class ValuationApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.VALUATION_API_BASE_URL).rstrip("/")
        self.max_retries = settings.VALUATION_API_MAX_RETRIES if max_retries is None else max_retries
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds or settings.VALUATION_API_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ValuationApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ---- operations ----

    async def create_valuation(self, form: PropertyForm) -> str:
        body = await self._request("POST", "/api/valuations", json=form.to_upstream(), retry=False)
        valuation_id = body.get("valuationId") or body.get("sessionId")
        if valuation_id is None:
            raise ValuationApiNonRetryableError("Upstream response missing valuationId")
        logger.info("valuation_api.created", extra={"valuation_id": str(valuation_id)})
        return str(valuation_id)

    async def get_valuation(self, valuation_id: str) -> ValuationResource:
        body = await self._request("GET", f"/api/valuations/{valuation_id}")
        return self._parse_resource(body.get("valuation"))

    async def list_valuations(self) -> list[ValuationResource]:
        body = await self._request("GET", "/api/valuations")
        items = body.get("valuations") or []
        return [self._parse_resource(item) for item in items]

    # ---- internals ----

    @staticmethod
    def _parse_resource(raw: Any) -> ValuationResource:
        if not isinstance(raw, dict):
            raise ValuationApiNonRetryableError("Upstream response missing valuation record")
        try:
            return ValuationResource.model_validate(raw)
        except ValidationError as e:
            raise ValuationApiNonRetryableError(f"Malformed valuation record: {e.error_count()} errors") from e

    async def _request(self, method: str, path: str, *, json: Any = None, retry: bool = True) -> dict[str, Any]:
        attempts = (self.max_retries + 1) if retry else 1
        last_err: ValuationApiError | None = None
        start = time.monotonic()

        for attempt in range(attempts):
            try:
                body = await self._send_once(method, path, json=json)
                logger.debug(
                    "valuation_api.call",
                    extra={
                        "method": method,
                        "path": path,
                        "retries": attempt,
                        "latency_ms": int((time.monotonic() - start) * 1000),
                        "ok": True,
                    },
                )
                return body
            except ValuationApiRetryableError as e:
                last_err = e
                if attempt + 1 >= attempts:
                    break
                await asyncio.sleep(_backoff_seconds(attempt))
            except ValuationApiNonRetryableError as e:
                logger.warning(
                    "valuation_api.rejected",
                    extra={"method": method, "path": path, "status_code": e.status_code, "error": e.message},
                )
                raise

        logger.warning(
            "valuation_api.failed",
            extra={
                "method": method,
                "path": path,
                "retries": attempts - 1,
                "latency_ms": int((time.monotonic() - start) * 1000),
                "error_type": type(last_err).__name__ if last_err else "ValuationApiError",
            },
        )
        raise last_err if last_err else ValuationApiRetryableError("Valuation API failed after retries")

    async def _send_once(self, method: str, path: str, *, json: Any = None) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise ValuationApiRetryableError(f"Valuation API timed out: {e}") from e
        except httpx.TransportError as e:
            raise ValuationApiRetryableError(f"Valuation API transport error: {e}") from e

        if resp.status_code == 404:
            raise ValuationNotFoundError(_upstream_message(resp), status_code=404)
        if resp.status_code == 429 or resp.status_code >= 500:
            raise ValuationApiRetryableError(_upstream_message(resp), status_code=resp.status_code)
        if resp.status_code >= 400:
            raise ValuationApiNonRetryableError(_upstream_message(resp), status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as e:
            raise ValuationApiNonRetryableError("Valuation API returned non-JSON body", status_code=resp.status_code) from e
        if not isinstance(body, dict):
            raise ValuationApiNonRetryableError("Valuation API returned unexpected body", status_code=resp.status_code)
        if body.get("success") is False:
            raise ValuationApiNonRetryableError(str(body.get("message") or "Valuation API reported failure"), status_code=resp.status_code)
        return body
