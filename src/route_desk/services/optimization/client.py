"""HTTP client for the route optimization service."""

from __future__ import annotations

import logging
import time
from typing import Any, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from ...config import settings
from ...errors import LogicalNoSolution, TransportError
from ...models.domain import LockEntry, OptimizationParams, Solution, Stop
from ...schemas.solution import RouteModificationRequest, RouteSolutionModel, StopModel, params_to_query

logger = logging.getLogger(__name__)

_STOP_LIST = TypeAdapter(list[StopModel])


class OptimizationClient:
    """Single-shot calls to the optimizer: no retries, every failure is raised.

    ``TransportError`` covers anything that prevents reading a well-formed
    answer; ``LogicalNoSolution`` means the service answered but found no routes.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url or settings.optimizer_base_url
        if not self.base_url and client is None:
            raise ValueError("Optimization service base URL is not configured.")
        self.timeout = timeout if timeout is not None else settings.optimizer_timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is not None:
            return self._client
        return httpx.Client(base_url=self.base_url, timeout=httpx.Timeout(self.timeout, connect=10.0))

    def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        client = self._get_client()
        started = time.perf_counter()
        try:
            response = client.request(method, path, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning(f"{method} {path} failed with HTTP {status_code}")
            raise TransportError(f"Optimization service returned HTTP {status_code}.", status_code=status_code) from exc
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {path} failed: {exc}")
            raise TransportError(f"Optimization service is not reachable: {exc}") from exc
        except ValueError as exc:
            logger.warning(f"{method} {path} returned a body that is not JSON")
            raise TransportError("Optimization service returned an unreadable response.") from exc
        finally:
            if client is not self._client:
                client.close()
        logger.info(f"{method} {path} completed in {time.perf_counter() - started:.2f}s")
        return data

    def _parse_solution(self, data: Any) -> Solution:
        if data is None:
            raise LogicalNoSolution("The optimization service found no solution.")
        try:
            model = RouteSolutionModel.model_validate(data)
        except ValidationError as exc:
            raise TransportError(f"Optimization service returned a malformed solution: {exc}") from exc
        if not model.bus_routes:
            raise LogicalNoSolution("The optimization service found no solution.")
        return model.to_domain()

    def fetch_all_stops(self, db_name: str) -> list[Stop]:
        data = self._send("GET", "/api/all-stops", params={"dbName": db_name})
        try:
            stops = _STOP_LIST.validate_python(data if data is not None else [])
        except ValidationError as exc:
            raise TransportError(f"Optimization service returned malformed stops: {exc}") from exc
        logger.info(f"Loaded {len(stops)} stops from '{db_name}'")
        return [stop.to_domain() for stop in stops]

    def request_optimize(self, params: OptimizationParams) -> Solution:
        data = self._send("GET", "/api/optimize-route", params=params_to_query(params))
        return self._parse_solution(data)

    def request_reoptimize(self, overrides: Sequence[LockEntry], params: OptimizationParams) -> Solution:
        body = RouteModificationRequest.build(list(overrides), params)
        logger.info(f"Re-optimizing with {len(body.modifications)} locked routes")
        data = self._send("POST", "/api/re-optimize", json=body.model_dump(by_alias=True))
        return self._parse_solution(data)
