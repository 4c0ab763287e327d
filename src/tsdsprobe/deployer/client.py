"""REST client for the document store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from tsdsprobe.core.config import StoreConfig

logger = logging.getLogger(__name__)


@dataclass
class StoreResult:
    """Outcome of a single call to the store."""

    operation: str
    ok: bool
    status_code: Optional[int] = None
    body: Any = None
    error: Optional[str] = None

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    def detail(self) -> str:
        """Human-readable failure description."""
        if self.ok:
            return "ok"
        if self.status_code is None:
            return self.error or "request failed"
        return f"HTTP {self.status_code}: {self.error or 'no detail'}"


def _error_detail(body: Any, fallback: str) -> str:
    """Extract ``type: reason`` from the store's error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            err_type = error.get("type")
            reason = error.get("reason")
            if err_type and reason:
                return f"{err_type}: {reason}"
            if reason:
                return str(reason)
        elif isinstance(error, str):
            return error
    return fallback[:500]


class StoreClient:
    """Thin client over the store's REST API.

    Every operation returns a :class:`StoreResult`; nothing raises on HTTP or
    transport failures. Supports the context manager protocol:

        with StoreClient(config) as client:
            client.check_connection()
    """

    def __init__(self, config: Optional[StoreConfig] = None) -> None:
        self.config = config or StoreConfig()
        self.url = self.config.url.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if self.config.username and self.config.password:
            self.session.auth = (self.config.username, self.config.password)
        self.session.verify = self.config.verify_certs

    def __enter__(self) -> "StoreClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> StoreResult:
        """Make a request to the store."""
        url = f"{self.url}{path}"
        kwargs.setdefault("timeout", self.config.timeout)
        logger.debug(f"{operation}: {method} {url}")
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"{operation} failed: {e}")
            return StoreResult(operation=operation, ok=False, error=str(e))

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.ok:
            return StoreResult(
                operation=operation,
                ok=True,
                status_code=response.status_code,
                body=body,
            )

        error = _error_detail(body, response.text)
        if response.status_code != 404:
            logger.warning(f"{operation} returned HTTP {response.status_code}: {error}")
        return StoreResult(
            operation=operation,
            ok=False,
            status_code=response.status_code,
            body=body,
            error=error,
        )

    # -------------------------------------------------------------------------
    # Cluster
    # -------------------------------------------------------------------------

    def info(self) -> StoreResult:
        return self._request("info", "GET", "/")

    def check_connection(self) -> bool:
        """Check if the store is reachable."""
        return self.info().ok

    # -------------------------------------------------------------------------
    # Templates and datastreams
    # -------------------------------------------------------------------------

    def put_component_template(self, name: str, body: dict[str, Any]) -> StoreResult:
        return self._request(
            "put_component_template", "PUT", f"/_component_template/{name}", json=body
        )

    def get_component_template(self, name: str) -> StoreResult:
        return self._request("get_component_template", "GET", f"/_component_template/{name}")

    def delete_component_template(self, name: str) -> StoreResult:
        return self._request(
            "delete_component_template", "DELETE", f"/_component_template/{name}"
        )

    def put_index_template(self, name: str, body: dict[str, Any]) -> StoreResult:
        return self._request("put_index_template", "PUT", f"/_index_template/{name}", json=body)

    def get_index_template(self, name: str) -> StoreResult:
        return self._request("get_index_template", "GET", f"/_index_template/{name}")

    def delete_index_template(self, name: str) -> StoreResult:
        return self._request("delete_index_template", "DELETE", f"/_index_template/{name}")

    def create_data_stream(self, name: str) -> StoreResult:
        return self._request("create_data_stream", "PUT", f"/_data_stream/{name}")

    def get_data_stream(self, name: str) -> StoreResult:
        return self._request("get_data_stream", "GET", f"/_data_stream/{name}")

    def delete_data_stream(self, name: str) -> StoreResult:
        return self._request("delete_data_stream", "DELETE", f"/_data_stream/{name}")

    def get_settings(self, target: str) -> StoreResult:
        """Settings of every index behind ``target``, keyed by index name."""
        return self._request("get_settings", "GET", f"/{target}/_settings")

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def index_document(self, target: str, source: dict[str, Any]) -> StoreResult:
        # Datastreams only accept op_type=create, which POST /_doc implies
        return self._request("index_document", "POST", f"/{target}/_doc", json=source)

    def refresh(self, target: str) -> StoreResult:
        return self._request("refresh", "POST", f"/{target}/_refresh")

    def search(self, target: str, body: dict[str, Any]) -> StoreResult:
        return self._request("search", "POST", f"/{target}/_search", json=body)
