"""HTTP client for the dashboard API."""

from typing import Any

import httpx


class ApiError(Exception):
    """An API call failed; the message is the most specific detail the server gave."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("details") or body.get("error")
        if message:
            return str(message)
    return f"API request failed with status {response.status_code}"


class DashboardApi:
    """Thin wrapper over the ``/api`` endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/api",
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DashboardApi":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, path: str, **params: str) -> httpx.Response:
        try:
            response = self._client.get(path, params=params or None)
        except httpx.HTTPError as exc:
            raise ApiError(f"Could not reach the API: {exc}") from exc
        if response.is_error:
            raise ApiError(_error_message(response), status_code=response.status_code)
        return response

    def config(self) -> dict[str, Any]:
        return self._get("/config").json()

    def languages(self) -> list[str]:
        return self._get("/languages").json()

    def product_areas(self, language: str) -> list[dict[str, Any]]:
        return self._get("/product-areas", language=language).json()

    def region_tags(self, language: str, product_name: str) -> list[dict[str, Any]]:
        return self._get("/region-tags", language=language, product_name=product_name).json()

    def details(self, language: str, product_name: str, region_tag: str) -> dict[str, Any]:
        return self._get(
            "/details", language=language, product_name=product_name, region_tag=region_tag
        ).json()

    def fetch_code(self, url: str) -> str:
        return self._get("/fetch-code", url=url).text
