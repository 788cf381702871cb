"""Source code proxy for the code host."""

import logging

import httpx
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from cqd.api.deps import HttpClientDep, SettingsDep, require_params
from cqd.exceptions import InvalidRequestError, UpstreamError
from cqd.utils.github import to_raw_url

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/fetch-code", response_class=PlainTextResponse)
async def fetch_code(settings: SettingsDep, client: HttpClientDep, url: str | None = None):
    """Fetch a file's raw text through the server to avoid browser CORS limits."""
    params = require_params(url=url)
    try:
        raw_url = to_raw_url(params["url"], settings.allowed_code_hosts)
    except ValueError as exc:
        raise InvalidRequestError(str(exc)) from exc

    try:
        response = await client.get(raw_url)
    except httpx.HTTPError as exc:
        raise UpstreamError("Failed to fetch source code.", details=str(exc)) from exc
    if not response.is_success:
        raise UpstreamError(
            "Failed to fetch source code.",
            details=f"GitHub returned status: {response.status_code} {response.reason_phrase}",
        )
    logger.debug("Fetched %d bytes from %s", len(response.content), raw_url)
    return PlainTextResponse(response.text)
