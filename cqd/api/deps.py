"""Shared route dependencies and parameter checks."""

from collections.abc import AsyncGenerator
from typing import Annotated

import httpx
from fastapi import Depends

from cqd.config import Settings, get_settings
from cqd.database import Warehouse, get_warehouse
from cqd.exceptions import MissingParameterError

SettingsDep = Annotated[Settings, Depends(get_settings)]
WarehouseDep = Annotated[Warehouse, Depends(get_warehouse)]


async def get_http_client(settings: SettingsDep) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Dependency for outbound HTTP requests to the code host."""
    async with httpx.AsyncClient(timeout=settings.code_fetch_timeout, follow_redirects=True) as client:
        yield client


HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def require_params(**values: str | None) -> dict[str, str]:
    """Return stripped values, raising MissingParameterError naming every blank one."""
    cleaned = {name: (value or "").strip() for name, value in values.items()}
    missing = [name for name, value in cleaned.items() if not value]
    if missing:
        raise MissingParameterError(missing)
    return cleaned
