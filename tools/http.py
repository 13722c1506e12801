"""Shared httpx client handling for the HTTP-backed collaborators."""

from __future__ import annotations

import contextlib
from typing import AsyncIterator

import httpx

USER_AGENT = "chronowear/0.1"


@contextlib.asynccontextmanager
async def http_client(
    client: httpx.AsyncClient | None, timeout_seconds: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one closed on exit."""

    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=timeout_seconds, headers={"User-Agent": USER_AGENT}
    ) as owned:
        yield owned


__all__ = ["USER_AGENT", "http_client"]
