"""FastAPI server exposing Today's Pick endpoints for deployment."""

from __future__ import annotations

import contextlib
import datetime as dt
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from chronowear_app.app import ChronoWearApp
from chronowear_app.errors import PickNotFoundError, WeatherUnavailableError
from models.daily_pick import DailyPick, hero_image_url


class TodaysPickRequest(BaseModel):
    """Request payload for fetching (or regenerating) today's pick."""

    user_id: str = Field(..., min_length=1, description="Unique user identifier")
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    date: dt.date | None = None
    force_refresh: bool = False


class PickFlagRequest(BaseModel):
    """Request payload for flag updates on an existing pick."""

    user_id: str = Field(..., min_length=1)
    date: dt.date | None = None


def _render(pick: DailyPick) -> dict:
    payload = pick.to_dict()
    payload["hero_image_url"] = hero_image_url(pick)
    return payload


def create_app(chronowear: ChronoWearApp | None = None) -> FastAPI:
    """Build the ASGI app; the service is created on startup when not injected."""

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.chronowear is None:
            app.state.chronowear = ChronoWearApp()
        yield
        await app.state.chronowear.shutdown()

    app = FastAPI(title="ChronoWear", version="0.1.0", lifespan=lifespan)
    app.state.chronowear = chronowear

    def service(request: Request) -> ChronoWearApp:
        return request.app.state.chronowear

    @app.get("/healthz")
    async def healthcheck(request: Request) -> dict:
        """Lightweight readiness probe."""

        config = service(request).config
        return {
            "status": "ok",
            "service": "chronowear",
            "environment": config.environment or "local",
            "model": config.model,
        }

    @app.post("/todays-pick")
    async def todays_pick(payload: TodaysPickRequest, request: Request) -> dict:
        """Serve the cached pick, regenerating it when stale or forced."""

        try:
            pick = await service(request).todays_pick(
                user_id=payload.user_id,
                latitude=payload.latitude,
                longitude=payload.longitude,
                date=payload.date,
                force_refresh=payload.force_refresh,
            )
        except WeatherUnavailableError as exc:
            raise HTTPException(status_code=503, detail=f"weather unavailable: {exc}") from exc
        return _render(pick)

    @app.post("/todays-pick/like")
    async def toggle_like(payload: PickFlagRequest, request: Request) -> dict:
        try:
            pick = service(request).manager.toggle_like(payload.user_id, payload.date)
        except PickNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _render(pick)

    @app.post("/todays-pick/logged")
    async def mark_logged(payload: PickFlagRequest, request: Request) -> dict:
        try:
            pick = service(request).manager.mark_logged(payload.user_id, payload.date)
        except PickNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _render(pick)

    return app


app = create_app()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=8080, reload=False)
