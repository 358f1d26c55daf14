"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from meal_nutrition.api.models import MealAnalysisRequest, NutrientProfileResponse
from meal_nutrition.app_logging import configure_logging
from meal_nutrition.config import missing_credentials
from meal_nutrition.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/nutrition", response_model=NutrientProfileResponse)
    async def analyze_nutrition(
        request: Request,
        payload: MealAnalysisRequest | None = None,
        force_micros: bool = Query(default=False, alias="forceMicros"),
    ) -> NutrientProfileResponse | JSONResponse:
        """Return the nutrient profile for a meal description and photo."""
        state_container: AppContainer = request.app.state.container
        body = payload or MealAnalysisRequest()
        missing = missing_credentials(state_container.settings)
        if missing:
            return JSONResponse(
                status_code=500, content={"error": f"Missing {', '.join(missing)}"}
            )
        try:
            profile = await state_container.meal_analysis_service.analyze(
                body.description or "",
                body.photo_url,
                force_micros=force_micros,
            )
        except Exception as exc:
            logger.exception("Meal analysis failed")
            return JSONResponse(
                status_code=500,
                content={"error": "Server error", "details": str(exc) or "unknown"},
            )
        return NutrientProfileResponse(**profile.as_response())

    return app
