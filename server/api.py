"""FastAPI server exposing look generation endpoints for deployment."""

from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from agents.look_orchestrator import LookGenerationError
from lookbook_app.app import LookbookApp
from lookbook_app.logging_config import configure_logging, get_logger
from models.profile import StyleProfile
from tools.catalog_provider import CatalogUnavailableError

configure_logging()

LOGGER = get_logger(__name__)
app = FastAPI(title="Lookbook Composer", version="0.1.0")


@lru_cache(maxsize=1)
def get_lookbook_app() -> LookbookApp:
    """Build the app lazily so importing the module never reaches Gemini."""

    return LookbookApp()


@app.exception_handler(LookGenerationError)
async def look_generation_failed(_: Request, exc: LookGenerationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"status": "error", "message": str(exc)})


@app.exception_handler(CatalogUnavailableError)
async def catalog_unavailable(_: Request, exc: CatalogUnavailableError) -> JSONResponse:
    LOGGER.error("Catalog unavailable", extra={"error": str(exc)})
    return JSONResponse(status_code=503, content={"status": "error", "message": str(exc)})


@app.get("/healthz")
async def healthcheck(lookbook: LookbookApp = Depends(get_lookbook_app)) -> dict:
    """Lightweight readiness probe."""

    return {
        "status": "ok",
        "service": "lookbook-composer",
        "environment": lookbook.config.environment or "local",
        "ranker_model": lookbook.config.ranker_model if lookbook.config.ranker_enabled else None,
        "render_model": lookbook.config.render_model if lookbook.config.render_enabled else None,
    }


@app.post("/looks")
def generate_looks(profile: StyleProfile, lookbook: LookbookApp = Depends(get_lookbook_app)) -> dict:
    """Generate the primary look and its alternatives for a style profile."""

    look = lookbook.generate_look(profile)
    return {"status": "ok", **look.to_dict()}


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=int("8080"), reload=False)
