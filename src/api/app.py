"""FastAPI application factory for the task parser REST API."""

from fastapi import APIRouter, FastAPI

from api.task_routes import register_task_routes


def create_app(parser) -> FastAPI:
    """Build and return a FastAPI app wired to the given TaskParser."""
    app = FastAPI(title="todoseq-parser", docs_url="/api/docs", openapi_url="/api/openapi.json")

    api = APIRouter(prefix="/api")
    register_task_routes(api, parser)
    app.include_router(api)

    return app
