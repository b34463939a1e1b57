"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clipgraph import __version__
from clipgraph.api.middleware import clipgraph_error_handler
from clipgraph.api.routes import captions, codecs, commands
from clipgraph.models.errors import ClipgraphError


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="clipgraph",
        description="Compile declarative video compositions into ffmpeg commands",
        version=__version__,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(ClipgraphError, clipgraph_error_handler)

    # Routes
    app.include_router(commands.router)
    app.include_router(captions.router)
    app.include_router(codecs.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
