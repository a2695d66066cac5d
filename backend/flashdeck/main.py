import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from flashdeck.api.media import MediaFiles
from flashdeck.api.routes import catalog, decks, receipts
from flashdeck.core.config import Settings, settings as default_settings
from flashdeck.core.log import configure_logging
from flashdeck.services.generator import DeckGenerator
from flashdeck.services.iap import ReceiptValidator
from flashdeck.storage.decks import DECKS_DIRNAME

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    generator: Optional[DeckGenerator] = None,
    validator: Optional[ReceiptValidator] = None,
) -> FastAPI:
    settings = settings or default_settings

    storage_path = Path(settings.STORAGE_PATH)
    storage_path.mkdir(parents=True, exist_ok=True)

    generator = generator or DeckGenerator.from_settings(settings)
    validator = validator or ReceiptValidator.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Storage path: %s", storage_path)
        logger.info("Storage base URL: %s", settings.STORAGE_BASE_URL)
        yield
        generator.shutdown(wait=False)

    app = FastAPI(title="Flashdeck API", lifespan=lifespan)
    app.state.generator = generator
    app.state.validator = validator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(catalog.router, prefix="/api")
    app.include_router(decks.router, prefix="/api")
    app.include_router(receipts.router, prefix="/api")

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.mount("/media", MediaFiles(directory=storage_path, hidden=[DECKS_DIRNAME]), name="media")

    return app


app = create_app()


def run() -> None:
    configure_logging(default_settings.LOG_LEVEL)
    logger.info("Starting server on %s:%s", default_settings.HOST, default_settings.PORT)
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
