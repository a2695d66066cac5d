import logging
from typing import Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from flashdeck.schemas.decks import GenerateRequest
from flashdeck.schemas.receipts import DownloadRequest
from flashdeck.services.generator import DeckGenerator
from flashdeck.services.iap import ReceiptValidator

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_generator(request: Request) -> DeckGenerator:
    return request.app.state.generator


def get_validator(request: Request) -> ReceiptValidator:
    return request.app.state.validator


async def _optional_body(request: Request, model: Type[ModelT]) -> ModelT:
    """Missing or undecodable bodies count as an empty request."""
    body = await request.body()
    if not body.strip():
        return model()

    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        logger.info("Ignoring malformed %s body: %s", request.url.path, exc.errors()[0]["msg"])
        return model()


async def get_generate_request(request: Request) -> GenerateRequest:
    return await _optional_body(request, GenerateRequest)


async def get_download_request(request: Request) -> DownloadRequest:
    return await _optional_body(request, DownloadRequest)
