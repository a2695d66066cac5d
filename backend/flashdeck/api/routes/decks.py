import logging

from fastapi import APIRouter, Depends, HTTPException, status

from flashdeck.api.dependencies import (
    get_download_request,
    get_generate_request,
    get_generator,
    get_validator,
)
from flashdeck.core.errors import (
    DeckNotFoundError,
    ReceiptRequiredError,
    StatusNotFoundError,
    UpstreamError,
)
from flashdeck.schemas.decks import Deck, DeckPreview, GenerateRequest, GenerateStatus
from flashdeck.schemas.receipts import DownloadRequest, VerifyRequest
from flashdeck.services.generator import DeckGenerator
from flashdeck.services.iap import ReceiptValidator, is_paid_deck

logger = logging.getLogger(__name__)

router = APIRouter(tags=["decks"])


@router.get("/decks/{deck_id}/preview", response_model=DeckPreview, response_model_exclude_none=True)
def get_deck_preview(deck_id: str, generator: DeckGenerator = Depends(get_generator)):
    try:
        return generator.get_deck_preview(deck_id)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/decks/{deck_id}", response_model=Deck, response_model_exclude_none=True)
def get_deck(deck_id: str, generator: DeckGenerator = Depends(get_generator)):
    try:
        return generator.get_deck(deck_id)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post(
    "/decks/{deck_id}/generate",
    response_model=GenerateStatus,
    response_model_exclude_none=True,
    status_code=status.HTTP_202_ACCEPTED,
)
def generate_deck(
    deck_id: str,
    payload: GenerateRequest = Depends(get_generate_request),
    generator: DeckGenerator = Depends(get_generator),
):
    """
    Starts media generation in the background and returns right away.
    An empty or unreadable body generates every card of the deck.
    """
    cards = payload.cards
    try:
        return generator.start_generation(deck_id, cards)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/decks/{deck_id}/status", response_model=GenerateStatus, response_model_exclude_none=True)
def get_generate_status(deck_id: str, generator: DeckGenerator = Depends(get_generator)):
    try:
        return generator.get_status(deck_id)
    except StatusNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/decks/{deck_id}/download", response_model=Deck, response_model_exclude_none=True)
def download_deck(
    deck_id: str,
    payload: DownloadRequest = Depends(get_download_request),
    generator: DeckGenerator = Depends(get_generator),
    validator: ReceiptValidator = Depends(get_validator),
):
    """
    Full deck for the app. Paid decks need a receipt; free decks don't.
    """
    try:
        deck = generator.get_deck(deck_id)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    free_decks = generator.free_deck_ids()
    if not is_paid_deck(deck_id, free_decks):
        return deck

    verify_request = VerifyRequest(
        platform=payload.platform,
        receipt_data=payload.receipt_data,
        product_id=generator.product_prefix + deck_id,
        deck_id=deck_id,
    )

    try:
        result = validator.validate_purchase_for_deck(verify_request, free_decks)
    except (ReceiptRequiredError, UpstreamError) as exc:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(exc))

    if not result.valid:
        logger.info("Rejected download of %s: %s", deck_id, result.error)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=result.error or "invalid receipt")

    return deck
