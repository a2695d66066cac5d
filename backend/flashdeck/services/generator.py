"""
Deck registry and background media generation.

DeckGenerator keeps every known deck and the most recent generation status
per deck in memory, guarded by one lock. Media generation runs on a thread
pool; runs for the same deck are serialised by a per-deck lock so two runs
never fill the same cards concurrently.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set

from flashdeck.core.config import Settings
from flashdeck.core.enums import (
    DEFAULT_PRICE,
    FREE_PRICE,
    AssetState,
    GenerationState,
    MediaStatus,
)
from flashdeck.core.errors import DeckNotFoundError, StatusNotFoundError, UpstreamError
from flashdeck.schemas.decks import (
    AssetOutcome,
    Card,
    CardInput,
    CardOutcome,
    Catalog,
    CatalogItem,
    Deck,
    DeckPreview,
    GenerateStatus,
    Media,
)
from flashdeck.services.media.base import ImageGenerator, SpeechSynthesizer
from flashdeck.services.media.elevenlabs import ElevenLabsClient
from flashdeck.services.media.imagen import ImagenClient
from flashdeck.storage.decks import DECKS_DIRNAME, DeckRepository
from flashdeck.storage.local import LocalStorage, build_media_filename

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PROMPT_TEMPLATE = (
    "Simple, clean illustration for vocabulary flashcard showing '{word}'. "
    "Minimalist, colorful icon-style. No text, no letters. White background."
)
PREVIEW_CARD_COUNT = 5


def build_image_prompt(template: str, card: Card) -> str:
    """Fills {word}, {front}, {back} and {reading}; {word} is the translation."""
    return (
        template
        .replace("{word}", card.back_text)
        .replace("{front}", card.front_text)
        .replace("{back}", card.back_text)
        .replace("{reading}", card.reading or "")
    )


def _with_version(url: Optional[str], suffix: str) -> Optional[str]:
    return url + suffix if url else url


class DeckGenerator:
    def __init__(
        self,
        storage: LocalStorage,
        repository: DeckRepository,
        speech_client: Optional[SpeechSynthesizer] = None,
        image_client: Optional[ImageGenerator] = None,
        free_decks: Iterable[str] = (),
        product_prefix: str = "com.example.duolingocards.deck.",
        max_workers: int = 4,
    ):
        self.storage = storage
        self.repository = repository
        self.speech_client = speech_client
        self.image_client = image_client
        self.free_decks = frozenset(free_decks)
        self.product_prefix = product_prefix

        self._lock = threading.Lock()
        self._decks: Dict[str, Deck] = repository.load_all()
        self._statuses: Dict[str, GenerateStatus] = {}
        self._deck_locks: Dict[str, threading.Lock] = {}
        # deck_id -> card ids for the run waiting on that deck, at most one each
        self._queued: Dict[str, Optional[Set[str]]] = {}
        self._pending: Set[Future] = set()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="deck-media",
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeckGenerator":
        speech_client = None
        if settings.ELEVENLABS_API_KEY:
            speech_client = ElevenLabsClient(
                settings.ELEVENLABS_API_KEY,
                voice_id=settings.ELEVENLABS_VOICE_ID,
                timeout=settings.MEDIA_TIMEOUT_SECONDS,
            )

        image_client = None
        if settings.GOOGLE_API_KEY:
            image_client = ImagenClient(
                settings.GOOGLE_API_KEY,
                models=settings.IMAGEN_MODELS,
                timeout=settings.MEDIA_TIMEOUT_SECONDS,
            )

        return cls(
            storage=LocalStorage(settings.STORAGE_PATH, settings.STORAGE_BASE_URL),
            repository=DeckRepository(Path(settings.STORAGE_PATH) / DECKS_DIRNAME),
            speech_client=speech_client,
            image_client=image_client,
            free_decks=settings.FREE_DECKS,
            product_prefix=settings.IAP_PRODUCT_PREFIX,
        )

    # ------------------
    # Catalog and decks
    # ------------------

    def _price_for(self, deck: Deck) -> str:
        if deck.id in self.free_decks:
            return FREE_PRICE
        return deck.price or DEFAULT_PRICE

    def free_deck_ids(self) -> Set[str]:
        """Configured free decks plus decks that mark themselves free."""
        with self._lock:
            marked = {deck.id for deck in self._decks.values() if deck.price == FREE_PRICE}
        return set(self.free_decks) | marked

    def get_catalog(self) -> Catalog:
        with self._lock:
            decks = list(self._decks.values())
            items = []
            for deck in decks:
                price = self._price_for(deck)
                items.append(CatalogItem(
                    id=deck.id,
                    name=deck.name,
                    description=deck.description or "",
                    card_count=len(deck.cards),
                    price=price,
                    iap_product_id=None if price == FREE_PRICE else self.product_prefix + deck.id,
                    languages=[deck.front_language, deck.back_language],
                ))
        return Catalog(decks=items)

    def get_deck_preview(self, deck_id: str) -> DeckPreview:
        deck = self.get_deck(deck_id)
        return DeckPreview(
            id=deck.id,
            name=deck.name,
            description=deck.description or "",
            front_language=deck.front_language,
            back_language=deck.back_language,
            total_cards=len(deck.cards),
            preview_cards=deck.cards[:PREVIEW_CARD_COUNT],
        )

    def get_deck(self, deck_id: str) -> Deck:
        """Returns a copy whose media URLs carry ?v={version} for cache busting."""
        with self._lock:
            deck = self._decks.get(deck_id)
            if deck is None:
                raise DeckNotFoundError(deck_id)
            return self._versioned_copy(deck)

    @staticmethod
    def _versioned_copy(deck: Deck) -> Deck:
        copy = deck.model_copy(deep=True)
        if not copy.version:
            return copy

        suffix = f"?v={copy.version}"
        for card in copy.cards:
            if card.media is None:
                continue
            card.media.image = _with_version(card.media.image, suffix)
            card.media.audio_front = _with_version(card.media.audio_front, suffix)
            card.media.audio_back = _with_version(card.media.audio_back, suffix)
        return copy

    def create_deck(self, deck: Deck) -> Deck:
        stored = deck.model_copy(deep=True)
        with self._lock:
            self._decks[stored.id] = stored
            self.repository.save(stored)
        logger.info("Deck %s saved (%d cards)", stored.id, len(stored.cards))
        return stored

    # ------------------
    # Generation
    # ------------------

    def start_generation(
        self,
        deck_id: str,
        cards: Optional[List[CardInput]] = None,
    ) -> GenerateStatus:
        with self._lock:
            deck = self._decks.get(deck_id)
            if deck is None:
                raise DeckNotFoundError(deck_id)

            card_ids = None
            total = len(deck.cards)
            if cards:
                card_ids = {c.id for c in cards}
                total = sum(1 for c in deck.cards if c.id in card_ids)

            status = GenerateStatus(
                deck_id=deck_id,
                status=GenerationState.generating,
                progress=0,
                total_cards=total,
            )
            self._statuses[deck_id] = status
            self._deck_locks.setdefault(deck_id, threading.Lock())
            snapshot = status.model_copy(deep=True)

            already_queued = deck_id in self._queued
            self._queued[deck_id] = card_ids
            if already_queued:
                # the waiting run reads the latest request when it starts
                return snapshot

        try:
            future = self._executor.submit(self._run_generation, deck_id)
        except RuntimeError:
            with self._lock:
                self._queued.pop(deck_id, None)
            raise
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

        return snapshot

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def get_status(self, deck_id: str) -> GenerateStatus:
        with self._lock:
            status = self._statuses.get(deck_id)
            if status is None:
                raise StatusNotFoundError(deck_id)
            return status.model_copy(deep=True)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Blocks until queued generation runs finish. False on timeout."""
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _run_generation(self, deck_id: str) -> None:
        with self._deck_locks[deck_id]:
            with self._lock:
                card_ids = self._queued.pop(deck_id)
                status = self._statuses[deck_id]
            try:
                self._fill_deck(deck_id, status, card_ids)
            except Exception as exc:
                logger.exception("Media generation failed for deck %s", deck_id)
                with self._lock:
                    status.status = GenerationState.error
                    status.error = str(exc)

    def _fill_deck(
        self,
        deck_id: str,
        status: GenerateStatus,
        card_ids: Optional[Set[str]],
    ) -> None:
        with self._lock:
            deck = self._decks[deck_id]
            # 1-based positions keep file names stable when only a subset is filled
            selected = [
                (position, card)
                for position, card in enumerate(deck.cards, start=1)
                if card_ids is None or card.id in card_ids
            ]

        logger.info("Starting media generation for deck %s (%d cards)", deck_id, len(selected))
        logger.info(
            "TTS client: %s, Image client: %s",
            self.speech_client is not None,
            self.image_client is not None,
        )

        for done, (position, card) in enumerate(selected, start=1):
            logger.info("Processing card %d/%d: %s", done, len(selected), card.front_text)
            outcome = self.fill_card(deck, position, card)

            with self._lock:
                self._apply_outcome(card, outcome)
                status.outcomes.append(outcome)
                status.progress = done

        with self._lock:
            deck.version = max(int(time.time()), (deck.version or 0) + 1)
            if self._decks.get(deck_id) is deck:
                self.repository.save(deck)
            else:
                logger.warning("Deck %s was replaced during generation, not saving", deck_id)
            status.status = GenerationState.completed
        logger.info("Media generation completed for deck %s (version: %d)", deck_id, deck.version)

    @staticmethod
    def _apply_outcome(card: Card, outcome: CardOutcome) -> None:
        if outcome.audio.url:
            card.media = card.media or Media()
            card.media.audio_front = outcome.audio.url
        if outcome.image.url:
            card.media = card.media or Media()
            card.media.image = outcome.image.url
        # partial media is acceptable, the card still works with its text
        card.media_status = MediaStatus.ready

    def fill_card(self, deck: Deck, index: int, card: Card) -> CardOutcome:
        """
        Produces the audio and image for one card without touching the card.

        Files already present in storage are reused, so re-running a deck
        only calls the vendors for assets that are still missing.
        """
        return CardOutcome(
            card_id=card.id,
            index=index,
            audio=self._fill_audio(deck, index, card),
            image=self._fill_image(deck, index, card),
        )

    def _fill_audio(self, deck: Deck, index: int, card: Card) -> AssetOutcome:
        client = self.speech_client
        if client is None:
            logger.info("  Skipping TTS - no client configured")
            return AssetOutcome(state=AssetState.not_attempted, reason="no speech client configured")

        # audio is named after the reading: "01-konnichiwa-audio.mp3"
        filename = build_media_filename(index, card.reading or card.front_text, "audio", "mp3")
        return self._produce(
            deck.id,
            filename,
            lambda: client.generate_speech(card.front_text, deck.tts_voice_id),
            kind="TTS",
        )

    def _fill_image(self, deck: Deck, index: int, card: Card) -> AssetOutcome:
        client = self.image_client
        if client is None:
            logger.info("  Skipping image - no client configured")
            return AssetOutcome(state=AssetState.not_attempted, reason="no image client configured")

        # images are named after the translation: "01-dobry-den-image.png"
        filename = build_media_filename(index, card.back_text, "image", "png")
        prompt = build_image_prompt(deck.image_prompt_template or DEFAULT_IMAGE_PROMPT_TEMPLATE, card)
        return self._produce(
            deck.id,
            filename,
            lambda: client.generate_image(prompt),
            kind="Image",
        )

    def _produce(
        self,
        deck_id: str,
        filename: str,
        generate: Callable[[], bytes],
        kind: str,
    ) -> AssetOutcome:
        if self.storage.exists(deck_id, filename):
            logger.info("  %s exists, skipping API call: %s", kind, filename)
            return AssetOutcome(
                state=AssetState.skipped_existing,
                url=self.storage.build_url(deck_id, filename),
            )

        logger.info("  Generating %s -> %s", kind, filename)
        try:
            url = self.storage.save(deck_id, filename, generate())
        except (UpstreamError, OSError) as exc:
            logger.warning("  %s error: %s", kind, exc)
            return AssetOutcome(state=AssetState.failed, reason=str(exc))

        logger.info("  %s saved: %s", kind, url)
        return AssetOutcome(state=AssetState.generated, url=url)
