from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from flashdeck.core.enums import AssetState, GenerationState, MediaStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
    )


class Media(CamelModel):
    image: Optional[str] = None
    audio_front: Optional[str] = None
    audio_back: Optional[str] = None
    video: Optional[str] = None


class Card(CamelModel):
    id: str
    front_text: str
    back_text: str
    reading: Optional[str] = None
    priority: int = 0
    media: Optional[Media] = None
    media_status: Optional[MediaStatus] = None


class Deck(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    front_language: str
    back_language: str
    cards: List[Card] = Field(default_factory=list)
    media_base_url: Optional[str] = None

    # media generation settings
    image_prompt_template: Optional[str] = None
    tts_voice_id: Optional[str] = None

    price: Optional[str] = None
    # cache-busting counter for media URLs, bumped after each generation run
    version: Optional[int] = None


class CatalogItem(CamelModel):
    id: str
    name: str
    description: str = ""
    card_count: int
    price: str
    iap_product_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    languages: List[str]


class Catalog(CamelModel):
    decks: List[CatalogItem] = Field(default_factory=list)


class DeckPreview(CamelModel):
    id: str
    name: str
    description: str = ""
    front_language: str
    back_language: str
    total_cards: int
    preview_cards: List[Card]


class CardInput(CamelModel):
    id: str
    front_text: str = ""
    back_text: str = ""
    reading: Optional[str] = None


class GenerateRequest(CamelModel):
    deck_id: Optional[str] = None
    cards: Optional[List[CardInput]] = None


class AssetOutcome(CamelModel):
    state: AssetState
    url: Optional[str] = None
    reason: Optional[str] = None


class CardOutcome(CamelModel):
    card_id: str
    index: int
    audio: AssetOutcome
    image: AssetOutcome


class GenerateStatus(CamelModel):
    deck_id: str
    status: GenerationState
    progress: int = 0
    total_cards: int = 0
    error: Optional[str] = None
    outcomes: List[CardOutcome] = Field(default_factory=list)
