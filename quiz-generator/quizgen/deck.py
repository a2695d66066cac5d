"""Quiz deck JSON model and builder."""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field as ModelField
from pydantic.alias_generators import to_camel

from quizgen.generators.base import QuizItem


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuizField(CamelModel):
    label: str
    value: str


class QuizMedia(CamelModel):
    image: Optional[str] = None


class QuizData(CamelModel):
    category: str
    title: str
    subtitle: Optional[str] = None
    fields: Optional[List[QuizField]] = None
    wikidata_id: Optional[str] = None


class QuizCard(CamelModel):
    id: str
    type: str = "quiz"
    front_text: str = ""
    back_text: str
    media: Optional[QuizMedia] = None
    quiz_data: Optional[QuizData] = None


class QuizDeck(CamelModel):
    id: str
    name: str
    description: str
    card_type: str = "quiz"
    front_language: str = "visual"
    back_language: str
    media_base_url: Optional[str] = None
    cards: List[QuizCard] = ModelField(default_factory=list)


class DeckBuilder:
    def __init__(self, id: str, name: str, description: str, back_language: str, media_base_url: str = ""):
        self.deck = QuizDeck(
            id=id,
            name=name,
            description=description,
            back_language=back_language,
            media_base_url=media_base_url or None,
        )

    def add_card(self, item: QuizItem, category: str) -> QuizCard:
        card = QuizCard(
            id=item.id,
            back_text=item.title,
            media=QuizMedia(image=item.local_image) if item.local_image else None,
            quiz_data=QuizData(
                category=category,
                title=item.title,
                subtitle=item.subtitle or None,
                fields=[QuizField(label=f.label, value=f.value) for f in item.fields] or None,
                wikidata_id=item.wikidata_id or None,
            ),
        )
        self.deck.cards.append(card)
        return card

    def build(self) -> QuizDeck:
        return self.deck

    def save_json(self, output_dir: Path) -> Path:
        """Write {output_dir}/{deck id}.json, creating the directory if needed."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        path = output_dir / f"{self.deck.id}.json"
        path.write_text(
            self.deck.model_dump_json(by_alias=True, exclude_none=True, indent=2) + "\n",
            encoding="utf-8",
        )
        return path
