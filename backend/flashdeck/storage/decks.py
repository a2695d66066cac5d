import logging
import os
from pathlib import Path
from typing import Dict

from pydantic import ValidationError

from flashdeck.schemas.decks import Deck

logger = logging.getLogger(__name__)

# subdirectory of the storage root holding {deck_id}.json files
DECKS_DIRNAME = "decks"


class DeckRepository:
    """One JSON file per deck, named {deck_id}.json. Last write wins."""

    def __init__(self, decks_dir: str | Path):
        self.decks_dir = Path(decks_dir)

    def path_for(self, deck_id: str) -> Path:
        return self.decks_dir / f"{deck_id}.json"

    def load_all(self) -> Dict[str, Deck]:
        if not self.decks_dir.is_dir():
            self.decks_dir.mkdir(parents=True, exist_ok=True)
            return {}

        decks: Dict[str, Deck] = {}
        for path in sorted(self.decks_dir.glob("*.json")):
            try:
                deck = Deck.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as exc:
                logger.warning("Skipping deck file %s: %s", path, exc)
                continue
            decks[deck.id] = deck

        logger.info("Loaded %d deck(s) from %s", len(decks), self.decks_dir)
        return decks

    def save(self, deck: Deck) -> Path:
        self.decks_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(deck.id)
        tmp_path = path.with_name(f".{path.name}.tmp")

        payload = deck.model_dump_json(by_alias=True, exclude_none=True, indent=2)
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)
        return path
