"""Seed decks into the storage directory from JSON files.

    python seed.py path/to/japanese-basics.json [more.json ...]
"""
from pathlib import Path

import click

from flashdeck.core.config import settings
from flashdeck.core.log import configure_logging
from flashdeck.schemas.decks import Deck
from flashdeck.services.generator import DeckGenerator


@click.command()
@click.argument("deck_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--generate", is_flag=True, help="Start media generation for each seeded deck")
def seed(deck_files, generate):
    """Create (or overwrite) decks from DECK_FILES."""
    configure_logging(settings.LOG_LEVEL)
    generator = DeckGenerator.from_settings(settings)
    seeded = []

    try:
        for path in deck_files:
            deck = generator.create_deck(Deck.model_validate_json(path.read_text(encoding="utf-8")))
            seeded.append(deck.id)
            click.echo(f"Seeded {deck.id} ({len(deck.cards)} cards)")
            if generate:
                generator.start_generation(deck.id)

        if generate:
            generator.wait_idle()
            for deck_id in seeded:
                status = generator.get_status(deck_id)
                click.echo(f"{deck_id}: {status.status} {status.progress}/{status.total_cards}")
    finally:
        generator.shutdown()


if __name__ == "__main__":
    seed()
