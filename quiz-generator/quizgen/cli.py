#!/usr/bin/env python3
"""quizgen CLI - build quiz flashcard decks from Wikidata."""

import logging
import sys
from pathlib import Path
from typing import Dict, Tuple, Type

import click

from quizgen.deck import DeckBuilder, QuizDeck
from quizgen.generators.base import Options, QuizGenerator
from quizgen.generators.breeds import CatBreedsGenerator, DogBreedsGenerator
from quizgen.generators.capitals import CapitalsGenerator
from quizgen.sparql import SparqlError

GENERATORS: Dict[str, Type[QuizGenerator]] = {
    CapitalsGenerator.name: CapitalsGenerator,
    DogBreedsGenerator.name: DogBreedsGenerator,
    CatBreedsGenerator.name: CatBreedsGenerator,
}


def run_generator(gen: QuizGenerator, opts: Options, output_dir: Path) -> Tuple[QuizDeck, Path]:
    """Fetch, download, build and save one deck."""
    items = gen.fetch_data(opts)
    if not items:
        raise click.ClickException("no data returned from Wikidata")

    media_dir = output_dir / "media" / gen.deck.media_subdir
    items = gen.download_media(items, media_dir)

    builder = DeckBuilder(
        gen.deck.id,
        gen.deck.name,
        gen.deck.description,
        opts.language,
        f"assets/media/{gen.deck.id}",
    )
    for item in items:
        builder.add_card(item, gen.deck.category)

    return builder.build(), builder.save_json(output_dir / "decks")


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """quizgen - quiz flashcard decks from Wikidata."""


@cli.command("list")
def list_types():
    """List available generator types."""
    for name, gen_cls in GENERATORS.items():
        click.echo(f"{name:<12} {gen_cls.deck.name}")


@cli.command()
@click.option("--type", "gen_type", type=click.Choice(sorted(GENERATORS)), default="capitals", help="Type of quiz to generate")
@click.option("--limit", type=click.IntRange(min=1), default=50, help="Maximum number of items to fetch")
@click.option("--lang", default="cs", help="Language code for labels (cs, en, de, ...)")
@click.option("--output", "output_dir", type=click.Path(file_okay=False, path_type=Path), default=Path("output"), help="Output directory")
@click.option("--delay/--no-delay", default=True, help="Pause between image downloads")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def generate(gen_type, limit, lang, output_dir, delay, verbose):
    """Generate one quiz deck with its images."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )
    gen = GENERATORS[gen_type](download_delay=None if delay else 0)
    opts = Options(limit=limit, language=lang)

    click.echo(f"=== {gen.deck.name} ===")
    click.echo(f"Language: {lang}, Limit: {limit}\n")

    try:
        deck, deck_path = run_generator(gen, opts, output_dir)
    except (SparqlError, OSError) as e:
        raise click.ClickException(str(e)) from e

    click.echo("\n=== Generation Complete ===")
    click.echo(f"Deck saved to: {deck_path}")
    click.echo(f"Media saved to: {output_dir / 'media' / gen.deck.media_subdir}")
    click.echo(f"Total cards: {len(deck.cards)}")


if __name__ == "__main__":
    cli()
