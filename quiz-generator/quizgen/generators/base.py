"""Shared quiz item types and helpers for the generators."""

import logging
import re
import time
import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from quizgen.media import Downloader, MediaError
from quizgen.sparql import SparqlClient

logger = logging.getLogger(__name__)


@dataclass
class Field:
    label: str
    value: str


@dataclass
class QuizItem:
    """One row of quiz data from any source."""

    id: str
    title: str
    subtitle: str = ""
    image_url: str = ""
    local_image: str = ""
    fields: List[Field] = field(default_factory=list)
    wikidata_id: str = ""


@dataclass
class Options:
    limit: int = 50
    language: str = "cs"
    country: Optional[str] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class DeckInfo:
    id: str
    name: str
    description: str
    # media subdirectory, also the prefix stored in card image paths
    media_subdir: str
    category: str


_SLUG_KEEP = re.compile(r"[^a-z0-9\s_-]")
_SLUG_SEPARATORS = re.compile(r"[\s_-]+")


def create_slug(label: str) -> str:
    """
    URL-safe id from a label: diacritics folded, punctuation dropped,
    whitespace/underscores become single hyphens.
    """
    decomposed = unicodedata.normalize("NFKD", label.lower())
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _SLUG_KEEP.sub("", folded)
    slug = _SLUG_SEPARATORS.sub("-", slug)
    return slug.strip("-")


def format_population(value: str) -> str:
    """'10700000' -> '10.7 mil'; empty -> 'N/A'; unparsable values pass through."""
    if not value:
        return "N/A"

    try:
        population = float(value)
    except ValueError:
        return value

    if population >= 1_000_000_000:
        return f"{population / 1_000_000_000:.1f} mld"
    if population >= 1_000_000:
        return f"{population / 1_000_000:.1f} mil"
    if population >= 1_000:
        return f"{population / 1_000:.0f} tis"
    return f"{population:.0f}"


class QuizGenerator(ABC):
    """Source of quiz items for one deck type, backed by Wikidata."""

    name: str
    deck: DeckInfo
    # seconds to wait between image downloads, be nice to Wikimedia servers
    download_delay: float = 0.2

    def __init__(
        self,
        sparql_client: Optional[SparqlClient] = None,
        downloader: Optional[Downloader] = None,
        download_delay: Optional[float] = None,
    ):
        self.sparql_client = sparql_client or SparqlClient()
        self.downloader = downloader or Downloader()
        if download_delay is not None:
            self.download_delay = download_delay

    @abstractmethod
    def fetch_data(self, opts: Options) -> List[QuizItem]:
        """Query the data source and return quiz items."""

    def download_media(self, items: List[QuizItem], output_dir: Path) -> List[QuizItem]:
        """
        Download the image of every item into output_dir.

        Failed downloads are logged and leave local_image empty.

        Returns:
            Updated copies of the items; the input list is not modified.
        """
        logger.info("Downloading %d %s images...", len(items), self.name)
        updated = [replace(item) for item in items]
        total = len(updated)

        for i, item in enumerate(updated, start=1):
            if not item.image_url:
                logger.info("  [%d/%d] %s: no image URL", i, total, item.id)
                continue

            logger.info("  [%d/%d] %s: downloading image...", i, total, item.id)
            try:
                local_file = self.downloader.download_and_convert(item.image_url, output_dir, item.id, 512)
            except MediaError as e:
                logger.warning("    Warning: failed to download %s: %s", item.id, e)
                continue

            item.local_image = f"{self.deck.media_subdir}/{local_file}"

            if self.download_delay:
                time.sleep(self.download_delay)

        return updated
