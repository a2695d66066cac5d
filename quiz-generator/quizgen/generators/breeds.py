"""Dog and cat breeds with photos, origin and size."""

import logging
import re
from typing import Dict, List

from quizgen.generators.base import DeckInfo, Field, Options, QuizGenerator, QuizItem, create_slug
from quizgen.sparql import binding_value, entity_id

logger = logging.getLogger(__name__)

QUERY_TEMPLATE = """
SELECT DISTINCT ?breed ?breedLabel ?breedLabelEn ?image ?origin ?originLabel
WHERE {{
  ?breed wdt:P31 wd:{species} .
  ?breed wdt:P18 ?image .
  OPTIONAL {{ ?breed wdt:P495 ?origin . }}
  OPTIONAL {{ ?breed rdfs:label ?breedLabelEn . FILTER(LANG(?breedLabelEn) = "en") }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang},en" . }}
}}
LIMIT {limit}
"""

# Typical weight class by Wikidata id
DOG_SIZES: Dict[str, str] = {
    # over 25 kg
    "Q5765": "Velký",  # German Shepherd
    "Q39062": "Velký",  # Golden Retriever
    "Q39084": "Velký",  # Labrador Retriever
    "Q192365": "Velký",  # Rottweiler
    "Q243458": "Velký",  # Doberman
    "Q134649": "Velký",  # Great Dane
    "Q39021": "Velký",  # Saint Bernard
    "Q37652": "Velký",  # Siberian Husky
    "Q184714": "Velký",  # Boxer
    "Q205594": "Velký",  # Bernese Mountain Dog
    "Q193119": "Velký",  # Irish Setter
    "Q219373": "Velký",  # Weimaraner
    "Q176139": "Velký",  # Akita
    "Q327508": "Velký",  # Alaskan Malamute
    "Q1098647": "Velký",  # Belgian Malinois
    "Q208212": "Velký",  # Rhodesian Ridgeback
    "Q26867": "Velký",  # Newfoundland
    "Q241478": "Velký",  # Irish Wolfhound
    "Q161548": "Velký",  # Collie
    "Q26745": "Velký",  # Dalmatian
    # 10-25 kg
    "Q45122": "Střední",  # Bulldog
    "Q208149": "Střední",  # Border Collie
    "Q205476": "Střední",  # Cocker Spaniel
    "Q178258": "Střední",  # Beagle
    "Q165257": "Střední",  # Basset Hound
    "Q38565": "Střední",  # Standard Poodle
    "Q329949": "Střední",  # Australian Shepherd
    "Q172865": "Střední",  # Shar Pei
    "Q212813": "Střední",  # Whippet
    "Q183188": "Střední",  # Brittany
    "Q220685": "Střední",  # Samoyed
    "Q203244": "Střední",  # English Springer Spaniel
    "Q39041": "Střední",  # Chow Chow
    "Q37702": "Střední",  # Shiba Inu
    "Q275473": "Střední",  # Bull Terrier
    "Q188915": "Střední",  # Staffordshire Bull Terrier
    # under 10 kg
    "Q26868": "Malý",  # Chihuahua
    "Q38571": "Malý",  # Pomeranian
    "Q327499": "Malý",  # Yorkshire Terrier
    "Q205060": "Malý",  # Shih Tzu
    "Q165447": "Malý",  # Dachshund
    "Q161462": "Malý",  # Miniature Schnauzer
    "Q38545": "Malý",  # Maltese
    "Q180973": "Malý",  # Pug
    "Q159348": "Malý",  # French Bulldog
    "Q207536": "Malý",  # Cavalier King Charles Spaniel
    "Q185096": "Malý",  # Bichon Frise
    "Q161117": "Malý",  # Papillon
    "Q38649": "Malý",  # Pekingese
    "Q191652": "Malý",  # Jack Russell Terrier
    "Q184962": "Malý",  # Boston Terrier
    "Q38573": "Malý",  # West Highland White Terrier
    "Q26823": "Malý",  # Havanese
}

CAT_SIZES: Dict[str, str] = {
    # over 6 kg
    "Q42365": "Velká",  # Maine Coon
    "Q182153": "Velká",  # Ragdoll
    "Q188988": "Velká",  # Norwegian Forest Cat
    "Q190109": "Velká",  # British Shorthair
    "Q42373": "Velká",  # Savannah
    "Q193437": "Velká",  # Ragamuffin
    "Q212089": "Velká",  # Chausie
    "Q211906": "Velká",  # Turkish Van
    "Q190106": "Velká",  # Siberian
    "Q217776": "Velká",  # Chartreux
    "Q186648": "Velká",  # Bengal
    "Q219337": "Velká",  # Selkirk Rex
    # 3-6 kg
    "Q83450": "Střední",  # Persian
    "Q217770": "Střední",  # Abyssinian
    "Q186627": "Střední",  # Siamese
    "Q43091": "Střední",  # Russian Blue
    "Q188636": "Střední",  # Burmese
    "Q191034": "Střední",  # Birman
    "Q213044": "Střední",  # Scottish Fold
    "Q213005": "Střední",  # Egyptian Mau
    "Q178056": "Střední",  # American Shorthair
    "Q210726": "Střední",  # Exotic Shorthair
    "Q212917": "Střední",  # Tonkinese
    "Q191652": "Střední",  # Turkish Angora
    "Q185195": "Střední",  # Somali
    "Q216628": "Střední",  # Ocicat
    "Q183266": "Střední",  # Balinese
    "Q213377": "Střední",  # Himalayan
    "Q210732": "Střední",  # Snowshoe
    "Q204034": "Střední",  # Bombay
    "Q210753": "Střední",  # Havana Brown
    "Q215682": "Střední",  # Japanese Bobtail
    # under 3 kg
    "Q43602": "Malá",  # Sphynx
    "Q188475": "Malá",  # Cornish Rex
    "Q189249": "Malá",  # Devon Rex
    "Q189267": "Malá",  # Singapura
    "Q189369": "Malá",  # Munchkin
    "Q189265": "Malá",  # American Curl
    "Q213011": "Malá",  # Korat
    "Q213033": "Malá",  # LaPerm
}

DEFAULT_SIZE = "Střední"


def build_query(species: str, lang: str, limit: int) -> str:
    return QUERY_TEMPLATE.format(species=species, lang=lang, limit=limit)


_QID = re.compile(r"^Q\d+$")


def _is_unlabeled(label: str) -> bool:
    # Wikidata falls back to the bare Q-id when no label exists
    return bool(_QID.match(label))


class BreedGenerator(QuizGenerator):
    species: str
    sizes: Dict[str, str]
    download_delay = 0.3

    def size_category(self, wikidata_id: str) -> str:
        return self.sizes.get(wikidata_id, DEFAULT_SIZE)

    def fetch_data(self, opts: Options) -> List[QuizItem]:
        logger.info("Fetching %s from Wikidata (limit: %d, language: %s)...", self.name, opts.limit, opts.language)
        # over-fetch, unlabeled and duplicate rows get filtered out
        rows = self.sparql_client.query(build_query(self.species, opts.language, opts.limit * 2))

        items: List[QuizItem] = []
        seen = set()

        for row in rows:
            wikidata_id = entity_id(binding_value(row, "breed"))
            if not wikidata_id or wikidata_id in seen:
                continue
            seen.add(wikidata_id)

            label = binding_value(row, "breedLabel")
            if _is_unlabeled(label):
                continue

            label_en = binding_value(row, "breedLabelEn")
            origin = binding_value(row, "originLabel")

            fields = []
            if origin and not _is_unlabeled(origin):
                fields.append(Field("Původ", origin))
            fields.append(Field("Velikost", self.size_category(wikidata_id)))

            items.append(QuizItem(
                id=create_slug(label) or wikidata_id,
                title=label,
                subtitle=label_en if label_en and label_en != label else "",
                image_url=binding_value(row, "image"),
                fields=fields,
                wikidata_id=wikidata_id,
            ))

            if len(items) >= opts.limit:
                break

        logger.info("Found %d %s", len(items), self.name)
        return items


class DogBreedsGenerator(BreedGenerator):
    name = "dogbreeds"
    species = "Q39367"
    sizes = DOG_SIZES
    deck = DeckInfo(
        id="dog-breeds",
        name="Plemena psů",
        description="Poznej psí plemena podle fotografie",
        media_subdir="images",
        category="dogbreeds",
    )


class CatBreedsGenerator(BreedGenerator):
    name = "catbreeds"
    species = "Q43577"
    sizes = CAT_SIZES
    deck = DeckInfo(
        id="cat-breeds",
        name="Plemena koček",
        description="Poznej kočičí plemena podle fotografie",
        media_subdir="images",
        category="catbreeds",
    )
