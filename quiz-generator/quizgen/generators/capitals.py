"""World capitals: sovereign states by population, with flags."""

import logging
from typing import List

from quizgen.generators.base import (
    DeckInfo,
    Field,
    Options,
    QuizGenerator,
    QuizItem,
    format_population,
)
from quizgen.sparql import binding_value, entity_id

logger = logging.getLogger(__name__)

FLAG_URL = "https://flagcdn.com/w640/{code}.png"

QUERY_TEMPLATE = """
SELECT DISTINCT ?country ?countryLabel ?capital ?capitalLabel
       ?flag ?countryPopulation ?capitalPopulation ?countryCode
WHERE {{
  ?country wdt:P31 wd:Q3624078 .
  ?country wdt:P36 ?capital .
  ?country wdt:P41 ?flag .
  ?country wdt:P1082 ?countryPopulation .
  ?country wdt:P297 ?countryCode .
  OPTIONAL {{ ?capital wdt:P1082 ?capitalPopulation . }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{lang},en" . }}
}}
ORDER BY DESC(?countryPopulation)
LIMIT {limit}
"""


def build_query(lang: str, limit: int) -> str:
    return QUERY_TEMPLATE.format(lang=lang, limit=limit)


class CapitalsGenerator(QuizGenerator):
    name = "capitals"
    deck = DeckInfo(
        id="world-capitals-50",
        name="Hlavní města světa",
        description="Top 50 států dle populace s jejich hlavními městy a vlajkami",
        media_subdir="flags",
        category="capitals",
    )
    download_delay = 0.2

    def fetch_data(self, opts: Options) -> List[QuizItem]:
        logger.info("Fetching data from Wikidata (limit: %d, language: %s)...", opts.limit, opts.language)
        rows = self.sparql_client.query(build_query(opts.language, opts.limit))

        items: List[QuizItem] = []
        seen = set()

        for row in rows:
            code = binding_value(row, "countryCode").lower()
            if not code or code in seen:
                continue
            seen.add(code)

            fields = [Field("Populace státu", format_population(binding_value(row, "countryPopulation")))]
            capital_population = format_population(binding_value(row, "capitalPopulation"))
            if capital_population != "N/A":
                fields.append(Field("Populace hl. města", capital_population))

            items.append(QuizItem(
                id=code,
                title=binding_value(row, "countryLabel"),
                subtitle=binding_value(row, "capitalLabel"),
                # flagcdn PNGs avoid converting the Wikimedia SVGs
                image_url=FLAG_URL.format(code=code),
                fields=fields,
                wikidata_id=entity_id(binding_value(row, "country")),
            ))

        logger.info("Found %d countries with capitals", len(items))
        return items
