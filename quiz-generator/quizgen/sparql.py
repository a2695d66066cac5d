"""Wikidata SPARQL client."""

import logging
from typing import Dict, List, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

WIKIDATA_ENDPOINT = "https://query.wikidata.org/sparql"
USER_AGENT = "DuolingoCards-QuizGenerator/1.0 (https://github.com/duolingocards)"

Binding = Dict[str, str]


class SparqlError(Exception):
    """SPARQL endpoint error."""


def binding_value(binding: Mapping[str, str], key: str) -> str:
    """Value of a result variable, empty string when unbound."""
    return binding.get(key, "")


def entity_id(uri: str) -> str:
    """'http://www.wikidata.org/entity/Q142' -> 'Q142'."""
    _, sep, tail = uri.rpartition("/")
    return tail if sep else ""


class SparqlClient:
    """Runs SELECT queries and flattens the JSON result bindings."""

    def __init__(
        self,
        endpoint: str = WIKIDATA_ENDPOINT,
        user_agent: str = USER_AGENT,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session or requests.Session()

    def query(self, sparql: str) -> List[Binding]:
        """Execute a query.

        Args:
            sparql: SELECT query text

        Returns:
            One dict per result row mapping variable name to its value.

        Raises:
            SparqlError: on transport errors, non-200 answers or bad JSON.
        """
        try:
            response = self._session.get(
                self.endpoint,
                params={"query": sparql, "format": "json"},
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/sparql-results+json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SparqlError(f"executing request: {e}") from e

        if response.status_code != 200:
            raise SparqlError(f"wikidata returned {response.status_code}: {response.text[:500]}")

        try:
            rows = response.json()["results"]["bindings"]
        except (ValueError, KeyError, TypeError) as e:
            raise SparqlError(f"decoding response: {e}") from e

        return [
            {name: cell.get("value", "") for name, cell in row.items()}
            for row in rows
        ]
