"""Fakes for the Wikidata endpoint and image downloads."""
import pytest

from quizgen.media import MediaError


class FakeSparql:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.queries = []

    def query(self, sparql):
        self.queries.append(sparql)
        if self.error:
            raise self.error
        return list(self.rows)


class FakeDownloader:
    """Pretends every download works unless the URL contains 'broken'."""

    def __init__(self):
        self.calls = []

    def download_and_convert(self, url, output_dir, base_name, png_width=512):
        self.calls.append((url, output_dir, base_name, png_width))
        if "broken" in url:
            raise MediaError(f"download returned status 404 for {url}")
        return f"{base_name}.png"


class FakeResponse:
    def __init__(self, status_code=200, content=b"", json_data=None, text=""):
        self.status_code = status_code
        self.content = content
        self._json = json_data
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("Expecting value")
        return self._json


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def uri(qid):
    return f"http://www.wikidata.org/entity/{qid}"


@pytest.fixture
def fake_sparql():
    return FakeSparql


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def capital_rows():
    return [
        {
            "country": uri("Q148"), "countryLabel": "Čína", "capitalLabel": "Peking",
            "countryPopulation": "1411750000", "capitalPopulation": "21893095", "countryCode": "CN",
        },
        {
            "country": uri("Q668"), "countryLabel": "Indie", "capitalLabel": "Nové Dillí",
            "countryPopulation": "1380004385", "countryCode": "IN",
        },
        # second capital of the same country
        {
            "country": uri("Q148"), "countryLabel": "Čína", "capitalLabel": "Nanking",
            "countryPopulation": "1411750000", "capitalPopulation": "9314685", "countryCode": "CN",
        },
        {
            "country": uri("Q213"), "countryLabel": "Česko", "capitalLabel": "Praha",
            "countryPopulation": "10827529", "capitalPopulation": "1357326", "countryCode": "CZ",
        },
    ]


@pytest.fixture
def breed_rows():
    return [
        {
            "breed": uri("Q5765"), "breedLabel": "Německý ovčák", "breedLabelEn": "German Shepherd",
            "image": "https://commons.wikimedia.org/wiki/Special:FilePath/GSD.jpg",
            "origin": uri("Q183"), "originLabel": "Německo",
        },
        # same breed again, second origin row
        {
            "breed": uri("Q5765"), "breedLabel": "Německý ovčák", "breedLabelEn": "German Shepherd",
            "image": "https://commons.wikimedia.org/wiki/Special:FilePath/GSD2.jpg",
            "origin": uri("Q7318"), "originLabel": "Německá říše",
        },
        # no label in any requested language
        {
            "breed": uri("Q99999"), "breedLabel": "Q99999",
            "image": "https://commons.wikimedia.org/wiki/Special:FilePath/x.jpg",
        },
        {
            "breed": uri("Q38571"), "breedLabel": "Pomeranian", "breedLabelEn": "Pomeranian",
            "image": "https://commons.wikimedia.org/wiki/Special:FilePath/Pom.jpg",
            "origin": uri("Q123456"), "originLabel": "Q123456",
        },
        {
            "breed": uri("Q1"), "breedLabel": "Queensland Heeler",
            "image": "https://commons.wikimedia.org/wiki/Special:FilePath/QH.jpg",
        },
    ]
