"""Pytest fixtures: temp storage, fake vendor clients, app wired to both."""
import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# flashdeck.main builds an app at import time, keep it away from ./media
os.environ["STORAGE_PATH"] = tempfile.mkdtemp(prefix="flashdeck-tests-")
os.environ["ELEVENLABS_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""

from flashdeck.core.config import Settings
from flashdeck.core.errors import MediaGenerationError
from flashdeck.main import create_app
from flashdeck.schemas.decks import Deck
from flashdeck.services.generator import DeckGenerator
from flashdeck.services.iap import AppleReceiptVerifier, GooglePlayReceiptVerifier, ReceiptValidator
from flashdeck.services.media.base import ImageGenerator, SpeechSynthesizer
from flashdeck.storage.decks import DeckRepository
from flashdeck.storage.local import LocalStorage

SAMPLE_DECK = Path(__file__).resolve().parent.parent / "data" / "japanese-basics.json"
BASE_URL = "http://test/media"


class FakeSpeech(SpeechSynthesizer):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []
        self.on_call = None

    def generate_speech(self, text, voice_id=None):
        self.calls.append((text, voice_id))
        if self.on_call:
            self.on_call(text)
        if self.fail:
            raise MediaGenerationError("API error (status 429): quota exceeded")
        return b"ID3" + text.encode("utf-8")


class FakeImages(ImageGenerator):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.prompts = []

    def generate_image(self, prompt):
        self.prompts.append(prompt)
        if self.fail:
            raise MediaGenerationError("no image generated")
        return b"\x89PNG\r\n\x1a\n" + prompt.encode("utf-8")


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, content=b"", text=""):
        self.status_code = status_code
        self._json = json_data
        self.content = content
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Replays queued responses and records each request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def _next(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def speech():
    return FakeSpeech()


@pytest.fixture
def images():
    return FakeImages()


@pytest.fixture
def failing_speech():
    return FakeSpeech(fail=True)


@pytest.fixture
def media_dir(tmp_path) -> Path:
    return tmp_path / "media"


@pytest.fixture
def storage(media_dir) -> LocalStorage:
    return LocalStorage(media_dir, BASE_URL)


@pytest.fixture
def repository(media_dir) -> DeckRepository:
    return DeckRepository(media_dir / "decks")


@pytest.fixture
def sample_deck() -> Deck:
    """japanese-basics as shipped, 7 cards."""
    return Deck.model_validate_json(SAMPLE_DECK.read_text(encoding="utf-8"))


@pytest.fixture
def small_deck(sample_deck) -> Deck:
    """japanese-basics cut down to its first 3 cards."""
    return sample_deck.model_copy(update={"cards": sample_deck.cards[:3]}, deep=True)


@pytest.fixture
def paid_deck() -> Deck:
    return Deck(
        id="spanish-travel",
        name="Spanish for travel",
        front_language="es",
        back_language="cs",
        cards=[
            {"id": "es-001", "frontText": "Hola", "backText": "Ahoj"},
            {"id": "es-002", "frontText": "Gracias", "backText": "Děkuji"},
        ],
    )


@pytest.fixture
def make_generator(storage, repository):
    """Builds DeckGenerators on the shared temp storage and shuts them down after the test."""
    created = []

    def factory(*decks, speech_client=None, image_client=None, free_decks=("japanese-basics",)):
        generator = DeckGenerator(
            storage=storage,
            repository=repository,
            speech_client=speech_client,
            image_client=image_client,
            free_decks=free_decks,
            product_prefix="com.example.duolingocards.deck.",
        )
        for deck in decks:
            generator.create_deck(deck)
        created.append(generator)
        return generator

    yield factory

    for generator in created:
        generator.shutdown()


@pytest.fixture
def validator(fake_session, fake_response) -> ReceiptValidator:
    """iOS verifier that always finds the spanish-travel product."""
    apple_body = {
        "status": 0,
        "receipt": {"in_app": [{"product_id": "com.example.duolingocards.deck.spanish-travel"}]},
    }
    session = fake_session(*[fake_response(json_data=apple_body) for _ in range(10)])
    return ReceiptValidator({
        "ios": AppleReceiptVerifier(use_sandbox=True, session=session),
        "android": GooglePlayReceiptVerifier(use_sandbox=False),
    })


@pytest.fixture
def generator(make_generator, sample_deck, paid_deck) -> DeckGenerator:
    return make_generator(sample_deck, paid_deck)


@pytest.fixture
def client(media_dir, generator, validator) -> TestClient:
    settings = Settings(
        STORAGE_PATH=str(media_dir),
        STORAGE_BASE_URL=BASE_URL,
        FREE_DECKS=["japanese-basics"],
    )
    app = create_app(settings=settings, generator=generator, validator=validator)
    return TestClient(app)
