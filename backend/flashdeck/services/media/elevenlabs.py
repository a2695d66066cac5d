from typing import Optional

import requests

from flashdeck.core.errors import MediaGenerationError
from flashdeck.services.media.base import SpeechSynthesizer

ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"
# Rachel, works well across languages
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
DEFAULT_MODEL_ID = "eleven_multilingual_v2"


class ElevenLabsClient(SpeechSynthesizer):
    """ElevenLabs text-to-speech REST client."""

    def __init__(
        self,
        api_key: str,
        voice_id: str = DEFAULT_VOICE_ID,
        model_id: str = DEFAULT_MODEL_ID,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.timeout = timeout
        self._session = session or requests.Session()

    def generate_speech(self, text: str, voice_id: Optional[str] = None) -> bytes:
        url = f"{ELEVENLABS_BASE_URL}/text-to-speech/{voice_id or self.voice_id}"
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": 0.5,
                "similarity_boost": 0.75,
            },
        }
        headers = {
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
            "Accept": "audio/mpeg",
        }

        try:
            response = self._session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise MediaGenerationError(f"failed to send request: {exc}") from exc

        if not response.ok:
            raise MediaGenerationError(
                f"API error (status {response.status_code}): {response.text}"
            )

        return response.content
