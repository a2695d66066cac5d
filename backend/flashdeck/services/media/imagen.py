import base64
import binascii
import logging
from typing import List, Optional, Sequence

import requests

from flashdeck.core.errors import MediaGenerationError
from flashdeck.services.media.base import ImageGenerator

logger = logging.getLogger(__name__)

GEMINI_MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODELS = ["imagen-3.0-generate-002", "imagen-3.0-fast-generate-001"]


class ImagenClient(ImageGenerator):
    """
    Google Imagen client over the Gemini API.

    Models are tried in order; the first one that returns an image wins.
    """

    def __init__(
        self,
        api_key: str,
        models: Optional[Sequence[str]] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.models: List[str] = list(models or DEFAULT_MODELS)
        self.timeout = timeout
        self._session = session or requests.Session()

    def generate_image(self, prompt: str) -> bytes:
        last_error: Optional[MediaGenerationError] = None

        for model in self.models:
            try:
                return self._predict(model, prompt)
            except MediaGenerationError as exc:
                logger.warning("Image model %s failed: %s", model, exc)
                last_error = exc

        raise MediaGenerationError(f"all image models failed, last error: {last_error}")

    def _predict(self, model: str, prompt: str) -> bytes:
        url = f"{GEMINI_MODELS_URL}/{model}:predict"
        payload = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": "1:1",
                "personGeneration": "dont_allow",
            },
        }

        try:
            response = self._session.post(
                url,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise MediaGenerationError(f"failed to send request: {exc}") from exc

        if not response.ok:
            raise MediaGenerationError(
                f"API error (status {response.status_code}): {response.text}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise MediaGenerationError(f"failed to decode response: {exc}") from exc

        predictions = body.get("predictions") if isinstance(body, dict) else None

        if not predictions:
            raise MediaGenerationError("no image generated")

        try:
            return base64.b64decode(predictions[0]["bytesBase64Encoded"], validate=True)
        except (KeyError, TypeError, binascii.Error) as exc:
            raise MediaGenerationError(f"failed to decode image: {exc}") from exc
