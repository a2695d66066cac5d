"""Media generation capabilities."""

from abc import ABC, abstractmethod
from typing import Optional


class SpeechSynthesizer(ABC):
    """Text-to-speech provider."""

    @abstractmethod
    def generate_speech(self, text: str, voice_id: Optional[str] = None) -> bytes:
        """
        Synthesize speech for a piece of text.

        Args:
            text: Text to speak
            voice_id: Provider voice identifier, None for the client default

        Returns:
            Raw audio bytes (MP3)

        Raises:
            MediaGenerationError: on any provider or transport failure
        """


class ImageGenerator(ABC):
    """Text-to-image provider."""

    @abstractmethod
    def generate_image(self, prompt: str) -> bytes:
        """
        Generate one image for a prompt.

        Args:
            prompt: Image description

        Returns:
            Raw image bytes (PNG)

        Raises:
            MediaGenerationError: on any provider or transport failure
        """
