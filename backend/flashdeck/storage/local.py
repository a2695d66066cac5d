import re
import unicodedata
from pathlib import Path

SLUG_MAX_LENGTH = 30

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(label: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    "Dobrý den" -> "dobry-den", "konnichiwa" -> "konnichiwa".
    """
    decomposed = unicodedata.normalize("NFKD", label)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _NON_ALNUM.sub("-", stripped.lower()).strip("-")

    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")

    return slug


def build_media_filename(index: int, label: str, media_type: str, extension: str) -> str:
    """Builds names like "01-hello-image.png" or "01-konnichiwa-audio.mp3"."""
    return f"{index:02d}-{slugify(label)}-{media_type}.{extension}"


class LocalStorage:
    """
    Media files laid out flat per deck: {base_path}/{deck_id}/{filename},
    served publicly at {base_url}/{deck_id}/{filename}.
    """

    def __init__(self, base_path: str | Path, base_url: str):
        self.base_path = Path(base_path)
        self.base_url = base_url.rstrip("/")

    def path_for(self, deck_id: str, filename: str) -> Path:
        return self.base_path / deck_id / filename

    def build_url(self, deck_id: str, filename: str) -> str:
        return f"{self.base_url}/{deck_id}/{filename}"

    def exists(self, deck_id: str, filename: str) -> bool:
        return self.path_for(deck_id, filename).is_file()

    def save(self, deck_id: str, filename: str, data: bytes) -> str:
        path = self.path_for(deck_id, filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return self.build_url(deck_id, filename)
