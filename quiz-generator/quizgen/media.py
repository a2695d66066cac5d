"""Image download and PNG conversion."""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

USER_AGENT = "DuolingoCards-QuizGenerator/1.0"


class MediaError(Exception):
    """Download or conversion failure."""


class Downloader:
    """Downloads remote images and normalises them to PNG."""

    def __init__(
        self,
        user_agent: str = USER_AGENT,
        timeout: float = 60,
        session: Optional[requests.Session] = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session or requests.Session()

    def download_file(self, url: str, dest_path: Path) -> None:
        try:
            response = self._session.get(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MediaError(f"downloading {url}: {e}") from e

        if response.status_code != 200:
            raise MediaError(f"download returned status {response.status_code} for {url}")

        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(response.content)

    def convert_svg_to_png(self, svg_path: Path, png_path: Path, width: int) -> None:
        """Rasterise an SVG with rsvg-convert, falling back to ImageMagick."""
        if shutil.which("rsvg-convert"):
            cmd = ["rsvg-convert", "-w", str(width), "-o", str(png_path), str(svg_path)]
        elif shutil.which("convert"):
            cmd = ["convert", "-background", "none", "-resize", f"{width}x", str(svg_path), str(png_path)]
        else:
            raise MediaError("neither rsvg-convert nor imagemagick found, cannot convert SVG to PNG")

        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except subprocess.CalledProcessError as e:
            raise MediaError(f"{cmd[0]} failed: {e.stderr.decode(errors='replace').strip()}") from e

    def download_and_convert(
        self,
        url: str,
        output_dir: Path,
        base_name: str,
        png_width: int = 512,
    ) -> str:
        """Download an image and convert it to PNG when possible.

        Returns:
            File name of the stored image, relative to output_dir.
        """
        output_dir = Path(output_dir)
        ext = Path(urlparse(url).path).suffix.lower() or ".png"

        temp_path = output_dir / f"{base_name}{ext}"
        final_path = output_dir / f"{base_name}.png"

        self.download_file(url, temp_path)

        if ext == ".png":
            return final_path.name

        if ext == ".svg":
            self.convert_svg_to_png(temp_path, final_path, png_width)
            temp_path.unlink(missing_ok=True)
            return final_path.name

        try:
            with Image.open(temp_path) as img:
                if img.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
                    img = img.convert("RGBA")
                img.save(final_path, format="PNG")
        except (OSError, UnidentifiedImageError) as e:
            # keep the original file when it cannot be converted
            logger.warning("Keeping %s as downloaded: %s", temp_path.name, e)
            final_path.unlink(missing_ok=True)
            return temp_path.name

        temp_path.unlink(missing_ok=True)
        return final_path.name
