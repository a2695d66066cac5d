import os
from pathlib import PurePath
from typing import Iterable

from starlette.staticfiles import StaticFiles


class MediaFiles(StaticFiles):
    """
    StaticFiles that refuses some top-level subdirectories.

    Deck JSON lives under the storage root next to the media files; paid
    decks must only leave through the receipt-checked download route.
    """

    def __init__(self, *args, hidden: Iterable[str] = (), **kwargs):
        super().__init__(*args, **kwargs)
        self.hidden = {name.casefold() for name in hidden}

    def lookup_path(self, path: str):
        full_path, stat_result = super().lookup_path(path)
        if stat_result is not None and self._is_hidden(full_path):
            # not found, same answer as a missing file
            return "", None
        return full_path, stat_result

    def _is_hidden(self, full_path: str) -> bool:
        for directory in self.all_directories:
            root = os.path.realpath(directory)
            if os.path.commonpath([root, full_path]) != root:
                continue
            parts = PurePath(os.path.relpath(full_path, root)).parts
            return bool(parts) and parts[0].casefold() in self.hidden
        return False
