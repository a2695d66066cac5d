from enum import Enum


class MediaStatus(str, Enum):
    pending = "pending"
    generating = "generating"
    ready = "ready"
    error = "error"


class GenerationState(str, Enum):
    pending = "pending"
    generating = "generating"
    completed = "completed"
    error = "error"


class AssetState(str, Enum):
    generated = "generated"
    skipped_existing = "skipped_existing"
    failed = "failed"
    not_attempted = "not_attempted"


class Platform(str, Enum):
    ios = "ios"
    android = "android"


FREE_PRICE = "free"
DEFAULT_PRICE = "tier1"
