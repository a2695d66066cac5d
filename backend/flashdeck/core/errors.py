class FlashdeckError(Exception):
    """Base class for errors raised by the flashdeck services."""


class DeckNotFoundError(FlashdeckError, LookupError):
    def __init__(self, deck_id: str):
        super().__init__(f"deck not found: {deck_id}")
        self.deck_id = deck_id


class StatusNotFoundError(FlashdeckError, LookupError):
    def __init__(self, deck_id: str):
        super().__init__(f"no generation status for deck: {deck_id}")
        self.deck_id = deck_id


class InvalidInputError(FlashdeckError, ValueError):
    pass


class ReceiptRequiredError(FlashdeckError):
    pass


class UpstreamError(FlashdeckError):
    """A vendor API answered with an error or an undecodable payload."""


class MediaGenerationError(UpstreamError):
    pass


class ReceiptVerificationError(UpstreamError):
    pass
