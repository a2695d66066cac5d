from typing import Optional

from flashdeck.schemas.decks import CamelModel


class VerifyRequest(CamelModel):
    platform: str = ""
    # base64 receipt on iOS, purchase token on Android
    receipt_data: str = ""
    product_id: str = ""
    deck_id: str = ""


class VerifyResponse(CamelModel):
    valid: bool
    deck_id: Optional[str] = None
    product_id: Optional[str] = None
    error: Optional[str] = None


class DownloadRequest(CamelModel):
    receipt_data: str = ""
    platform: str = ""
