"""
In-app purchase receipt validation for Apple and Google.

Each platform is handled by a ReceiptVerifier; ReceiptValidator dispatches on
the platform named in the request.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional

import requests

from flashdeck.core.config import Settings
from flashdeck.core.enums import Platform
from flashdeck.core.errors import ReceiptRequiredError, ReceiptVerificationError
from flashdeck.schemas.receipts import VerifyRequest, VerifyResponse

logger = logging.getLogger(__name__)

APPLE_PRODUCTION_URL = "https://buy.itunes.apple.com/verifyReceipt"
APPLE_SANDBOX_URL = "https://sandbox.itunes.apple.com/verifyReceipt"
# receipt belongs to the sandbox environment
APPLE_STATUS_SANDBOX_RECEIPT = 21007


def is_paid_deck(deck_id: str, free_decks: Iterable[str]) -> bool:
    return deck_id not in set(free_decks)


class ReceiptVerifier(ABC):
    @abstractmethod
    def verify(self, request: VerifyRequest) -> VerifyResponse:
        """Check a receipt with the store. Raises ReceiptVerificationError on transport failures."""


class AppleReceiptVerifier(ReceiptVerifier):
    def __init__(
        self,
        shared_secret: str = "",
        use_sandbox: bool = False,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.shared_secret = shared_secret
        self.use_sandbox = use_sandbox
        self.timeout = timeout
        self._session = session or requests.Session()

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        body = {
            "receipt-data": request.receipt_data,
            "exclude-old-transactions": True,
        }
        if self.shared_secret:
            body["password"] = self.shared_secret

        url = APPLE_SANDBOX_URL if self.use_sandbox else APPLE_PRODUCTION_URL
        result = self._send(url, body)

        if result.get("status") == APPLE_STATUS_SANDBOX_RECEIPT and not self.use_sandbox:
            logger.info("Sandbox receipt sent to production, retrying against sandbox")
            result = self._send(APPLE_SANDBOX_URL, body)

        status = result.get("status", 0)
        if status != 0:
            return VerifyResponse(valid=False, error=f"apple verification failed: status {status}")

        receipt = result.get("receipt")
        in_app = receipt.get("in_app") if isinstance(receipt, dict) else None
        if not isinstance(in_app, list) or not in_app:
            return VerifyResponse(valid=False, error="no in-app purchases in receipt")

        for purchase in in_app:
            if not isinstance(purchase, dict):
                continue
            if purchase.get("product_id") == request.product_id:
                return VerifyResponse(
                    valid=True,
                    deck_id=request.deck_id,
                    product_id=request.product_id,
                )

        return VerifyResponse(valid=False, error="product not found in receipt")

    def _send(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._session.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ReceiptVerificationError(f"apple request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ReceiptVerificationError(f"unmarshal apple response: {exc}") from exc

        if not isinstance(payload, dict):
            raise ReceiptVerificationError("unmarshal apple response: expected an object")
        return payload


class GooglePlayReceiptVerifier(ReceiptVerifier):
    """
    Placeholder: accepts any non-empty purchase token.

    Real validation needs a service account, an OAuth2 token and a call to
    the Play Developer API purchases.products.get endpoint.
    """

    def __init__(self, package_name: str = "", use_sandbox: bool = False):
        self.package_name = package_name
        self.use_sandbox = use_sandbox

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        if not self.use_sandbox and not request.receipt_data:
            return VerifyResponse(valid=False, error="empty receipt data")

        return VerifyResponse(
            valid=True,
            deck_id=request.deck_id,
            product_id=request.product_id,
        )


class ReceiptValidator:
    def __init__(self, verifiers: Mapping[str, ReceiptVerifier]):
        self.verifiers = {platform.lower(): verifier for platform, verifier in verifiers.items()}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReceiptValidator":
        return cls({
            Platform.ios.value: AppleReceiptVerifier(
                shared_secret=settings.APPLE_SHARED_SECRET,
                use_sandbox=settings.IAP_SANDBOX_MODE,
                timeout=settings.MEDIA_TIMEOUT_SECONDS,
            ),
            Platform.android.value: GooglePlayReceiptVerifier(
                package_name=settings.GOOGLE_PACKAGE_NAME,
                use_sandbox=settings.IAP_SANDBOX_MODE,
            ),
        })

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        verifier = self.verifiers.get(request.platform.lower())
        if verifier is None:
            return VerifyResponse(valid=False, error="unknown platform")
        return verifier.verify(request)

    def validate_purchase_for_deck(
        self,
        request: VerifyRequest,
        free_decks: Iterable[str],
    ) -> VerifyResponse:
        if not is_paid_deck(request.deck_id, free_decks):
            return VerifyResponse(valid=True, deck_id=request.deck_id)

        if not request.receipt_data:
            raise ReceiptRequiredError("receipt required for paid deck")

        return self.verify(request)
