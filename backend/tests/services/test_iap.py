import pytest
import requests

from flashdeck.core.errors import ReceiptRequiredError, ReceiptVerificationError
from flashdeck.schemas.receipts import VerifyRequest
from flashdeck.services.iap import (
    APPLE_PRODUCTION_URL,
    APPLE_SANDBOX_URL,
    AppleReceiptVerifier,
    GooglePlayReceiptVerifier,
    ReceiptValidator,
    is_paid_deck,
)

PRODUCT = "com.example.duolingocards.deck.spanish-travel"


def ios_request(**overrides) -> VerifyRequest:
    data = dict(platform="ios", receipt_data="base64receipt", product_id=PRODUCT, deck_id="spanish-travel")
    data.update(overrides)
    return VerifyRequest(**data)


def apple_body(status=0, products=(PRODUCT,)):
    return {"status": status, "receipt": {"in_app": [{"product_id": p} for p in products]}}


class TestAppleVerifier:
    def test_valid_purchase(self, fake_session, fake_response):
        session = fake_session(fake_response(json_data=apple_body()))
        verifier = AppleReceiptVerifier(shared_secret="s3cret", session=session)

        result = verifier.verify(ios_request())

        assert result.valid
        assert result.deck_id == "spanish-travel"
        assert result.product_id == PRODUCT
        method, url, kwargs = session.requests[0]
        assert url == APPLE_PRODUCTION_URL
        assert kwargs["json"] == {
            "receipt-data": "base64receipt",
            "exclude-old-transactions": True,
            "password": "s3cret",
        }

    def test_no_password_without_secret(self, fake_session, fake_response):
        session = fake_session(fake_response(json_data=apple_body()))
        AppleReceiptVerifier(use_sandbox=True, session=session).verify(ios_request())

        _, url, kwargs = session.requests[0]
        assert url == APPLE_SANDBOX_URL
        assert "password" not in kwargs["json"]

    def test_sandbox_receipt_retries_once(self, fake_session, fake_response):
        """21007 from production is retried against sandbox, the second answer decides."""
        session = fake_session(
            fake_response(json_data={"status": 21007}),
            fake_response(json_data=apple_body()),
        )
        result = AppleReceiptVerifier(session=session).verify(ios_request())

        assert result.valid
        assert [url for _, url, _ in session.requests] == [APPLE_PRODUCTION_URL, APPLE_SANDBOX_URL]

    def test_sandbox_retry_result_is_final(self, fake_session, fake_response):
        session = fake_session(
            fake_response(json_data={"status": 21007}),
            fake_response(json_data={"status": 21007}),
        )
        result = AppleReceiptVerifier(session=session).verify(ios_request())

        assert not result.valid
        assert result.error == "apple verification failed: status 21007"
        assert len(session.requests) == 2

    def test_bad_status(self, fake_session, fake_response):
        session = fake_session(fake_response(json_data={"status": 21003}))
        result = AppleReceiptVerifier(use_sandbox=True, session=session).verify(ios_request())

        assert not result.valid
        assert result.error == "apple verification failed: status 21003"

    def test_missing_status_reads_as_ok(self, fake_session, fake_response):
        body = apple_body()
        del body["status"]
        session = fake_session(fake_response(json_data=body))
        result = AppleReceiptVerifier(use_sandbox=True, session=session).verify(ios_request())

        assert result.valid
        assert result.deck_id == "spanish-travel"

    def test_missing_status_without_purchases(self, fake_session, fake_response):
        session = fake_session(fake_response(json_data={}))
        result = AppleReceiptVerifier(use_sandbox=True, session=session).verify(ios_request())

        assert not result.valid
        assert "None" not in result.error
        assert result.error == "no in-app purchases in receipt"

    def test_empty_in_app(self, fake_session, fake_response):
        session = fake_session(fake_response(json_data=apple_body(products=())))
        result = AppleReceiptVerifier(use_sandbox=True, session=session).verify(ios_request())

        assert not result.valid
        assert result.error == "no in-app purchases in receipt"

    def test_product_not_in_receipt(self, fake_session, fake_response):
        session = fake_session(fake_response(json_data=apple_body(products=("com.other.product",))))
        result = AppleReceiptVerifier(use_sandbox=True, session=session).verify(ios_request())

        assert not result.valid
        assert result.error == "product not found in receipt"

    def test_transport_error(self, fake_session):
        session = fake_session(requests.ConnectionError("connection refused"))

        with pytest.raises(ReceiptVerificationError):
            AppleReceiptVerifier(session=session).verify(ios_request())

    def test_undecodable_answer(self, fake_session, fake_response):
        session = fake_session(fake_response(text="<html>"))

        with pytest.raises(ReceiptVerificationError):
            AppleReceiptVerifier(session=session).verify(ios_request())


class TestGooglePlayVerifier:
    def test_accepts_token(self):
        result = GooglePlayReceiptVerifier().verify(ios_request(platform="android"))

        assert result.valid
        assert result.product_id == PRODUCT

    def test_rejects_empty_token_outside_sandbox(self):
        result = GooglePlayReceiptVerifier(use_sandbox=False).verify(ios_request(platform="android", receipt_data=""))

        assert not result.valid
        assert result.error == "empty receipt data"

    def test_sandbox_accepts_empty_token(self):
        result = GooglePlayReceiptVerifier(use_sandbox=True).verify(ios_request(platform="android", receipt_data=""))

        assert result.valid


class TestReceiptValidator:
    def test_unknown_platform(self):
        validator = ReceiptValidator({"android": GooglePlayReceiptVerifier()})
        result = validator.verify(ios_request(platform="windows"))

        assert not result.valid
        assert result.error == "unknown platform"

    def test_platform_is_case_insensitive(self):
        validator = ReceiptValidator({"Android": GooglePlayReceiptVerifier()})

        assert validator.verify(ios_request(platform="ANDROID")).valid

    def test_free_deck_needs_no_receipt(self):
        validator = ReceiptValidator({})
        result = validator.validate_purchase_for_deck(
            VerifyRequest(deck_id="japanese-basics"),
            ["japanese-basics"],
        )

        assert result.valid
        assert result.deck_id == "japanese-basics"

    def test_paid_deck_without_receipt(self):
        validator = ReceiptValidator({"android": GooglePlayReceiptVerifier()})

        with pytest.raises(ReceiptRequiredError):
            validator.validate_purchase_for_deck(
                ios_request(platform="android", receipt_data=""),
                ["japanese-basics"],
            )

    def test_paid_deck_with_receipt(self):
        validator = ReceiptValidator({"android": GooglePlayReceiptVerifier()})
        result = validator.validate_purchase_for_deck(ios_request(platform="android"), ["japanese-basics"])

        assert result.valid

    def test_is_paid_deck(self):
        assert is_paid_deck("spanish-travel", ["japanese-basics"])
        assert not is_paid_deck("japanese-basics", ["japanese-basics"])
