from fastapi import APIRouter, Depends, HTTPException

from flashdeck.api.dependencies import get_validator
from flashdeck.core.errors import UpstreamError
from flashdeck.schemas.receipts import VerifyRequest, VerifyResponse
from flashdeck.services.iap import ReceiptValidator

router = APIRouter(tags=["receipts"])


@router.post("/receipts/verify", response_model=VerifyResponse, response_model_exclude_none=True)
def verify_receipt(payload: VerifyRequest, validator: ReceiptValidator = Depends(get_validator)):
    if not payload.platform or not payload.receipt_data:
        raise HTTPException(status_code=400, detail="platform and receiptData required")

    try:
        return validator.verify(payload)
    except UpstreamError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
