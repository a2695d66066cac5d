from fastapi import APIRouter, Depends

from flashdeck.api.dependencies import get_generator
from flashdeck.schemas.decks import Catalog
from flashdeck.services.generator import DeckGenerator

router = APIRouter(tags=["catalog"])


@router.get("/catalog", response_model=Catalog, response_model_exclude_none=True)
def get_catalog(generator: DeckGenerator = Depends(get_generator)):
    return generator.get_catalog()
