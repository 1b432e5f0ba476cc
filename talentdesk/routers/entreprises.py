from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, Query

from talentdesk.models.users import User
from talentdesk.schemas.entreprises import EntrepriseResponse
from talentdesk.dependencies import get_current_active_user
from talentdesk.utils.entreprises import rechercher_entreprises

router = APIRouter()


def get_registry_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport used to reach the registry, None means the default network transport"""
    return None


@router.get("/recherche", response_model=List[EntrepriseResponse])
async def search_entreprises(
    query: str = Query(..., description="Nom, SIREN ou SIRET"),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_registry_transport),
    current_user: User = Depends(get_current_active_user)
):
    """
    Search a company in the registry to prefill a brand
    """
    return await rechercher_entreprises(query, transport=transport)
