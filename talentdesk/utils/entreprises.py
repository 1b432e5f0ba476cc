import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import HTTPException, status

from talentdesk.config import settings

logger = logging.getLogger(__name__)


def normalize_entreprise(resultat: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one registry hit into the fields used to prefill a brand"""
    siege = resultat.get("siege") or {}
    adresse = " ".join(
        part for part in (siege.get("adresse_ligne_1"), siege.get("adresse_ligne_2")) if part
    )
    return {
        "nom_entreprise": resultat.get("nom_entreprise") or resultat.get("denomination"),
        "siren": resultat.get("siren"),
        "siret": siege.get("siret") or resultat.get("siret"),
        "numero_tva": resultat.get("numero_tva_intracommunautaire"),
        "adresse": adresse or None,
        "code_postal": siege.get("code_postal"),
        "ville": siege.get("ville"),
        "pays": siege.get("pays") or "France",
    }


async def rechercher_entreprises(
    query: str,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> List[Dict[str, Any]]:
    """
    Search the company registry (Pappers) by name or SIREN/SIRET

    Args:
        query: Search text, at least 2 characters
        transport: Optional httpx transport, used to stub the registry

    Returns:
        List of normalized companies
    """
    query = (query or "").strip()
    if len(query) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La recherche doit contenir au moins 2 caractères"
        )

    if not settings.PAPPERS_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="La recherche d'entreprises n'est pas configurée"
        )

    params = {
        "api_token": settings.PAPPERS_API_KEY,
        "q": query,
        "par_page": 10,
    }

    async with httpx.AsyncClient(transport=transport, timeout=settings.PAPPERS_TIMEOUT_SECONDS) as client:
        try:
            response = await client.get(settings.PAPPERS_API_URL, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Company registry unreachable: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Le registre des entreprises est injoignable"
            )

    if response.status_code != 200:
        logger.warning(f"Company registry returned {response.status_code} for {query!r}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Erreur lors de la recherche d'entreprises"
        )

    resultats = response.json().get("resultats") or []
    return [normalize_entreprise(resultat) for resultat in resultats]
