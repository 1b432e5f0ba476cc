from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel, Field


REQUIRED_FIELDS = ("raison_sociale", "adresse_rue", "code_postal", "ville", "pays")


class BillingSnapshot(BaseModel):
    """Client invoicing identity frozen on a collaboration"""
    raison_sociale: str = Field(..., min_length=1)
    adresse_rue: str = Field(..., min_length=1)
    code_postal: str = Field(..., min_length=1)
    ville: str = Field(..., min_length=1)
    pays: str = Field(..., min_length=1)
    siret: Optional[str] = None
    numero_tva: Optional[str] = None


def _incomplete(missing) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Informations de facturation incomplètes: {', '.join(missing)}"
    )


def build_snapshot(data: Dict[str, Any]) -> BillingSnapshot:
    """Validate a billing block, every required field must be non-blank"""
    cleaned = {key: (value.strip() if isinstance(value, str) else value) for key, value in data.items()}
    missing = [field for field in REQUIRED_FIELDS if not cleaned.get(field)]
    if missing:
        raise _incomplete(missing)
    return BillingSnapshot(
        raison_sociale=cleaned["raison_sociale"],
        adresse_rue=cleaned["adresse_rue"],
        code_postal=cleaned["code_postal"],
        ville=cleaned["ville"],
        pays=cleaned["pays"],
        siret=cleaned.get("siret") or None,
        numero_tva=cleaned.get("numero_tva") or None,
    )


def snapshot_from_marque(marque: Any) -> BillingSnapshot:
    """Freeze the brand's current billing profile, the legal name falls back to the brand name"""
    if marque is None:
        raise _incomplete(list(REQUIRED_FIELDS))
    return build_snapshot({
        "raison_sociale": marque.raison_sociale or marque.nom,
        "adresse_rue": marque.adresse_rue,
        "code_postal": marque.code_postal,
        "ville": marque.ville,
        "pays": marque.pays,
        "siret": marque.siret,
        "numero_tva": marque.numero_tva,
    })


def apply_snapshot(collaboration: Any, snapshot: BillingSnapshot) -> None:
    collaboration.billing_raison_sociale = snapshot.raison_sociale
    collaboration.billing_adresse_rue = snapshot.adresse_rue
    collaboration.billing_code_postal = snapshot.code_postal
    collaboration.billing_ville = snapshot.ville
    collaboration.billing_pays = snapshot.pays
    collaboration.billing_siret = snapshot.siret
    collaboration.billing_numero_tva = snapshot.numero_tva


def snapshot_of(collaboration: Any) -> BillingSnapshot:
    return BillingSnapshot(
        raison_sociale=collaboration.billing_raison_sociale,
        adresse_rue=collaboration.billing_adresse_rue,
        code_postal=collaboration.billing_code_postal,
        ville=collaboration.billing_ville,
        pays=collaboration.billing_pays,
        siret=collaboration.billing_siret,
        numero_tva=collaboration.billing_numero_tva,
    )
