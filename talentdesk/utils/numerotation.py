import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from talentdesk.models.compteurs import Compteur

logger = logging.getLogger(__name__)

# Counter type -> reference prefix
PREFIXES = {
    "NEG": "NEG",
    "COLLAB": "COL",
    "DEVIS": "D",
    "FACTURE": "F",
    "AVOIR": "A",
}


def generer_reference(db: Session, type_compteur: str, annee: Optional[int] = None) -> str:
    """
    Next reference for a yearly counter

    Format: PREFIX-YYYY-NNNN (ex: F-2026-0001). The counter row is created
    on first use and incremented in the caller's transaction.
    """
    annee = annee or datetime.utcnow().year
    prefixe = PREFIXES[type_compteur]

    compteur = db.query(Compteur).filter(
        Compteur.type == type_compteur,
        Compteur.annee == annee
    ).first()

    if not compteur:
        compteur = Compteur(type=type_compteur, annee=annee, dernier_numero=0)
        db.add(compteur)

    compteur.dernier_numero = (compteur.dernier_numero or 0) + 1
    db.flush()

    reference = f"{prefixe}-{annee}-{compteur.dernier_numero:04d}"
    logger.info(f"Reference generated: {reference}")
    return reference
