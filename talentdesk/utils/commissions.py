from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException, status

from talentdesk.config import settings


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, for storage in Numeric(10, 2) columns and display"""
    return Decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return Decimal(str(value))


def _get(livrable: Any, key: str) -> Any:
    if isinstance(livrable, dict):
        return livrable.get(key)
    return getattr(livrable, key, None)


def prix_livrable(livrable: Any) -> Optional[Decimal]:
    """
    Unit price of a deliverable whatever its origin

    Collaboration deliverables carry prix_unitaire, negotiation deliverables
    carry prix_final / prix_souhaite / prix_demande (best known first).
    """
    for key in ("prix_unitaire", "prix_final", "prix_souhaite", "prix_demande"):
        value = _to_decimal(_get(livrable, key))
        if value is not None:
            return value
    return None


def livrable_valide(livrable: Any) -> bool:
    """A deliverable is valid when its content type and its price are set"""
    type_contenu = _get(livrable, "type_contenu")
    if type_contenu is None or not str(type_contenu).strip():
        return False
    return prix_livrable(livrable) is not None


def total_livrable(quantite: Any, prix_unitaire: Any) -> Decimal:
    return Decimal(str(quantite or 0)) * Decimal(str(prix_unitaire or 0))


def total_brut(livrables: Iterable[Any]) -> Decimal:
    """Sum of quantite x unit price, exact (no rounding until display)"""
    total = Decimal('0')
    for livrable in livrables:
        prix = prix_livrable(livrable)
        if prix is None:
            continue
        quantite = _get(livrable, "quantite")
        total += total_livrable(1 if quantite is None else quantite, prix)
    return total


def validate_commission_percent(commission_percent: Any) -> Decimal:
    percent = _to_decimal(commission_percent)
    if percent is None or percent < 0 or percent > 100:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le pourcentage de commission doit être compris entre 0 et 100"
        )
    return percent


def calculate_commission(montant_brut: Any, commission_percent: Any) -> Dict[str, Decimal]:
    """
    Split a gross amount between the agency and the talent

    Args:
        montant_brut: Gross amount of the deal
        commission_percent: Agency commission, in [0, 100]

    Returns:
        Dictionary with montant_brut, commission_percent, commission_euros and montant_net
    """
    brut = _to_decimal(montant_brut) or Decimal('0')
    percent = validate_commission_percent(commission_percent)

    commission_euros = brut * percent / Decimal('100')
    montant_net = brut - commission_euros

    return {
        "montant_brut": brut,
        "commission_percent": percent,
        "commission_euros": commission_euros,
        "montant_net": montant_net
    }


def default_commission_percent(talent: Any, source: str) -> Decimal:
    """Talent's inbound or outbound rate, falling back to the agency defaults"""
    if source == "OUTBOUND":
        value = _get(talent, "commission_outbound")
        fallback = settings.DEFAULT_COMMISSION_OUTBOUND
    else:
        value = _get(talent, "commission_inbound")
        fallback = settings.DEFAULT_COMMISSION_INBOUND
    percent = _to_decimal(value)
    return percent if percent is not None else Decimal(fallback)
