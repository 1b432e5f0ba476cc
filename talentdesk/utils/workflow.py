"""
Negotiation and document state machines

Each rule is a pure function of the current state: it returns the next
state (or the flags to apply) and raises an HTTP 400 when the action is
not allowed, so routers only persist the outcome.
"""
from enum import Enum
from typing import NamedTuple, Optional

from fastapi import HTTPException, status


class StatutNegociation(str, Enum):
    BROUILLON = "BROUILLON"
    EN_ATTENTE = "EN_ATTENTE"
    EN_DISCUSSION = "EN_DISCUSSION"
    VALIDEE = "VALIDEE"
    REFUSEE = "REFUSEE"
    ANNULEE = "ANNULEE"


class StatutDocument(str, Enum):
    BROUILLON = "BROUILLON"
    VALIDE = "VALIDE"
    ENVOYE = "ENVOYE"
    PAYE = "PAYE"
    ACCEPTE = "ACCEPTE"
    REFUSE = "REFUSE"
    ANNULE = "ANNULE"


class ReviewAction(str, Enum):
    VALIDER = "valider"
    REFUSER = "refuser"


REVIEWABLE = {StatutNegociation.EN_ATTENTE, StatutNegociation.EN_DISCUSSION}
NON_EDITABLE = {StatutNegociation.VALIDEE, StatutNegociation.ANNULEE}

DOCUMENT_PIPELINE = [
    StatutDocument.BROUILLON,
    StatutDocument.VALIDE,
    StatutDocument.ENVOYE,
    StatutDocument.PAYE,
]
CLOSED_DOCUMENT = {StatutDocument.ANNULE, StatutDocument.REFUSE}
CONVERTIBLE = {StatutDocument.VALIDE, StatutDocument.ACCEPTE}
CREDITABLE = {StatutDocument.ENVOYE, StatutDocument.PAYE}


def _conflict(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


# Negotiation rules

class EditOutcome(NamedTuple):
    statut: StatutNegociation
    reset_refus: bool
    modified_since_review: bool


def on_edit(statut: str) -> EditOutcome:
    """
    Effect of an owner edit on a negotiation

    REFUSEE reopens to BROUILLON and clears the refusal reason. Pending
    records keep their state and get flagged as modified since review.
    """
    current = StatutNegociation(statut)
    if current in NON_EDITABLE:
        raise _conflict(f"Impossible de modifier une négociation au statut {current.value}")
    if current == StatutNegociation.REFUSEE:
        return EditOutcome(StatutNegociation.BROUILLON, True, False)
    if current in REVIEWABLE:
        return EditOutcome(current, False, True)
    return EditOutcome(current, False, False)


def submit(statut: str, nb_livrables_valides: int) -> StatutNegociation:
    current = StatutNegociation(statut)
    if current != StatutNegociation.BROUILLON:
        raise _conflict(f"Impossible de soumettre une négociation au statut {current.value}")
    if nb_livrables_valides <= 0:
        raise _conflict("Ajoutez au moins un livrable avant de soumettre")
    return StatutNegociation.EN_ATTENTE


def review(statut: str, action: str) -> StatutNegociation:
    try:
        decision = ReviewAction(action)
    except ValueError:
        raise _conflict("Action invalide")
    current = StatutNegociation(statut)
    if current not in REVIEWABLE:
        raise _conflict(f"Impossible de traiter une négociation au statut {current.value}")
    if decision == ReviewAction.VALIDER:
        return StatutNegociation.VALIDEE
    return StatutNegociation.REFUSEE


def on_reviewer_comment(statut: str) -> StatutNegociation:
    """A reviewer commenting on a pending negotiation opens the discussion"""
    current = StatutNegociation(statut)
    if current == StatutNegociation.EN_ATTENTE:
        return StatutNegociation.EN_DISCUSSION
    return current


def cancel(statut: str) -> StatutNegociation:
    current = StatutNegociation(statut)
    if current in NON_EDITABLE:
        raise _conflict(f"Impossible d'annuler une négociation au statut {current.value}")
    return StatutNegociation.ANNULEE


def can_delete(statut: str, collaboration_id: Optional[int]) -> bool:
    return StatutNegociation(statut) != StatutNegociation.VALIDEE and collaboration_id is None


# Document rules

def pipeline_index(statut: str) -> int:
    current = StatutDocument(statut)
    if current in CLOSED_DOCUMENT:
        return -1
    if current == StatutDocument.ACCEPTE:
        return DOCUMENT_PIPELINE.index(StatutDocument.ENVOYE)
    return DOCUMENT_PIPELINE.index(current)


def advance(statut: str, target: str) -> StatutDocument:
    """
    Move a document forward in BROUILLON -> VALIDE -> ENVOYE -> PAYE

    Only strictly later steps are accepted; ANNULE and REFUSE block everything.
    """
    current = StatutDocument(statut)
    wanted = StatutDocument(target)
    if current == StatutDocument.ANNULE:
        raise _conflict("Ce document est annulé")
    if current == StatutDocument.REFUSE:
        raise _conflict("Ce devis a été refusé par le client")
    if wanted == StatutDocument.ANNULE:
        raise _conflict("Utilisez l'annulation avec un motif")
    if wanted in {StatutDocument.ACCEPTE, StatutDocument.REFUSE}:
        raise _conflict("Utilisez l'acceptation ou le refus du devis")
    if pipeline_index(wanted) <= pipeline_index(current):
        raise _conflict(f"Ce document est déjà au statut {current.value}")
    return wanted


def check_editable(statut: str) -> None:
    current = StatutDocument(statut)
    if current != StatutDocument.BROUILLON:
        raise _conflict(f"Seul un document en brouillon peut être modifié (statut actuel: {current.value})")


def decide_quote(type: str, statut: str, accepted: bool) -> StatutDocument:
    """Client answer to a sent quote: ENVOYE -> ACCEPTE or REFUSE"""
    action = "accepté" if accepted else "refusé"
    if type != "DEVIS":
        raise _conflict(f"Seul un devis peut être {action}")
    current = StatutDocument(statut)
    if current != StatutDocument.ENVOYE:
        raise _conflict(f"Ce devis ne peut pas être {action} (statut actuel: {current.value})")
    return StatutDocument.ACCEPTE if accepted else StatutDocument.REFUSE


def check_convertible(type: str, statut: str) -> None:
    if type != "DEVIS":
        raise _conflict("Ce document n'est pas un devis")
    current = StatutDocument(statut)
    if current not in CONVERTIBLE:
        raise _conflict(
            f"Le devis doit être validé ou accepté pour être converti. Statut actuel: {current.value}"
        )


def check_credit_note_source(type: str, statut: str, avoir_ref: Optional[str]) -> None:
    """A credit note cancels an invoice already sent to the client or paid"""
    if type != "FACTURE":
        raise _conflict("Seule une facture peut être annulée par un avoir")
    if avoir_ref:
        raise _conflict(f"Un avoir existe déjà pour cette facture ({avoir_ref})")
    current = StatutDocument(statut)
    if current not in CREDITABLE:
        raise _conflict(
            f"Un avoir ne concerne qu'une facture envoyée ou payée (statut actuel: {current.value})"
        )


def cancel_document(statut: str, motif: Optional[str]) -> StatutDocument:
    current = StatutDocument(statut)
    if not motif or not motif.strip():
        raise _conflict("Un motif d'annulation est requis")
    if current == StatutDocument.ANNULE:
        raise _conflict("Ce document est déjà annulé")
    if current == StatutDocument.PAYE:
        raise _conflict("Impossible d'annuler un document déjà payé. Créez un avoir.")
    return StatutDocument.ANNULE
