import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.models.talents import Talent
from talentdesk.models.marques import Marque
from talentdesk.models.negociations import Negociation, NegoLivrable, NegoCommentaire
from talentdesk.models.collaborations import Collaboration, CollabLivrable
from talentdesk.schemas.negociations import (
    NegociationCreate, NegociationUpdate, NegociationResponse,
    NegociationDetailResponse, NegoLivrableCreate, ValidationRequest,
    CommentaireCreate, CommentaireResponse
)
from talentdesk.dependencies import get_current_active_user, check_reviewer_role, is_reviewer
from talentdesk.utils import workflow
from talentdesk.utils.workflow import StatutNegociation, ReviewAction
from talentdesk.utils.billing import build_snapshot, snapshot_from_marque, apply_snapshot
from talentdesk.utils.commissions import (
    livrable_valide, total_brut, calculate_commission,
    default_commission_percent, quantize_money
)
from talentdesk.utils.numerotation import generer_reference
from talentdesk.utils.notifications import notifier_reviewers

logger = logging.getLogger(__name__)

router = APIRouter()

EDITOR_ROLES = {"ADMIN", "HEAD_OF"}


def get_negociation_or_404(db: Session, negociation_id: int) -> Negociation:
    negociation = db.query(Negociation).filter(Negociation.id == negociation_id).first()
    if not negociation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Négociation non trouvée"
        )
    return negociation


def _check_can_edit(negociation: Negociation, user: User) -> None:
    if negociation.tm_id != user.id and user.role not in EDITOR_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Non autorisé"
        )


def _check_can_read(negociation: Negociation, user: User) -> None:
    if user.role == "TM" and negociation.tm_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Non autorisé"
        )


def _check_marque(db: Session, marque_id: Optional[int], nom_marque_saisi: Optional[str]) -> None:
    """A negotiation names its brand either by id or by free text"""
    if marque_id is not None:
        if not db.query(Marque).filter(Marque.id == marque_id).first():
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Marque non trouvée"
            )
    elif not (nom_marque_saisi and nom_marque_saisi.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Sélectionnez une marque ou saisissez son nom"
        )


def _build_livrables(livrables: List[NegoLivrableCreate]) -> List[NegoLivrable]:
    return [NegoLivrable(**livrable.model_dump()) for livrable in livrables]


def _commenter(db: Session, negociation: Negociation, user: User, contenu: str) -> NegoCommentaire:
    commentaire = NegoCommentaire(negociation_id=negociation.id, user_id=user.id, contenu=contenu)
    db.add(commentaire)
    return commentaire


@router.post("", response_model=NegociationDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_negociation(
    negociation_data: NegociationCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create a draft negotiation owned by the current user
    """
    if not db.query(Talent).filter(Talent.id == negociation_data.talent_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Talent non trouvé"
        )
    _check_marque(db, negociation_data.marque_id, negociation_data.nom_marque_saisi)

    data = negociation_data.model_dump(exclude={"livrables"})
    if data.get("nom_marque_saisi"):
        data["nom_marque_saisi"] = data["nom_marque_saisi"].strip()

    negociation = Negociation(
        **data,
        reference=generer_reference(db, "NEG"),
        tm_id=current_user.id,
        statut=StatutNegociation.BROUILLON.value,
        modified_since_review=False,
        last_modified_at=datetime.utcnow()
    )
    negociation.livrables = _build_livrables(negociation_data.livrables)

    db.add(negociation)
    db.commit()
    db.refresh(negociation)

    logger.info(f"Negotiation {negociation.reference} created by user {current_user.id}")
    return negociation


@router.get("", response_model=List[NegociationResponse])
async def get_negociations(
    statut: Optional[StatutNegociation] = None,
    tm_id: Optional[int] = None,
    talent_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List negotiations, a TM only sees their own
    """
    query = db.query(Negociation)

    if current_user.role == "TM":
        query = query.filter(Negociation.tm_id == current_user.id)
    elif tm_id:
        query = query.filter(Negociation.tm_id == tm_id)

    if statut:
        query = query.filter(Negociation.statut == statut.value)
    if talent_id:
        query = query.filter(Negociation.talent_id == talent_id)

    return query.order_by(Negociation.id.desc()).offset(skip).limit(limit).all()


@router.get("/{negociation_id}", response_model=NegociationDetailResponse)
async def get_negociation(
    negociation_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get a negotiation with its deliverables and comments
    """
    negociation = get_negociation_or_404(db, negociation_id)
    _check_can_read(negociation, current_user)
    return negociation


@router.put("/{negociation_id}", response_model=NegociationDetailResponse)
async def update_negociation(
    negociation_id: int,
    negociation_data: NegociationUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a negotiation, the deliverables list is replaced when provided

    A refused negotiation is reopened as a draft; a pending one stays in
    review and is flagged as modified for the reviewers.
    """
    negociation = get_negociation_or_404(db, negociation_id)
    _check_can_edit(negociation, current_user)

    outcome = workflow.on_edit(negociation.statut)

    update_data = negociation_data.model_dump(exclude_unset=True, exclude={"livrables"})
    marque_id = update_data.get("marque_id", negociation.marque_id)
    nom_marque_saisi = update_data.get("nom_marque_saisi", negociation.nom_marque_saisi)
    _check_marque(db, marque_id, nom_marque_saisi)

    for key, value in update_data.items():
        if key == "nom_marque_saisi" and value:
            value = value.strip()
        setattr(negociation, key, value)

    if negociation_data.livrables is not None:
        negociation.livrables = _build_livrables(negociation_data.livrables)

    was_refused = outcome.reset_refus
    negociation.statut = outcome.statut.value
    negociation.last_modified_at = datetime.utcnow()
    if outcome.reset_refus:
        negociation.raison_refus = None
    if outcome.modified_since_review:
        negociation.modified_since_review = True

    if was_refused:
        _commenter(db, negociation, current_user, "Négociation rouverte et remise en brouillon pour modification")
        logger.info(f"Negotiation {negociation.reference} reopened after refusal")

    if outcome.modified_since_review:
        _commenter(db, negociation, current_user, "Négociation mise à jour")
        notifier_reviewers(
            db,
            type="NEGO_MODIFIEE",
            titre="Négociation modifiée",
            message=f"{current_user.full_name} a modifié la négociation {negociation.reference}",
            lien=f"/negociations/{negociation.id}",
            exclude_user_id=current_user.id
        )

    db.commit()
    db.refresh(negociation)
    return negociation


@router.delete("/{negociation_id}")
async def delete_negociation(
    negociation_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a negotiation that has not been converted
    """
    negociation = get_negociation_or_404(db, negociation_id)
    _check_can_edit(negociation, current_user)

    if not workflow.can_delete(negociation.statut, negociation.collaboration_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Impossible de supprimer, déjà convertie en collaboration"
        )

    db.delete(negociation)
    db.commit()

    logger.info(f"Negotiation {negociation.reference} deleted by user {current_user.id}")
    return {"message": "Négociation supprimée"}


@router.post("/{negociation_id}/soumettre", response_model=NegociationDetailResponse)
async def submit_negociation(
    negociation_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Submit a draft for review
    """
    negociation = get_negociation_or_404(db, negociation_id)
    _check_can_edit(negociation, current_user)

    nb_valides = sum(1 for livrable in negociation.livrables if livrable_valide(livrable))
    negociation.statut = workflow.submit(negociation.statut, nb_valides).value
    negociation.date_submitted = datetime.utcnow()
    negociation.modified_since_review = False

    notifier_reviewers(
        db,
        type="NEGO_SOUMISE",
        titre="Nouvelle négociation à valider",
        message=f"{current_user.full_name} a soumis la négociation {negociation.reference}",
        lien=f"/negociations/{negociation.id}",
        exclude_user_id=current_user.id
    )

    db.commit()
    db.refresh(negociation)

    logger.info(f"Negotiation {negociation.reference} submitted")
    return negociation


def _create_collaboration(
    db: Session,
    negociation: Negociation,
    validation: ValidationRequest,
    current_user: User
) -> Collaboration:
    """Convert a validated negotiation into its collaboration"""
    livrables = [livrable for livrable in negociation.livrables if livrable_valide(livrable)]
    if not livrables:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La négociation ne contient aucun livrable valide"
        )

    if negociation.budget_final is not None:
        montant_brut = negociation.budget_final
    else:
        montant_brut = total_brut(livrables)

    if validation.commission_percent is not None:
        commission_percent = validation.commission_percent
    else:
        commission_percent = default_commission_percent(negociation.talent, negociation.source)
    montants = calculate_commission(montant_brut, commission_percent)

    marque = negociation.marque
    if validation.billing is not None:
        snapshot = build_snapshot(validation.billing.model_dump())
    else:
        snapshot = snapshot_from_marque(marque)

    if marque is None:
        # Brand only known by name so far
        nom_marque = (negociation.nom_marque_saisi or "").strip()
        if not nom_marque:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Aucune marque associée à la négociation"
            )
        marque = Marque(nom=nom_marque)
        db.add(marque)
        negociation.marque = marque

    collaboration = Collaboration(
        reference=generer_reference(db, "COLLAB"),
        talent_id=negociation.talent_id,
        marque=marque,
        source=negociation.source,
        description=negociation.brief,
        montant_brut=quantize_money(montants["montant_brut"]),
        commission_percent=montants["commission_percent"],
        commission_euros=quantize_money(montants["commission_euros"]),
        montant_net=quantize_money(montants["montant_net"]),
        statut="GAGNE",
        created_by_id=current_user.id
    )
    apply_snapshot(collaboration, snapshot)
    collaboration.livrables = [
        CollabLivrable(
            type_contenu=livrable.type_contenu,
            quantite=livrable.quantite,
            prix_unitaire=livrable.prix_retenu,
            description=livrable.description
        )
        for livrable in livrables
    ]
    db.add(collaboration)
    db.flush()

    negociation.budget_final = montants["montant_brut"]
    negociation.collaboration_id = collaboration.id
    return collaboration


@router.post("/{negociation_id}/valider", response_model=NegociationDetailResponse)
async def review_negociation(
    negociation_id: int,
    validation: ValidationRequest,
    current_user: User = Depends(check_reviewer_role),
    db: Session = Depends(get_db)
):
    """
    Validate (creates the collaboration) or refuse a negotiation
    """
    negociation = get_negociation_or_404(db, negociation_id)

    if negociation.collaboration_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Déjà convertie en collaboration"
        )

    nouveau_statut = workflow.review(negociation.statut, validation.action)

    if validation.action == ReviewAction.VALIDER.value:
        collaboration = _create_collaboration(db, negociation, validation, current_user)
        logger.info(f"Negotiation {negociation.reference} validated into {collaboration.reference}")
    else:
        negociation.raison_refus = validation.raison_refus or None
        logger.info(f"Negotiation {negociation.reference} refused")

    negociation.statut = nouveau_statut.value
    negociation.valide_par = current_user.id
    negociation.date_validation = datetime.utcnow()
    negociation.reviewed_at = datetime.utcnow()
    negociation.modified_since_review = False

    db.commit()
    db.refresh(negociation)
    return negociation


@router.post("/{negociation_id}/annuler", response_model=NegociationDetailResponse)
async def cancel_negociation(
    negociation_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Cancel a negotiation
    """
    negociation = get_negociation_or_404(db, negociation_id)
    _check_can_edit(negociation, current_user)

    negociation.statut = workflow.cancel(negociation.statut).value
    negociation.last_modified_at = datetime.utcnow()

    db.commit()
    db.refresh(negociation)

    logger.info(f"Negotiation {negociation.reference} cancelled")
    return negociation


@router.post("/{negociation_id}/marquer-vu", response_model=NegociationDetailResponse)
async def mark_reviewed(
    negociation_id: int,
    current_user: User = Depends(check_reviewer_role),
    db: Session = Depends(get_db)
):
    """
    Acknowledge the latest changes of a negotiation
    """
    negociation = get_negociation_or_404(db, negociation_id)

    negociation.modified_since_review = False
    negociation.reviewed_at = datetime.utcnow()

    db.commit()
    db.refresh(negociation)
    return negociation


@router.post("/{negociation_id}/commentaires", response_model=CommentaireResponse, status_code=status.HTTP_201_CREATED)
async def add_commentaire(
    negociation_id: int,
    commentaire_data: CommentaireCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Comment a negotiation, a reviewer comment opens the discussion
    """
    negociation = get_negociation_or_404(db, negociation_id)
    _check_can_read(negociation, current_user)

    contenu = commentaire_data.contenu.strip()
    if not contenu:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Contenu obligatoire"
        )

    commentaire = _commenter(db, negociation, current_user, contenu)
    if is_reviewer(current_user):
        negociation.statut = workflow.on_reviewer_comment(negociation.statut).value

    db.commit()
    db.refresh(commentaire)
    return commentaire
