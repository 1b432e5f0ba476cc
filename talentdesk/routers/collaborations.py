import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from talentdesk.config import settings
from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.models.talents import Talent
from talentdesk.models.marques import Marque
from talentdesk.models.collaborations import Collaboration, CollabLivrable
from talentdesk.schemas.collaborations import (
    CollaborationCreate, CollaborationUpdate, CollaborationPatch,
    CollaborationResponse, CollaborationDetailResponse, CollabLivrableCreate,
    CommissionRequest, CommissionResponse, StatutCollaboration
)
from talentdesk.dependencies import get_current_active_user, is_reviewer
from talentdesk.utils.billing import build_snapshot, apply_snapshot
from talentdesk.utils.commissions import (
    livrable_valide, total_brut, calculate_commission,
    default_commission_percent, quantize_money
)
from talentdesk.utils.numerotation import generer_reference

logger = logging.getLogger(__name__)

router = APIRouter()


def get_collaboration_or_404(db: Session, collaboration_id: int) -> Collaboration:
    collaboration = db.query(Collaboration).filter(Collaboration.id == collaboration_id).first()
    if not collaboration:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Collaboration non trouvée"
        )
    return collaboration


def check_talent_access(user: User, talent: Talent) -> None:
    """Reviewers act on every talent, a TM only on the talents they manage"""
    if is_reviewer(user):
        return
    if user.role == "TM" and talent is not None and talent.manager_id == user.id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Vous ne gérez pas ce talent"
    )


def _valid_livrables(livrables: List[CollabLivrableCreate]) -> List[CollabLivrable]:
    valides = [livrable for livrable in livrables if livrable_valide(livrable.model_dump())]
    if not valides:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Au moins un livrable avec un type et un prix est requis"
        )
    return [
        CollabLivrable(
            type_contenu=livrable.type_contenu.strip(),
            quantite=livrable.quantite,
            prix_unitaire=livrable.prix_unitaire,
            description=livrable.description
        )
        for livrable in valides
    ]


def _apply_montants(collaboration: Collaboration, montant_brut, commission_percent) -> None:
    montants = calculate_commission(montant_brut, commission_percent)
    collaboration.montant_brut = quantize_money(montants["montant_brut"])
    collaboration.commission_percent = montants["commission_percent"]
    collaboration.commission_euros = quantize_money(montants["commission_euros"])
    collaboration.montant_net = quantize_money(montants["montant_net"])


def _check_no_active_invoice(collaboration: Collaboration) -> None:
    """Deliverables, amounts and billing are frozen once an invoice is issued"""
    for document in collaboration.documents:
        if document.type == "FACTURE" and document.statut != "ANNULE":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"La facture {document.reference} fige les livrables et la facturation. "
                       f"Annulez-la ou créez un avoir avant de les modifier"
            )


def _check_marque(db: Session, marque_id: Optional[int]) -> None:
    if marque_id is not None and not db.query(Marque).filter(Marque.id == marque_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Marque non trouvée"
        )


@router.post("/calculer-commission", response_model=CommissionResponse)
async def preview_commission(
    request_data: CommissionRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Preview the commission split of an amount or a list of deliverables
    """
    if request_data.montant_brut is not None:
        montant_brut = request_data.montant_brut
    elif request_data.livrables:
        montant_brut = total_brut([livrable.model_dump() for livrable in request_data.livrables])
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Indiquez un montant brut ou des livrables"
        )

    commission_percent = request_data.commission_percent
    if commission_percent is None:
        talent = None
        if request_data.talent_id is not None:
            talent = db.query(Talent).filter(Talent.id == request_data.talent_id).first()
        if talent is not None:
            commission_percent = default_commission_percent(talent, request_data.source)
        elif request_data.source == "OUTBOUND":
            commission_percent = settings.DEFAULT_COMMISSION_OUTBOUND
        else:
            commission_percent = settings.DEFAULT_COMMISSION_INBOUND

    montants = calculate_commission(montant_brut, commission_percent)
    return {
        "montant_brut": quantize_money(montants["montant_brut"]),
        "commission_percent": montants["commission_percent"],
        "commission_euros": quantize_money(montants["commission_euros"]),
        "montant_net": quantize_money(montants["montant_net"])
    }


@router.post("", response_model=CollaborationDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_collaboration(
    collaboration_data: CollaborationCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create a collaboration directly, with its deliverables and billing snapshot
    """
    talent = db.query(Talent).filter(Talent.id == collaboration_data.talent_id).first()
    if not talent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Talent non trouvé"
        )
    check_talent_access(current_user, talent)
    _check_marque(db, collaboration_data.marque_id)

    livrables = _valid_livrables(collaboration_data.livrables)

    if collaboration_data.billing is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Les informations de facturation sont requises"
        )
    snapshot = build_snapshot(collaboration_data.billing.model_dump())

    commission_percent = collaboration_data.commission_percent
    if commission_percent is None:
        commission_percent = default_commission_percent(talent, collaboration_data.source)

    collaboration = Collaboration(
        reference=generer_reference(db, "COLLAB"),
        talent_id=talent.id,
        marque_id=collaboration_data.marque_id,
        source=collaboration_data.source,
        description=collaboration_data.description,
        statut=StatutCollaboration.NEGO.value,
        created_by_id=current_user.id
    )
    collaboration.livrables = livrables
    apply_snapshot(collaboration, snapshot)
    _apply_montants(collaboration, total_brut(collaboration.livrables), commission_percent)

    db.add(collaboration)
    db.commit()
    db.refresh(collaboration)

    logger.info(f"Collaboration {collaboration.reference} created by user {current_user.id}")
    return collaboration


@router.get("", response_model=List[CollaborationResponse])
async def get_collaborations(
    statut: Optional[StatutCollaboration] = None,
    talent_id: Optional[int] = None,
    marque_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List collaborations, a TM only sees those of their talents
    """
    query = db.query(Collaboration)

    if current_user.role == "TM":
        query = query.join(Talent, Collaboration.talent_id == Talent.id).filter(Talent.manager_id == current_user.id)

    if statut:
        query = query.filter(Collaboration.statut == statut.value)
    if talent_id:
        query = query.filter(Collaboration.talent_id == talent_id)
    if marque_id:
        query = query.filter(Collaboration.marque_id == marque_id)

    return query.order_by(Collaboration.id.desc()).offset(skip).limit(limit).all()


@router.get("/{collaboration_id}", response_model=CollaborationDetailResponse)
async def get_collaboration(
    collaboration_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get a collaboration with its deliverables, billing snapshot and documents
    """
    collaboration = get_collaboration_or_404(db, collaboration_id)
    if current_user.role == "TM":
        check_talent_access(current_user, collaboration.talent)
    return collaboration


@router.put("/{collaboration_id}", response_model=CollaborationDetailResponse)
async def update_collaboration(
    collaboration_id: int,
    collaboration_data: CollaborationUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a collaboration

    Amounts are only recomputed when deliverables, gross amount or commission
    are sent: an explicit montant_brut wins, then the deliverables sum,
    otherwise the stored gross amount is kept. The billing snapshot only
    changes through an explicit billing block.
    """
    collaboration = get_collaboration_or_404(db, collaboration_id)
    check_talent_access(current_user, collaboration.talent)

    recompute = collaboration_data.livrables is not None \
        or collaboration_data.montant_brut is not None \
        or collaboration_data.commission_percent is not None
    if recompute or collaboration_data.billing is not None:
        _check_no_active_invoice(collaboration)

    update_data = collaboration_data.model_dump(
        exclude_unset=True,
        exclude={"livrables", "billing", "commission_percent", "montant_brut"}
    )
    if "marque_id" in update_data:
        _check_marque(db, update_data["marque_id"])
    for key, value in update_data.items():
        if value is not None or key == "marque_id":
            setattr(collaboration, key, value)

    if collaboration_data.livrables is not None:
        collaboration.livrables = _valid_livrables(collaboration_data.livrables)

    if collaboration_data.billing is not None:
        apply_snapshot(collaboration, build_snapshot(collaboration_data.billing.model_dump()))

    if recompute:
        if collaboration_data.montant_brut is not None:
            montant_brut = collaboration_data.montant_brut
        elif collaboration_data.livrables is not None:
            montant_brut = total_brut(collaboration.livrables)
        else:
            montant_brut = collaboration.montant_brut
        commission_percent = collaboration_data.commission_percent
        if commission_percent is None:
            commission_percent = collaboration.commission_percent
        _apply_montants(collaboration, montant_brut, commission_percent)

    db.commit()
    db.refresh(collaboration)
    return collaboration


@router.patch("/{collaboration_id}", response_model=CollaborationDetailResponse)
async def patch_collaboration(
    collaboration_id: int,
    patch_data: CollaborationPatch,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Change the status of a collaboration or record its publication
    """
    collaboration = get_collaboration_or_404(db, collaboration_id)
    check_talent_access(current_user, collaboration.talent)

    if patch_data.statut is not None:
        if patch_data.statut == StatutCollaboration.PERDU:
            raison = (patch_data.raison_perdu or "").strip()
            if not raison:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="La raison de la perte est obligatoire"
                )
            collaboration.raison_perdu = raison
        if patch_data.statut == StatutCollaboration.PAYE and not collaboration.paid_at:
            collaboration.paid_at = datetime.utcnow()
        if patch_data.statut == StatutCollaboration.PUBLIE and not (patch_data.date_publication or collaboration.date_publication):
            collaboration.date_publication = datetime.utcnow()
        logger.info(f"Collaboration {collaboration.reference}: {collaboration.statut} -> {patch_data.statut.value}")
        collaboration.statut = patch_data.statut.value

    if patch_data.lien_publication is not None:
        collaboration.lien_publication = patch_data.lien_publication
    if patch_data.date_publication is not None:
        collaboration.date_publication = patch_data.date_publication

    db.commit()
    db.refresh(collaboration)
    return collaboration


@router.delete("/{collaboration_id}")
async def delete_collaboration(
    collaboration_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a collaboration without active documents
    """
    collaboration = get_collaboration_or_404(db, collaboration_id)
    check_talent_access(current_user, collaboration.talent)

    if any(document.statut != "ANNULE" for document in collaboration.documents):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Impossible de supprimer une collaboration avec des documents actifs"
        )

    if collaboration.negociation is not None:
        collaboration.negociation.collaboration_id = None
    for document in list(collaboration.documents):
        db.delete(document)
    db.delete(collaboration)
    db.commit()

    logger.info(f"Collaboration {collaboration.reference} deleted by user {current_user.id}")
    return {"message": "Collaboration supprimée"}
