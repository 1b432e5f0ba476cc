import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from talentdesk.config import settings
from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.models.talents import Talent
from talentdesk.models.collaborations import Collaboration
from talentdesk.models.documents import Document, DocumentLigne, DocumentEvent, DocumentComment
from talentdesk.schemas.documents import (
    DocumentCreate, DocumentResponse, DocumentDetailResponse,
    DocumentUpdate, PaiementRequest, AnnulationRequest, RefusRequest, AvoirRequest,
    CommentCreate, CommentResponse, TypeDocument
)
from talentdesk.dependencies import (
    get_current_active_user, check_admin_role, check_reviewer_role,
    check_document_sender_role, check_document_creator_role
)
from talentdesk.routers.collaborations import get_collaboration_or_404, check_talent_access
from talentdesk.utils import workflow
from talentdesk.utils.workflow import StatutDocument
from talentdesk.utils.billing import snapshot_of
from talentdesk.utils.commissions import quantize_money
from talentdesk.utils.numerotation import generer_reference
from talentdesk.utils.notifications import notifier
from talentdesk.utils.pdf import generate_document_pdf
from talentdesk.utils.tarifs import resolve_content_type
from talentdesk.utils.tva import get_type_tva, get_mention_tva, taux_tva, date_echeance_fin_de_mois

logger = logging.getLogger(__name__)

router = APIRouter()


def get_document_or_404(db: Session, document_id: int) -> Document:
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document non trouvé"
        )
    return document


def _log_event(db: Session, document: Document, type: str, user: User, description: Optional[str] = None) -> None:
    db.add(DocumentEvent(document_id=document.id, type=type, user_id=user.id, description=description))


def _lignes_from_collaboration(collaboration: Collaboration) -> List[dict]:
    lignes = []
    for livrable in collaboration.livrables:
        content_type = resolve_content_type(livrable.type_contenu)
        libelle = content_type.label if content_type else livrable.type_contenu
        description = f"{libelle} - {livrable.description}" if livrable.description else libelle
        lignes.append({
            "description": description,
            "quantite": Decimal(livrable.quantite or 1),
            "prix_unitaire_ht": livrable.prix_unitaire
        })
    return lignes


def _build_lignes(lignes: List[dict], taux: Decimal) -> List[DocumentLigne]:
    return [
        DocumentLigne(
            ordre=i + 1,
            description=ligne["description"],
            quantite=ligne["quantite"],
            prix_unitaire_ht=ligne["prix_unitaire_ht"],
            taux_tva=taux
        )
        for i, ligne in enumerate(lignes)
    ]


def _apply_totaux(document: Document, lignes: List[dict], taux: Decimal) -> None:
    """Set HT / TVA / TTC from the line items"""
    total_ht = Decimal('0')
    for ligne in lignes:
        total_ht += Decimal(str(ligne["quantite"])) * Decimal(str(ligne["prix_unitaire_ht"]))
    total_tva = total_ht * taux / Decimal('100')
    document.montant_ht = quantize_money(total_ht)
    document.montant_tva = quantize_money(total_tva)
    document.montant_ttc = document.montant_ht + document.montant_tva


def _facture_active(db: Session, collaboration_id: int) -> Optional[Document]:
    return db.query(Document).filter(
        Document.collaboration_id == collaboration_id,
        Document.type == TypeDocument.FACTURE.value,
        Document.statut != StatutDocument.ANNULE.value
    ).first()


def _append_note(document: Document, mention: str) -> None:
    document.notes = f"{document.notes}\n{mention}" if document.notes else mention


def _notify_manager(db: Session, document: Document, type: str, titre: str, message: str) -> None:
    talent = document.collaboration.talent
    if talent is not None and talent.manager_id:
        notifier(db, talent.manager_id, type=type, titre=titre, message=message, lien=f"/documents/{document.id}")


@router.post("", response_model=DocumentDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    current_user: User = Depends(check_document_creator_role),
    db: Session = Depends(get_db)
):
    """
    Generate a quote or an invoice for a collaboration

    Lines default to the collaboration's deliverables. The VAT regime comes
    from the billing snapshot, never from the brand's current profile.
    """
    collaboration = get_collaboration_or_404(db, document_data.collaboration_id)
    check_talent_access(current_user, collaboration.talent)

    if document_data.type == TypeDocument.AVOIR:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Un avoir se crée depuis la facture qu'il annule"
        )

    if document_data.type == TypeDocument.FACTURE:
        facture_active = _facture_active(db, collaboration.id)
        if facture_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Une facture existe déjà pour cette collaboration ({facture_active.reference})"
            )

    if document_data.lignes:
        lignes = [ligne.model_dump() for ligne in document_data.lignes]
    else:
        lignes = _lignes_from_collaboration(collaboration)
    if not lignes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le document doit contenir au moins une ligne"
        )

    snapshot = snapshot_of(collaboration)
    type_tva = get_type_tva(snapshot.pays, snapshot.numero_tva)
    taux = taux_tva(type_tva)

    date_document = document_data.date_document or datetime.utcnow()
    marque = collaboration.marque

    date_echeance = None
    if document_data.type == TypeDocument.FACTURE:
        delai = document_data.delai_paiement_jours
        if delai is None:
            delai = marque.delai_paiement if marque and marque.delai_paiement is not None else settings.DELAI_PAIEMENT_JOURS
        date_echeance = date_echeance_fin_de_mois(date_document, delai)

    document = Document(
        reference=generer_reference(db, document_data.type.value, date_document.year),
        type=document_data.type.value,
        statut=StatutDocument.BROUILLON.value,
        collaboration_id=collaboration.id,
        titre=document_data.titre,
        taux_tva=taux,
        type_tva=type_tva.value,
        mention_tva=get_mention_tva(type_tva, snapshot.numero_tva),
        date_document=date_document,
        date_echeance=date_echeance,
        po_client=document_data.po_client,
        mode_paiement=(marque.mode_paiement if marque and marque.mode_paiement else "Virement bancaire"),
        notes=document_data.commentaires,
        created_by_id=current_user.id
    )
    _apply_totaux(document, lignes, taux)
    document.lignes = _build_lignes(lignes, taux)
    db.add(document)
    db.flush()

    _log_event(db, document, "CREATED", current_user, f"{document.type} {document.reference} créé")
    db.commit()
    db.refresh(document)

    logger.info(f"Document {document.reference} created for collaboration {collaboration.reference}")
    return document


@router.get("", response_model=List[DocumentResponse])
async def get_documents(
    type: Optional[TypeDocument] = None,
    statut: Optional[StatutDocument] = None,
    collaboration_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List quotes and invoices
    """
    query = db.query(Document)

    if current_user.role == "TM":
        query = query.join(Collaboration, Document.collaboration_id == Collaboration.id) \
            .join(Talent, Collaboration.talent_id == Talent.id) \
            .filter(Talent.manager_id == current_user.id)

    if type:
        query = query.filter(Document.type == type.value)
    if statut:
        query = query.filter(Document.statut == statut.value)
    if collaboration_id:
        query = query.filter(Document.collaboration_id == collaboration_id)

    return query.order_by(Document.id.desc()).offset(skip).limit(limit).all()


@router.get("/{document_id}", response_model=DocumentDetailResponse)
async def get_document(
    document_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get a document with its lines, history and comments
    """
    document = get_document_or_404(db, document_id)
    if current_user.role == "TM":
        check_talent_access(current_user, document.collaboration.talent)
    return document


@router.put("/{document_id}", response_model=DocumentDetailResponse)
async def update_document(
    document_id: int,
    document_data: DocumentUpdate,
    current_user: User = Depends(check_document_creator_role),
    db: Session = Depends(get_db)
):
    """
    Edit a draft document

    New lines replace the old ones and the totals are recomputed with the
    VAT regime frozen at creation.
    """
    document = get_document_or_404(db, document_id)
    check_talent_access(current_user, document.collaboration.talent)
    workflow.check_editable(document.statut)

    if document_data.lignes is not None:
        if not document_data.lignes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Le document doit contenir au moins une ligne"
            )
        lignes = [ligne.model_dump() for ligne in document_data.lignes]
        _apply_totaux(document, lignes, document.taux_tva)
        document.lignes = _build_lignes(lignes, document.taux_tva)

    if document_data.titre is not None:
        document.titre = document_data.titre
    if document_data.po_client is not None:
        document.po_client = document_data.po_client
    if document_data.commentaires is not None:
        document.notes = document_data.commentaires
    if document_data.date_echeance is not None and document.type == TypeDocument.FACTURE.value:
        document.date_echeance = document_data.date_echeance
    if document_data.mode_paiement:
        document.mode_paiement = document_data.mode_paiement

    _log_event(db, document, "UPDATED", current_user, "Document modifié")
    db.commit()
    db.refresh(document)

    logger.info(f"Document {document.reference} updated")
    return document


@router.post("/{document_id}/enregistrer", response_model=DocumentDetailResponse)
async def register_document(
    document_id: int,
    current_user: User = Depends(check_document_creator_role),
    db: Session = Depends(get_db)
):
    """
    Register a draft (BROUILLON -> VALIDE)
    """
    document = get_document_or_404(db, document_id)
    check_talent_access(current_user, document.collaboration.talent)

    document.statut = workflow.advance(document.statut, StatutDocument.VALIDE).value
    document.date_validation = datetime.utcnow()
    _log_event(db, document, "REGISTERED", current_user, "Document enregistré")

    db.commit()
    db.refresh(document)

    logger.info(f"Document {document.reference} registered")
    return document


@router.post("/{document_id}/envoyer", response_model=DocumentDetailResponse)
async def send_document(
    document_id: int,
    current_user: User = Depends(check_document_sender_role),
    db: Session = Depends(get_db)
):
    """
    Mark a document as sent to the client
    """
    document = get_document_or_404(db, document_id)

    document.statut = workflow.advance(document.statut, StatutDocument.ENVOYE).value
    document.date_emission = datetime.utcnow()
    _log_event(db, document, "SENT", current_user, "Document envoyé au client")

    if document.type == TypeDocument.FACTURE.value:
        _notify_manager(
            db, document,
            type="FACTURE_ENVOYEE",
            titre="Facture envoyée",
            message=f"La facture {document.reference} a été envoyée au client"
        )

    db.commit()
    db.refresh(document)

    logger.info(f"Document {document.reference} sent")
    return document


@router.post("/{document_id}/payer", response_model=DocumentDetailResponse)
async def pay_document(
    document_id: int,
    paiement: PaiementRequest,
    current_user: User = Depends(check_admin_role),
    db: Session = Depends(get_db)
):
    """
    Record the payment of an invoice, the collaboration becomes PAYE
    """
    document = get_document_or_404(db, document_id)

    if document.type != TypeDocument.FACTURE.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Seule une facture peut être marquée comme payée"
        )

    document.statut = workflow.advance(document.statut, StatutDocument.PAYE).value
    document.date_paiement = paiement.date_paiement or datetime.utcnow()
    if paiement.mode_paiement:
        document.mode_paiement = paiement.mode_paiement
    document.reference_paiement = paiement.reference_paiement
    _log_event(db, document, "PAID", current_user, f"Paiement reçu ({document.mode_paiement})")

    collaboration = document.collaboration
    collaboration.statut = "PAYE"
    collaboration.paid_at = document.date_paiement

    db.commit()
    db.refresh(document)

    logger.info(f"Invoice {document.reference} paid")
    return document


@router.post("/{document_id}/accepter", response_model=DocumentDetailResponse)
async def accept_quote(
    document_id: int,
    current_user: User = Depends(check_reviewer_role),
    db: Session = Depends(get_db)
):
    """
    Record the client's acceptance of a sent quote, the collaboration is won
    """
    document = get_document_or_404(db, document_id)

    document.statut = workflow.decide_quote(document.type, document.statut, accepted=True).value
    document.date_validation = datetime.utcnow()
    _log_event(db, document, "ACCEPTED", current_user, "Devis accepté par le client")

    collaboration = document.collaboration
    if collaboration.statut == "NEGO":
        collaboration.statut = "GAGNE"
    _notify_manager(
        db, document,
        type="DEVIS_ACCEPTE",
        titre="Devis accepté",
        message=f"Le devis {document.reference} a été accepté par le client"
    )

    db.commit()
    db.refresh(document)

    logger.info(f"Quote {document.reference} accepted")
    return document


@router.post("/{document_id}/refuser", response_model=DocumentDetailResponse)
async def refuse_quote(
    document_id: int,
    refus: RefusRequest,
    current_user: User = Depends(check_reviewer_role),
    db: Session = Depends(get_db)
):
    """
    Record the client's refusal of a sent quote, the collaboration is lost
    """
    document = get_document_or_404(db, document_id)

    document.statut = workflow.decide_quote(document.type, document.statut, accepted=False).value
    raison = (refus.raison or "").strip()
    if raison:
        _append_note(document, f"Raison du refus: {raison}")
    _log_event(db, document, "REFUSED", current_user, raison or "Devis refusé par le client")

    collaboration = document.collaboration
    collaboration.statut = "PERDU"
    collaboration.raison_perdu = raison or "Devis refusé par le client"
    _notify_manager(
        db, document,
        type="DEVIS_REFUSE",
        titre="Devis refusé",
        message=f"Le devis {document.reference} a été refusé par le client"
    )

    db.commit()
    db.refresh(document)

    logger.info(f"Quote {document.reference} refused")
    return document


@router.post("/{document_id}/convertir-facture", response_model=DocumentDetailResponse,
             status_code=status.HTTP_201_CREATED)
async def convert_to_invoice(
    document_id: int,
    current_user: User = Depends(check_reviewer_role),
    db: Session = Depends(get_db)
):
    """
    Turn a validated or accepted quote into a draft invoice

    Lines, amounts and VAT data are copied from the quote. The invoice keeps
    the quote reference in facture_ref.
    """
    devis = get_document_or_404(db, document_id)
    workflow.check_convertible(devis.type, devis.statut)

    facture_active = _facture_active(db, devis.collaboration_id)
    if facture_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Une facture existe déjà pour cette collaboration ({facture_active.reference})"
        )

    now = datetime.utcnow()
    collaboration = devis.collaboration
    marque = collaboration.marque
    delai = marque.delai_paiement if marque and marque.delai_paiement is not None else settings.DELAI_PAIEMENT_JOURS

    facture = Document(
        reference=generer_reference(db, TypeDocument.FACTURE.value, now.year),
        type=TypeDocument.FACTURE.value,
        statut=StatutDocument.BROUILLON.value,
        collaboration=collaboration,
        titre=devis.titre,
        montant_ht=devis.montant_ht,
        taux_tva=devis.taux_tva,
        montant_tva=devis.montant_tva,
        montant_ttc=devis.montant_ttc,
        type_tva=devis.type_tva,
        mention_tva=devis.mention_tva,
        date_document=now,
        date_echeance=date_echeance_fin_de_mois(now, delai),
        po_client=devis.po_client,
        facture_ref=devis.reference,
        mode_paiement=devis.mode_paiement,
        notes=devis.notes,
        created_by_id=current_user.id
    )
    facture.lignes = [
        DocumentLigne(
            ordre=ligne.ordre,
            description=ligne.description,
            quantite=ligne.quantite,
            prix_unitaire_ht=ligne.prix_unitaire_ht,
            taux_tva=ligne.taux_tva
        )
        for ligne in devis.lignes
    ]
    db.add(facture)
    db.flush()

    _append_note(devis, f"Converti en facture {facture.reference} le {now:%d/%m/%Y}")
    _log_event(db, devis, "CONVERTED", current_user, f"Converti en facture {facture.reference}")
    _log_event(db, facture, "CREATED", current_user, f"FACTURE {facture.reference} créée depuis le devis {devis.reference}")
    _notify_manager(
        db, facture,
        type="FACTURE_GENEREE",
        titre="Facture générée",
        message=f"La facture {facture.reference} a été générée depuis le devis {devis.reference}"
    )

    db.commit()
    db.refresh(facture)

    logger.info(f"Quote {devis.reference} converted into invoice {facture.reference}")
    return facture


@router.post("/{document_id}/annuler", response_model=DocumentDetailResponse)
async def cancel_document(
    document_id: int,
    annulation: AnnulationRequest,
    current_user: User = Depends(check_admin_role),
    db: Session = Depends(get_db)
):
    """
    Cancel a document with a mandatory reason
    """
    document = get_document_or_404(db, document_id)

    document.statut = workflow.cancel_document(document.statut, annulation.motif).value
    motif = annulation.motif.strip()
    mention = f"[Annulé le {datetime.utcnow():%d/%m/%Y}] {motif}"
    _append_note(document, mention)
    _log_event(db, document, "CANCELLED", current_user, motif)

    db.commit()
    db.refresh(document)

    logger.info(f"Document {document.reference} cancelled: {motif}")
    return document


@router.post("/{document_id}/avoir", response_model=DocumentDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_credit_note(
    document_id: int,
    avoir_data: AvoirRequest,
    current_user: User = Depends(check_document_sender_role),
    db: Session = Depends(get_db)
):
    """
    Cancel a sent or paid invoice with a credit note

    The credit note mirrors the invoice with negated quantities and amounts.
    The invoice becomes ANNULE, so a corrected invoice can then be issued.
    """
    facture = get_document_or_404(db, document_id)
    workflow.check_credit_note_source(facture.type, facture.statut, facture.avoir_ref)
    motif = (avoir_data.motif or "").strip()
    if not motif:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Un motif est requis pour créer un avoir"
        )

    now = datetime.utcnow()
    avoir = Document(
        reference=generer_reference(db, TypeDocument.AVOIR.value, now.year),
        type=TypeDocument.AVOIR.value,
        statut=StatutDocument.VALIDE.value,
        collaboration=facture.collaboration,
        titre=f"Avoir sur {facture.reference}",
        montant_ht=-facture.montant_ht,
        taux_tva=facture.taux_tva,
        montant_tva=-facture.montant_tva,
        montant_ttc=-facture.montant_ttc,
        type_tva=facture.type_tva,
        mention_tva=facture.mention_tva,
        date_document=now,
        date_validation=now,
        facture_ref=facture.reference,
        mode_paiement=facture.mode_paiement,
        notes=f"Avoir annulant la facture {facture.reference}: {motif}",
        created_by_id=current_user.id
    )
    avoir.lignes = [
        DocumentLigne(
            ordre=ligne.ordre,
            description=ligne.description,
            quantite=-ligne.quantite,
            prix_unitaire_ht=ligne.prix_unitaire_ht,
            taux_tva=ligne.taux_tva
        )
        for ligne in facture.lignes
    ]
    db.add(avoir)
    db.flush()

    facture.statut = StatutDocument.ANNULE.value
    facture.avoir_ref = avoir.reference
    _append_note(facture, f"[Annulée par l'avoir {avoir.reference} le {now:%d/%m/%Y}] {motif}")
    _log_event(db, facture, "CANCELLED", current_user, f"Annulée par l'avoir {avoir.reference}")
    _log_event(db, avoir, "CREATED", current_user, f"AVOIR {avoir.reference} créé sur la facture {facture.reference}")

    db.commit()
    db.refresh(avoir)

    logger.info(f"Credit note {avoir.reference} created for invoice {facture.reference}")
    return avoir


@router.post("/{document_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    document_id: int,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Comment a document
    """
    document = get_document_or_404(db, document_id)
    if current_user.role == "TM":
        check_talent_access(current_user, document.collaboration.talent)

    content = comment_data.content.strip()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le commentaire ne peut pas être vide"
        )

    comment = DocumentComment(document_id=document.id, user_id=current_user.id, content=content)
    db.add(comment)
    _log_event(db, document, "COMMENTED", current_user)

    db.commit()
    db.refresh(comment)
    return comment


@router.get("/{document_id}/pdf", response_class=FileResponse)
async def get_document_pdf(
    document_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Render the document as PDF
    """
    document = get_document_or_404(db, document_id)
    collaboration = document.collaboration
    if current_user.role == "TM":
        check_talent_access(current_user, collaboration.talent)

    items = [
        {
            "description": ligne.description,
            "quantite": ligne.quantite,
            "prix_unitaire_ht": ligne.prix_unitaire_ht,
            "taux_tva": ligne.taux_tva,
            "total_ht": Decimal(str(ligne.quantite)) * Decimal(str(ligne.prix_unitaire_ht))
        }
        for ligne in document.lignes
    ]
    document_data = {
        "type": document.type,
        "reference": document.reference,
        "titre": document.titre,
        "date": document.date_document,
        "due_date": document.date_echeance,
        "po_client": document.po_client,
        "payment_method": document.mode_paiement,
        "total_ht": document.montant_ht,
        "total_tva": document.montant_tva,
        "total_ttc": document.montant_ttc,
        "mention_tva": document.mention_tva,
        "notes": document.notes
    }

    file_path = generate_document_pdf(document_data, snapshot_of(collaboration).model_dump(), items)
    document.pdf_url = file_path
    db.commit()

    return FileResponse(
        path=file_path,
        filename=f"{document.reference}.pdf",
        media_type="application/pdf"
    )
