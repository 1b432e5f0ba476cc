from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from talentdesk.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(30), unique=True, index=True)
    type = Column(Enum("DEVIS", "FACTURE", "AVOIR", name="type_document_enum"), nullable=False)
    statut = Column(Enum("BROUILLON", "VALIDE", "ENVOYE", "PAYE", "ACCEPTE", "REFUSE", "ANNULE",
                         name="statut_document_enum"),
                    default="BROUILLON")
    collaboration_id = Column(Integer, ForeignKey("collaborations.id", ondelete="CASCADE"), nullable=False)
    titre = Column(String(255))

    montant_ht = Column(Numeric(10, 2), default=0)
    taux_tva = Column(Numeric(5, 2), default=20)
    montant_tva = Column(Numeric(10, 2), default=0)
    montant_ttc = Column(Numeric(10, 2), default=0)
    type_tva = Column(String(20))
    mention_tva = Column(Text)

    date_document = Column(DateTime)
    date_emission = Column(DateTime)
    date_echeance = Column(DateTime)
    date_validation = Column(DateTime)
    po_client = Column(String(100))

    # Quote converted into this invoice, or invoice cancelled by this credit note
    facture_ref = Column(String(30))
    # Credit note that cancelled this invoice
    avoir_ref = Column(String(30))

    # Payment capture
    mode_paiement = Column(String(50), default="Virement bancaire")
    date_paiement = Column(DateTime)
    reference_paiement = Column(String(255))

    notes = Column(Text)
    pdf_url = Column(Text)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    collaboration = relationship("Collaboration", back_populates="documents")
    lignes = relationship("DocumentLigne", back_populates="document", cascade="all, delete-orphan",
                          order_by="DocumentLigne.ordre")
    events = relationship("DocumentEvent", back_populates="document", cascade="all, delete-orphan",
                          order_by="DocumentEvent.id")
    comments = relationship("DocumentComment", back_populates="document", cascade="all, delete-orphan",
                            order_by="DocumentComment.id")


class DocumentLigne(Base):
    __tablename__ = "document_lignes"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"))
    ordre = Column(Integer, default=0)
    description = Column(Text, nullable=False)
    quantite = Column(Numeric(10, 2), default=1)
    prix_unitaire_ht = Column(Numeric(10, 2), default=0)
    taux_tva = Column(Numeric(5, 2), default=20)

    # Relationships
    document = relationship("Document", back_populates="lignes")


class DocumentEvent(Base):
    __tablename__ = "document_events"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"))
    type = Column(String(30), nullable=False)
    description = Column(Text)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    document = relationship("Document", back_populates="events")
    user = relationship("User")


class DocumentComment(Base):
    __tablename__ = "document_comments"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    document = relationship("Document", back_populates="comments")
    user = relationship("User")
