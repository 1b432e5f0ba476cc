from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from talentdesk.database import Base


class Collaboration(Base):
    __tablename__ = "collaborations"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(30), unique=True, index=True)
    talent_id = Column(Integer, ForeignKey("talents.id", ondelete="CASCADE"), nullable=False)
    marque_id = Column(Integer, ForeignKey("marques.id", ondelete="SET NULL"), nullable=True)
    source = Column(Enum("INBOUND", "OUTBOUND", name="source_enum"), default="INBOUND")
    description = Column(Text)

    # Amounts, stored explicitly and never recomputed downstream
    montant_brut = Column(Numeric(10, 2), default=0)
    commission_percent = Column(Numeric(5, 2), default=0)
    commission_euros = Column(Numeric(10, 2), default=0)
    montant_net = Column(Numeric(10, 2), default=0)

    statut = Column(Enum("NEGO", "GAGNE", "PERDU", "PUBLIE", "FACTURE_RECUE", "PAYE",
                         name="statut_collaboration_enum"), default="NEGO")
    raison_perdu = Column(Text)
    lien_publication = Column(Text)
    date_publication = Column(DateTime)
    paid_at = Column(DateTime)

    # Billing snapshot frozen at creation
    billing_raison_sociale = Column(String(255), nullable=False)
    billing_adresse_rue = Column(String(255), nullable=False)
    billing_code_postal = Column(String(20), nullable=False)
    billing_ville = Column(String(100), nullable=False)
    billing_pays = Column(String(100), nullable=False)
    billing_siret = Column(String(14))
    billing_numero_tva = Column(String(20))

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    talent = relationship("Talent", back_populates="collaborations")
    marque = relationship("Marque", back_populates="collaborations")
    negociation = relationship("Negociation", back_populates="collaboration", uselist=False)
    livrables = relationship("CollabLivrable", back_populates="collaboration", cascade="all, delete-orphan",
                             order_by="CollabLivrable.id")
    documents = relationship("Document", back_populates="collaboration", order_by="Document.id")


class CollabLivrable(Base):
    __tablename__ = "collab_livrables"

    id = Column(Integer, primary_key=True, index=True)
    collaboration_id = Column(Integer, ForeignKey("collaborations.id", ondelete="CASCADE"))
    type_contenu = Column(String(50), nullable=False)
    quantite = Column(Integer, default=1)
    prix_unitaire = Column(Numeric(10, 2), nullable=False)
    description = Column(Text)

    # Relationships
    collaboration = relationship("Collaboration", back_populates="livrables")
