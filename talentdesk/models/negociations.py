from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from talentdesk.database import Base


class Negociation(Base):
    __tablename__ = "negociations"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(30), unique=True, index=True)
    tm_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    talent_id = Column(Integer, ForeignKey("talents.id", ondelete="CASCADE"), nullable=False)
    marque_id = Column(Integer, ForeignKey("marques.id", ondelete="SET NULL"), nullable=True)
    nom_marque_saisi = Column(String(255))
    contact_marque = Column(String(255))
    email_contact = Column(String(255))
    source = Column(Enum("INBOUND", "OUTBOUND", name="source_enum"), default="INBOUND")
    brief = Column(Text)

    # Budgets, populated progressively
    budget_marque = Column(Numeric(10, 2), nullable=True)
    budget_souhaite = Column(Numeric(10, 2), nullable=True)
    budget_final = Column(Numeric(10, 2), nullable=True)
    date_deadline = Column(DateTime, nullable=True)

    statut = Column(Enum("BROUILLON", "EN_ATTENTE", "EN_DISCUSSION", "VALIDEE", "REFUSEE", "ANNULEE",
                         name="statut_negociation_enum"), default="BROUILLON")
    raison_refus = Column(Text)
    valide_par = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    date_validation = Column(DateTime)
    date_submitted = Column(DateTime)
    modified_since_review = Column(Boolean, default=False)
    reviewed_at = Column(DateTime)
    last_modified_at = Column(DateTime)
    collaboration_id = Column(Integer, ForeignKey("collaborations.id", ondelete="SET NULL"), nullable=True, unique=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    tm = relationship("User", foreign_keys=[tm_id], back_populates="negociations")
    validateur = relationship("User", foreign_keys=[valide_par])
    talent = relationship("Talent", back_populates="negociations")
    marque = relationship("Marque", back_populates="negociations")
    collaboration = relationship("Collaboration", back_populates="negociation")
    livrables = relationship("NegoLivrable", back_populates="negociation", cascade="all, delete-orphan",
                             order_by="NegoLivrable.id")
    commentaires = relationship("NegoCommentaire", back_populates="negociation", cascade="all, delete-orphan",
                                order_by="NegoCommentaire.id")


class NegoLivrable(Base):
    __tablename__ = "nego_livrables"

    id = Column(Integer, primary_key=True, index=True)
    negociation_id = Column(Integer, ForeignKey("negociations.id", ondelete="CASCADE"))
    type_contenu = Column(String(50))
    quantite = Column(Integer, default=1)
    prix_demande = Column(Numeric(10, 2), nullable=True)
    prix_souhaite = Column(Numeric(10, 2), nullable=True)
    prix_final = Column(Numeric(10, 2), nullable=True)
    description = Column(Text)

    # Relationships
    negociation = relationship("Negociation", back_populates="livrables")

    @property
    def prix_retenu(self):
        """Best known price: final, then wished, then asked"""
        for prix in (self.prix_final, self.prix_souhaite, self.prix_demande):
            if prix is not None:
                return prix
        return None


class NegoCommentaire(Base):
    __tablename__ = "nego_commentaires"

    id = Column(Integer, primary_key=True, index=True)
    negociation_id = Column(Integer, ForeignKey("negociations.id", ondelete="CASCADE"))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    contenu = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    negociation = relationship("Negociation", back_populates="commentaires")
    user = relationship("User")
