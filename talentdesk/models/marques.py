from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from talentdesk.database import Base


class Marque(Base):
    __tablename__ = "marques"

    id = Column(Integer, primary_key=True, index=True)
    nom = Column(String(255), nullable=False)
    secteur = Column(String(100))
    site_web = Column(Text)

    # Default billing profile
    raison_sociale = Column(String(255))
    adresse_rue = Column(String(255))
    adresse_complement = Column(String(255))
    code_postal = Column(String(20))
    ville = Column(String(100))
    pays = Column(String(100), default="France")
    siret = Column(String(14))
    numero_tva = Column(String(20))

    # Payment terms
    delai_paiement = Column(Integer, default=30)
    mode_paiement = Column(String(50), default="Virement bancaire")
    devise = Column(String(3), default="EUR")

    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    contacts = relationship("MarqueContact", back_populates="marque", cascade="all, delete-orphan")
    negociations = relationship("Negociation", back_populates="marque")
    collaborations = relationship("Collaboration", back_populates="marque")


class MarqueContact(Base):
    __tablename__ = "marque_contacts"

    id = Column(Integer, primary_key=True, index=True)
    marque_id = Column(Integer, ForeignKey("marques.id", ondelete="CASCADE"))
    prenom = Column(String(100))
    nom = Column(String(100), nullable=False)
    email = Column(String(255))
    telephone = Column(String(30))
    poste = Column(String(100))
    principal = Column(Boolean, default=False)

    # Relationships
    marque = relationship("Marque", back_populates="contacts")
