from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from talentdesk.database import Base


class TarifColumnsMixin:
    """One nullable unit price per content type (see utils.tarifs.ContentType)"""
    tarif_story = Column(Numeric(10, 2), nullable=True)
    tarif_story_concours = Column(Numeric(10, 2), nullable=True)
    tarif_post = Column(Numeric(10, 2), nullable=True)
    tarif_post_concours = Column(Numeric(10, 2), nullable=True)
    tarif_post_commun = Column(Numeric(10, 2), nullable=True)
    tarif_reel = Column(Numeric(10, 2), nullable=True)
    tarif_tiktok_video = Column(Numeric(10, 2), nullable=True)
    tarif_youtube_video = Column(Numeric(10, 2), nullable=True)
    tarif_youtube_short = Column(Numeric(10, 2), nullable=True)
    tarif_event = Column(Numeric(10, 2), nullable=True)
    tarif_shooting = Column(Numeric(10, 2), nullable=True)
    tarif_ambassadeur = Column(Numeric(10, 2), nullable=True)


class Talent(Base):
    __tablename__ = "talents"

    id = Column(Integer, primary_key=True, index=True)
    prenom = Column(String(100), nullable=False)
    nom = Column(String(100), nullable=False)
    email = Column(String(255))
    instagram = Column(String(100))
    tiktok = Column(String(100))
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    commission_inbound = Column(Numeric(5, 2), default=20)
    commission_outbound = Column(Numeric(5, 2), default=30)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    manager = relationship("User", back_populates="talents")
    tarifs = relationship("TalentTarifs", back_populates="talent", uselist=False, cascade="all, delete-orphan")
    negociations = relationship("Negociation", back_populates="talent")
    collaborations = relationship("Collaboration", back_populates="talent")
    partner_overrides = relationship("PartnerTarifOverride", back_populates="talent", cascade="all, delete-orphan")


class TalentTarifs(TarifColumnsMixin, Base):
    __tablename__ = "talent_tarifs"

    id = Column(Integer, primary_key=True, index=True)
    talent_id = Column(Integer, ForeignKey("talents.id", ondelete="CASCADE"), unique=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    talent = relationship("Talent", back_populates="tarifs")
