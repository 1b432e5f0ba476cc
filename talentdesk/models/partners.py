from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from talentdesk.database import Base
from talentdesk.models.talents import TarifColumnsMixin


class Partner(Base):
    __tablename__ = "partners"

    id = Column(Integer, primary_key=True, index=True)
    nom = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True)
    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    tarif_overrides = relationship("PartnerTarifOverride", back_populates="partner", cascade="all, delete-orphan")


class PartnerTarifOverride(TarifColumnsMixin, Base):
    __tablename__ = "partner_tarif_overrides"
    __table_args__ = (UniqueConstraint("partner_id", "talent_id", name="uq_partner_talent"),)

    id = Column(Integer, primary_key=True, index=True)
    partner_id = Column(Integer, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False)
    talent_id = Column(Integer, ForeignKey("talents.id", ondelete="CASCADE"), nullable=False)
    note = Column(Text)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    partner = relationship("Partner", back_populates="tarif_overrides")
    talent = relationship("Talent", back_populates="partner_overrides")
