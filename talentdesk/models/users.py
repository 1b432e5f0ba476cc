from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from talentdesk.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    prenom = Column(String(100))
    nom = Column(String(100))
    email = Column(String(255), unique=True, index=True)
    password_hash = Column(Text)
    role = Column(String(50), default="TM")
    actif = Column(Boolean, default=True)
    last_login_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    talents = relationship("Talent", back_populates="manager")
    negociations = relationship("Negociation", back_populates="tm", foreign_keys="Negociation.tm_id")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.prenom or ''} {self.nom or ''}".strip()
