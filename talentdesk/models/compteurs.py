from sqlalchemy import Column, Integer, String, UniqueConstraint

from talentdesk.database import Base


class Compteur(Base):
    __tablename__ = "compteurs"
    __table_args__ = (UniqueConstraint("type", "annee", name="uq_compteur_type_annee"),)

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False)
    annee = Column(Integer, nullable=False)
    dernier_numero = Column(Integer, default=0, nullable=False)
