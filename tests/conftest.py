import os

os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from talentdesk import create_app
from talentdesk.database import Base, get_db
from talentdesk.models import User, Talent, TalentTarifs, Marque
from talentdesk.utils.auth import create_access_token, hash_password

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "motdepasse123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db):
    application = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            db.rollback()

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    def _make_user(role="TM", email=None, prenom="Jean", nom="Dupont", actif=True):
        user = User(
            prenom=prenom,
            nom=nom,
            email=email or f"{role.lower()}-{db.query(User).count() + 1}@talentdesk.fr",
            password_hash=PASSWORD_HASH,
            role=role,
            actif=actif
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def headers_for():
    def _headers_for(user):
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers_for


@pytest.fixture
def admin(make_user):
    return make_user("ADMIN", email="admin@talentdesk.fr", prenom="Alice", nom="Martin")


@pytest.fixture
def head_of(make_user):
    return make_user("HEAD_OF", email="headof@talentdesk.fr", prenom="Hugo", nom="Bernard")


@pytest.fixture
def tm(make_user):
    return make_user("TM", email="tm@talentdesk.fr", prenom="Tom", nom="Petit")


@pytest.fixture
def other_tm(make_user):
    return make_user("TM", email="tm2@talentdesk.fr", prenom="Lea", nom="Roux")


@pytest.fixture
def talent(db, tm):
    talent = Talent(
        prenom="Emma",
        nom="Laurent",
        instagram="@emma",
        manager_id=tm.id,
        commission_inbound=Decimal("20"),
        commission_outbound=Decimal("30"),
    )
    talent.tarifs = TalentTarifs(
        tarif_story=Decimal("500"),
        tarif_post=Decimal("800"),
        tarif_reel=Decimal("1200"),
    )
    db.add(talent)
    db.commit()
    db.refresh(talent)
    return talent


@pytest.fixture
def marque(db):
    marque = Marque(
        nom="Maison Verte",
        raison_sociale="Maison Verte SAS",
        adresse_rue="10 rue de la Paix",
        code_postal="75002",
        ville="Paris",
        pays="France",
        siret="12345678901234",
        delai_paiement=30,
    )
    db.add(marque)
    db.commit()
    db.refresh(marque)
    return marque


@pytest.fixture
def billing():
    return {
        "raison_sociale": "Maison Verte SAS",
        "adresse_rue": "10 rue de la Paix",
        "code_postal": "75002",
        "ville": "Paris",
        "pays": "France",
    }
