import logging
import os
import sys

from sqlalchemy.exc import SQLAlchemyError

from talentdesk.database import Base, SessionLocal, engine
from talentdesk import models  # noqa: F401
from talentdesk.models.users import User
from talentdesk.utils.auth import hash_password

# Configure logging
logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def create_tables():
    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


def seed_admin(email: str, password: str):
    """Create the first admin account if no user exists with this email"""
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            logger.info(f"Admin {email} already exists")
            return
        db.add(User(
            prenom="Admin",
            nom="TalentDesk",
            email=email,
            password_hash=hash_password(password),
            role="ADMIN",
            actif=True
        ))
        db.commit()
        logger.info(f"Admin {email} created")
    finally:
        db.close()


if __name__ == "__main__":
    admin_email = os.environ.get("ADMIN_EMAIL", "admin@talentdesk.fr")
    admin_password = os.environ.get("ADMIN_PASSWORD")

    try:
        create_tables()
        if admin_password:
            seed_admin(admin_email, admin_password)
        else:
            logger.warning("ADMIN_PASSWORD not set, no admin account created")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {str(e)}")
        sys.exit(1)
