"""
Script to create (or reset) a master admin account.
Run: python -m scripts.create_master_admin <email> <password>
"""
import sys
import logging

from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.db.models.user import User, MASTER_ADMIN
from app.core.security import hash_password

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_master_admin(email: str, password: str) -> User:
    """Create a master admin, or reset the password and role of an existing user."""
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if user:
            logger.info(f"Found existing user: {email} (ID: {user.id}), promoting to master admin")
        else:
            logger.info(f"Creating new master admin: {email}")
            user = User(email=email.lower(), full_name="Master Admin")
            db.add(user)

        user.password_hash = hash_password(password)
        user.role = MASTER_ADMIN
        user.company_id = None
        user.module_access = []
        db.commit()
        db.refresh(user)
        logger.info(f"Master admin ready with ID: {user.id}")
        return user
    except Exception:
        db.rollback()
        logger.exception(f"Failed to create master admin {email}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python -m scripts.create_master_admin <email> <password>")
        sys.exit(1)
    init_db()
    create_master_admin(sys.argv[1], sys.argv[2])
