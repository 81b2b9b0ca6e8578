"""Admin accounts and password checks"""
from typing import Optional
import bcrypt
from sqlalchemy.orm import Session

from storefront.models.user import User
from storefront.core.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower().strip()).first()


def create_user(db: Session, email: str, password: str, name: str = "", role: str = "customer") -> User:
    user = User(
        email=email.lower().strip(),
        password_hash=hash_password(password),
        name=name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User created: id={user.id}, role={role}")
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """User for valid credentials, else None"""
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        logger.warning(f"Login failed: email={email}")
        return None
    return user
