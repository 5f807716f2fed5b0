from typing import Optional
from fastapi import Header, HTTPException, status
from pydantic import ValidationError
from examcore.core.clock import Clock, system_clock
from examcore.core.database import SessionLocal
from examcore.schemas.user import UserContext

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_transactional_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_current_user_with_context(
    x_user_id: Optional[int] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> UserContext:
    """Caller identity as resolved by the authentication gateway in front of this service."""
    if x_user_id is None or x_user_role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    try:
        return UserContext(user_id=x_user_id, role=x_user_role)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid caller role",
        )

def get_clock() -> Clock:
    return system_clock
