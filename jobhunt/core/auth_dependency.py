from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.orm import Session
from jobhunt.core.config import SECRET_KEY, ALGORITHM
from jobhunt.db.session import get_db
from jobhunt.db.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/user/login")


def get_current_user_id(token: str = Depends(oauth2_scheme)) -> int:
    """Caller id carried in the JWT ``sub`` claim."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        subject = payload.get("sub")

        if subject is None:
            raise HTTPException(status_code=401, detail="Invalid token")

        return int(subject)

    except (JWTError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")


def get_current_user_obj(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    """Get current User object from JWT token."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=404,
            detail="User not found"
        )
    return user
