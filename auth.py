import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from database import get_db
from errors import AppError
from models import ArtistProfile, Role, Track, User

logger = logging.getLogger(__name__)

# Tokens are issued by the account service; this API only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def _user_from_token(token: str, db: Session) -> User:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AppError.unauthorized("Token expired")
    except JWTError:
        raise AppError.unauthorized("Invalid token")

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise AppError.unauthorized("Invalid token")

    user = db.query(User).filter(User.id == int(subject)).first()
    if user is None:
        raise AppError.unauthorized("Invalid token: User not found")
    return user


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    if not token:
        raise AppError.unauthorized("Access denied. No token provided.")
    return _user_from_token(token, db)


def get_optional_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    # A bad token on a public route falls back to anonymous access
    if not token:
        return None
    try:
        return _user_from_token(token, db)
    except AppError:
        return None


def require_role(*roles: Role):
    def checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in roles:
            raise AppError.forbidden("Insufficient permissions")
        return current_user
    return checker


def ensure_artist_access(db: Session, user: User, artist_id: int) -> ArtistProfile:
    artist = db.query(ArtistProfile).filter(ArtistProfile.id == artist_id).first()
    if artist is None:
        raise AppError.not_found("Artist not found")
    if user.role != Role.ADMIN and artist.user_id != user.id:
        logger.info("User %s denied analytics for artist %s", user.id, artist_id)
        raise AppError.forbidden("Not your artist profile")
    return artist


def ensure_track_access(db: Session, user: User, track_id: int) -> Track:
    track = db.query(Track).filter(Track.id == track_id).first()
    if track is None:
        raise AppError.not_found("Track not found")
    if user.role != Role.ADMIN and track.artist.user_id != user.id:
        logger.info("User %s denied analytics for track %s", user.id, track_id)
        raise AppError.forbidden("Not your track")
    return track


def ensure_listener_access(db: Session, user: User, user_id: int) -> User:
    if user.role != Role.ADMIN and user.id != user_id:
        logger.info("User %s denied listener stats for user %s", user.id, user_id)
        raise AppError.forbidden("Access denied")
    listener = db.query(User).filter(User.id == user_id).first()
    if listener is None:
        raise AppError.not_found("User not found")
    return listener
