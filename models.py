import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base, utcnow


class Role(str, enum.Enum):
    LISTENER = "LISTENER"
    ARTIST = "ARTIST"
    ADMIN = "ADMIN"


class Visibility(str, enum.Enum):
    PUBLIC = "PUBLIC"
    UNLISTED = "UNLISTED"
    PRIVATE = "PRIVATE"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(Enum(Role), nullable=False, default=Role.LISTENER)
    country = Column(String(64), nullable=True)
    artist = relationship("ArtistProfile", back_populates="user", uselist=False)
    plays = relationship("PlayEvent", back_populates="user", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="user", cascade="all, delete-orphan")


class ArtistProfile(Base):
    __tablename__ = "artist_profiles"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    stage_name = Column(String(255), nullable=False)
    user = relationship("User", back_populates="artist")
    tracks = relationship("Track", back_populates="artist", cascade="all, delete-orphan")


class Track(Base):
    __tablename__ = "tracks"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    genre = Column(String(50), nullable=True)
    visibility = Column(Enum(Visibility), nullable=False, default=Visibility.PUBLIC)
    editor_pick = Column(Boolean, nullable=False, default=False)
    artist_id = Column(Integer, ForeignKey("artist_profiles.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    artist = relationship("ArtistProfile", back_populates="tracks")
    plays = relationship("PlayEvent", back_populates="track", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="track", cascade="all, delete-orphan")


class PlayEvent(Base):
    __tablename__ = "play_events"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    track_id = Column(Integer, ForeignKey("tracks.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    started_at = Column(DateTime, default=utcnow, index=True, nullable=False)
    track = relationship("Track", back_populates="plays")
    user = relationship("User", back_populates="plays")


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("user_id", "track_id", name="uq_like_user_track"),)
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    track_id = Column(Integer, ForeignKey("tracks.id", ondelete="CASCADE"), index=True, nullable=False)
    track = relationship("Track", back_populates="likes")
    user = relationship("User", back_populates="likes")
