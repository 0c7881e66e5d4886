"""
Pytest fixtures: an in-memory SQLite database shared between the test session
and the app under test, plus helpers for seeding rows and minting tokens.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from auth import create_access_token
from database import Base, build_engine, build_session_factory, utcnow
from main import create_app
from models import ArtistProfile, Like, PlayEvent, Role, Track, User, Visibility


class Seeder:
    def __init__(self, db):
        self.db = db
        self._emails = 0

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, role=Role.LISTENER, country=None, name=None):
        self._emails += 1
        return self._save(User(
            email=f"user{self._emails}@example.com",
            name=name,
            role=role,
            country=country,
        ))

    def artist(self, stage_name="Artist", user=None):
        if user is None:
            user = self.user(role=Role.ARTIST)
        return self._save(ArtistProfile(user_id=user.id, stage_name=stage_name))

    def track(self, artist, title="Track", genre=None, visibility=Visibility.PUBLIC, editor_pick=False, created_at=None):
        return self._save(Track(
            title=title,
            genre=genre,
            visibility=visibility,
            editor_pick=editor_pick,
            artist_id=artist.id,
            created_at=created_at or utcnow(),
        ))

    def play(self, track, user, started_at=None, days_ago=0):
        if started_at is None:
            started_at = utcnow() - timedelta(days=days_ago)
        return self._save(PlayEvent(track_id=track.id, user_id=user.id, started_at=started_at))

    def like(self, track, user):
        return self._save(Like(track_id=track.id, user_id=user.id))


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def client(session_factory):
    app = create_app(session_factory)
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
