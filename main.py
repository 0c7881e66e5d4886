import json
import logging
import time
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

import reports
import repository
import schemas
from analytics import LAST_7_DAYS, AggregationWindow, top_genres_for_user
from auth import (
    ensure_artist_access,
    ensure_listener_access,
    ensure_track_access,
    get_current_user,
    get_optional_user,
    require_role,
)
from config import ANALYTICS_TIMEZONE, CLIENT_URL, DATABASE_URL, HOST, LOG_LEVEL, PORT
from database import Base, build_engine, build_session_factory, get_db, utcnow
from errors import AppError, install_error_handlers
from models import Role, User

logger = logging.getLogger(__name__)

FEED_SIZE = 20
RECOMMENDATION_GENRES = 3


def configure_logging(level: str = LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_window(window: str) -> AggregationWindow:
    try:
        return AggregationWindow.parse(window)
    except ValueError as e:
        raise AppError.validation(str(e))


# Analytics routes
analytics_router = APIRouter()


@analytics_router.get("/artist/{artist_id}", response_model=schemas.ArtistSummary)
def get_artist_analytics(
    artist_id: int,
    window: str = Query("all"),
    current_user: User = Depends(require_role(Role.ARTIST, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    aggregation_window = parse_window(window)
    ensure_artist_access(db, current_user, artist_id)

    tracks = repository.artist_tracks(db, artist_id)
    plays = repository.artist_plays(db, artist_id)
    likes = repository.artist_likes(db, artist_id)
    return reports.artist_summary(
        tracks, plays, likes, utcnow(), aggregation_window, ZoneInfo(ANALYTICS_TIMEZONE)
    )


@analytics_router.get("/tracks/{track_id}", response_model=schemas.TrackSummary)
def get_track_analytics(
    track_id: int,
    current_user: User = Depends(require_role(Role.ARTIST, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    ensure_track_access(db, current_user, track_id)

    plays = repository.track_plays(db, track_id)
    likes = repository.track_likes(db, track_id)
    return reports.track_summary(plays, likes, utcnow(), ZoneInfo(ANALYTICS_TIMEZONE))


@analytics_router.get("/listeners/{user_id}", response_model=schemas.ListenerSummary)
def get_listener_stats(
    user_id: int,
    window: str = Query("all"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    aggregation_window = parse_window(window)
    ensure_listener_access(db, current_user, user_id)

    plays = repository.listener_plays(db, user_id)
    return reports.listener_summary(plays, utcnow(), aggregation_window)


@analytics_router.get("/history", response_model=List[schemas.PlayDisplay])
def get_streaming_history(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    plays = repository.listening_history(db, current_user.id, limit, offset)
    return reports.history_export(plays)


@analytics_router.get("/export")
def export_analytics_data(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    plays = repository.listener_plays(db, current_user.id)
    logger.info("Exporting %d play events for user %s", len(plays), current_user.id)
    return Response(
        content=json.dumps(reports.history_export(plays), indent=2),
        media_type="application/json",
        headers={"Content-Disposition": "attachment; filename=analytics-export.json"},
    )


# Discovery routes
discover_router = APIRouter()


@discover_router.get("/trending", response_model=List[schemas.FeedTrack])
def get_trending_tracks(db: Session = Depends(get_db)):
    # Tracks played this week, ranked by all-time plays
    recent_counts = repository.play_counts(db, since=LAST_7_DAYS.since(utcnow()))
    tracks = [track for track in repository.public_tracks(db) if track.id in recent_counts]
    return reports.track_feed(tracks, repository.play_counts(db), FEED_SIZE)


@discover_router.get("/recommended", response_model=List[schemas.FeedTrack])
def get_recommended_tracks(
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    genres = None
    if current_user is not None:
        likes = repository.listener_likes(db, current_user.id)
        genres = top_genres_for_user(likes, current_user.id, RECOMMENDATION_GENRES) or None

    tracks = repository.public_tracks(db, genres)
    return reports.track_feed(tracks, repository.play_counts(db), FEED_SIZE)


@discover_router.get("/genres/{genre}", response_model=List[schemas.FeedTrack])
def get_genre_feed(genre: str, db: Session = Depends(get_db)):
    tracks = repository.public_tracks(db, [genre.lower()])
    return reports.track_feed(tracks, repository.play_counts(db), FEED_SIZE)


@discover_router.get("/new-releases", response_model=List[schemas.TrackDisplay])
def get_new_releases(db: Session = Depends(get_db)):
    return reports.track_list(repository.public_tracks(db, limit=FEED_SIZE), FEED_SIZE)


@discover_router.get("/editor-picks", response_model=List[schemas.TrackDisplay])
def get_editor_picks(db: Session = Depends(get_db)):
    tracks = repository.public_tracks(db, editor_picks=True, limit=FEED_SIZE)
    return reports.track_list(tracks, FEED_SIZE)


def create_app(session_factory=None) -> FastAPI:
    if session_factory is None:
        engine = build_engine(DATABASE_URL)
        Base.metadata.create_all(bind=engine)
        session_factory = build_session_factory(engine)

    app = FastAPI(
        title="Music Streaming Analytics API",
        description="Listening analytics and discovery feeds for a music streaming platform",
        version="1.0.0",
    )
    app.state.session_factory = session_factory

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    install_error_handlers(app)

    app.include_router(analytics_router, prefix="/api/analytics", tags=["analytics"])
    app.include_router(discover_router, prefix="/api/discover", tags=["discover"])

    @app.get("/api")
    async def root():
        return {"message": "Welcome to the API"}

    return app


if __name__ == "__main__":
    import uvicorn
    configure_logging()
    uvicorn.run("main:create_app", factory=True, host=HOST, port=PORT, reload=True)
