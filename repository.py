"""Read queries feeding the analytics reports. One fetch per request."""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from analytics import ArtistRef, LikeRecord, PlayRecord, TrackRecord
from models import Like, PlayEvent, Track, Visibility


def to_track_record(track: Track) -> TrackRecord:
    return TrackRecord(
        id=track.id,
        title=track.title,
        genre=track.genre,
        artist=ArtistRef(id=track.artist.id, stage_name=track.artist.stage_name),
    )


def to_play_record(play: PlayEvent) -> PlayRecord:
    return PlayRecord(
        id=play.id,
        track=to_track_record(play.track),
        user_id=play.user_id,
        started_at=play.started_at,
        country=play.user.country if play.user else None,
    )


def to_like_record(like: Like) -> LikeRecord:
    return LikeRecord(id=like.id, user_id=like.user_id, track=to_track_record(like.track))


def _plays_query(db: Session):
    return db.query(PlayEvent).options(
        joinedload(PlayEvent.user),
        joinedload(PlayEvent.track).joinedload(Track.artist),
    )


def _likes_query(db: Session):
    return db.query(Like).options(joinedload(Like.track).joinedload(Track.artist))


def artist_tracks(db: Session, artist_id: int) -> List[TrackRecord]:
    tracks = (
        db.query(Track)
        .options(joinedload(Track.artist))
        .filter(Track.artist_id == artist_id)
        .order_by(Track.id)
        .all()
    )
    return [to_track_record(track) for track in tracks]


def artist_plays(db: Session, artist_id: int) -> List[PlayRecord]:
    plays = (
        _plays_query(db)
        .join(Track, PlayEvent.track_id == Track.id)
        .filter(Track.artist_id == artist_id)
        .order_by(PlayEvent.started_at, PlayEvent.id)
        .all()
    )
    return [to_play_record(play) for play in plays]


def artist_likes(db: Session, artist_id: int) -> List[LikeRecord]:
    likes = (
        _likes_query(db)
        .join(Track, Like.track_id == Track.id)
        .filter(Track.artist_id == artist_id)
        .order_by(Like.id)
        .all()
    )
    return [to_like_record(like) for like in likes]


def track_plays(db: Session, track_id: int) -> List[PlayRecord]:
    plays = (
        _plays_query(db)
        .filter(PlayEvent.track_id == track_id)
        .order_by(PlayEvent.started_at, PlayEvent.id)
        .all()
    )
    return [to_play_record(play) for play in plays]


def track_likes(db: Session, track_id: int) -> List[LikeRecord]:
    likes = _likes_query(db).filter(Like.track_id == track_id).order_by(Like.id).all()
    return [to_like_record(like) for like in likes]


def listener_plays(db: Session, user_id: int) -> List[PlayRecord]:
    plays = (
        _plays_query(db)
        .filter(PlayEvent.user_id == user_id)
        .order_by(PlayEvent.started_at, PlayEvent.id)
        .all()
    )
    return [to_play_record(play) for play in plays]


def listener_likes(db: Session, user_id: int) -> List[LikeRecord]:
    likes = _likes_query(db).filter(Like.user_id == user_id).order_by(Like.id).all()
    return [to_like_record(like) for like in likes]


def listening_history(db: Session, user_id: int, limit: int, offset: int) -> List[PlayRecord]:
    plays = (
        _plays_query(db)
        .filter(PlayEvent.user_id == user_id)
        .order_by(PlayEvent.started_at.desc(), PlayEvent.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return [to_play_record(play) for play in plays]


def public_tracks(
    db: Session,
    genres: Optional[List[str]] = None,
    editor_picks: bool = False,
    limit: Optional[int] = None,
) -> List[TrackRecord]:
    """Public tracks, newest first."""
    query = (
        db.query(Track)
        .options(joinedload(Track.artist))
        .filter(Track.visibility == Visibility.PUBLIC)
    )
    if genres is not None:
        query = query.filter(Track.genre.in_(genres))
    if editor_picks:
        query = query.filter(Track.editor_pick.is_(True))
    query = query.order_by(Track.created_at.desc(), Track.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return [to_track_record(track) for track in query.all()]


def play_counts(db: Session, since: Optional[datetime] = None) -> Dict[int, int]:
    query = db.query(PlayEvent.track_id, func.count(PlayEvent.id))
    if since is not None:
        query = query.filter(PlayEvent.started_at >= since)
    return {track_id: count for track_id, count in query.group_by(PlayEvent.track_id).all()}
