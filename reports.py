"""
Report shapes returned by the analytics routes.

Field names here are the public JSON contract. Inputs are assumed to be
authorized already.
"""

from datetime import datetime, timezone, tzinfo
from typing import Dict, List, Sequence

from analytics import (
    ALL_TIME,
    LAST_7_DAYS,
    LAST_30_DAYS,
    AggregationWindow,
    LikeRecord,
    PlayRecord,
    TrackRecord,
    count_genres,
    count_unique,
    histogram_by_category,
    histogram_by_day,
    tally,
    top_n,
)

ARTIST_TOP_TRACKS = 5
LISTENER_TOP_ARTISTS = 5
LISTENER_TOP_GENRES = 5


def isoformat(timestamp: datetime) -> str:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def artist_ref(artist) -> dict:
    return {"id": artist.id, "stageName": artist.stage_name}


def serialize_track(track: TrackRecord) -> dict:
    return {
        "id": track.id,
        "title": track.title,
        "genre": track.genre,
        "artistId": track.artist.id,
        "artist": artist_ref(track.artist),
    }


def serialize_play(play: PlayRecord) -> dict:
    return {
        "id": play.id,
        "trackId": play.track.id,
        "userId": play.user_id,
        "startedAt": isoformat(play.started_at),
        "track": serialize_track(play.track),
    }


def _country(play: PlayRecord):
    return play.country


def _started_at(play: PlayRecord):
    return play.started_at


def artist_summary(
    tracks: Sequence[TrackRecord],
    plays: Sequence[PlayRecord],
    likes: Sequence[LikeRecord],
    now: datetime,
    window: AggregationWindow = ALL_TIME,
    tz: tzinfo = timezone.utc,
) -> dict:
    plays = [play for play in plays if window.contains(play.started_at, now)]
    plays_by_track = tally(plays, lambda play: play.track.id)
    likes_by_track = tally(likes, lambda like: like.track.id)

    top_tracks = top_n(tracks, lambda track: plays_by_track.get(track.id, 0), ARTIST_TOP_TRACKS)

    return {
        "summary": {
            "total_plays": len(plays),
            "unique_listeners": count_unique(plays, lambda play: play.user_id),
            "total_likes": len(likes),
        },
        "dailyPlays": histogram_by_day(plays, _started_at, tz),
        "topTracks": [
            {
                "id": track.id,
                "title": track.title,
                "plays": plays_by_track.get(track.id, 0),
                "likes": likes_by_track.get(track.id, 0),
            }
            for track in top_tracks
        ],
        "demographics": histogram_by_category(plays, _country),
        "timeRange": {
            "sevenDays": isoformat(LAST_7_DAYS.since(now)),
            "thirtyDays": isoformat(LAST_30_DAYS.since(now)),
        },
    }


def track_summary(
    plays: Sequence[PlayRecord],
    likes: Sequence[LikeRecord],
    now: datetime,
    tz: tzinfo = timezone.utc,
) -> dict:
    recent = [play for play in plays if LAST_30_DAYS.contains(play.started_at, now)]
    return {
        "plays": len(plays),
        "likes": len(likes),
        "playHistory": histogram_by_day(recent, _started_at, tz),
        "listenerLocations": histogram_by_category(recent, _country),
    }


def listener_summary(
    plays: Sequence[PlayRecord],
    now: datetime,
    window: AggregationWindow = ALL_TIME,
) -> dict:
    plays = [play for play in plays if window.contains(play.started_at, now)]

    artists = {}
    for play in plays:
        artists.setdefault(play.track.artist.id, play.track.artist)
    artist_counts = tally(plays, lambda play: play.track.artist.id)
    top_artists = top_n(artist_counts.items(), lambda item: item[1], LISTENER_TOP_ARTISTS)

    genre_counts = count_genres(play.track for play in plays)
    top_genres = top_n(genre_counts.items(), lambda item: item[1], LISTENER_TOP_GENRES)

    return {
        "total_plays": len(plays),
        "artists_discovered": count_unique(plays, lambda play: play.track.artist.id),
        "unique_tracks": count_unique(plays, lambda play: play.track.id),
        "topArtists": [
            {"artist": artist_ref(artists[artist_id]), "count": count}
            for artist_id, count in top_artists
        ],
        "topGenres": [{"genre": genre, "count": count} for genre, count in top_genres],
    }


def history_export(plays: Sequence[PlayRecord]) -> List[dict]:
    return [serialize_play(play) for play in plays]


def track_feed(tracks: Sequence[TrackRecord], play_counts: Dict[int, int], limit: int) -> List[dict]:
    """Tracks ordered by play count, most played first."""
    ranked = top_n(tracks, lambda track: play_counts.get(track.id, 0), limit)
    return [dict(serialize_track(track), plays=play_counts.get(track.id, 0)) for track in ranked]


def track_list(tracks: Sequence[TrackRecord], limit: int) -> List[dict]:
    return [serialize_track(track) for track in tracks[:limit]]
