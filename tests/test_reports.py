"""
Tests for the report shapes built from in-memory rows.
"""

import json
from datetime import datetime, timedelta

from analytics import LAST_7_DAYS, ArtistRef, LikeRecord, PlayRecord, TrackRecord
from reports import (
    artist_summary,
    history_export,
    isoformat,
    listener_summary,
    track_feed,
    track_list,
    track_summary,
)

NOW = datetime(2024, 3, 1, 12, 0)

BURNA = ArtistRef(id=1, stage_name="Burna")
TEMS = ArtistRef(id=2, stage_name="Tems")

LAST_LAST = TrackRecord(id=10, title="Last Last", genre="afrobeats", artist=BURNA)
ON_THE_LOW = TrackRecord(id=11, title="On The Low", genre=None, artist=BURNA)
FREE_MIND = TrackRecord(id=20, title="Free Mind", genre="rnb", artist=TEMS)


def play(play_id, track, user_id, days_ago=0, country=None):
    return PlayRecord(
        id=play_id,
        track=track,
        user_id=user_id,
        started_at=NOW - timedelta(days=days_ago),
        country=country,
    )


class TestArtistSummary:
    def test_totals(self):
        plays = [
            play(1, LAST_LAST, 100, country="NG"),
            play(2, LAST_LAST, 101, country="NG"),
            play(3, LAST_LAST, 102, country="US"),
            play(4, LAST_LAST, 100),
        ]
        likes = [LikeRecord(1, 100, LAST_LAST), LikeRecord(2, 101, LAST_LAST)]

        report = artist_summary([LAST_LAST], plays, likes, NOW)

        assert report["summary"] == {"total_plays": 4, "unique_listeners": 3, "total_likes": 2}
        assert report["dailyPlays"] == {"2024-03-01": 4}
        assert report["demographics"] == {"NG": 2, "US": 1, "Unknown": 1}
        assert report["topTracks"] == [{"id": 10, "title": "Last Last", "plays": 4, "likes": 2}]

    def test_top_tracks_include_unplayed_and_cap_at_five(self):
        tracks = [
            TrackRecord(id=i, title=f"T{i}", genre=None, artist=BURNA) for i in range(1, 8)
        ]
        plays = [play(1, tracks[6], 100), play(2, tracks[6], 101), play(3, tracks[2], 100)]

        report = artist_summary(tracks, plays, [], NOW)

        assert [t["id"] for t in report["topTracks"]] == [7, 3, 1, 2, 4]
        assert report["topTracks"][2]["plays"] == 0

    def test_time_range(self):
        report = artist_summary([], [], [], NOW)
        assert report["timeRange"] == {
            "sevenDays": "2024-02-23T12:00:00.000Z",
            "thirtyDays": "2024-01-31T12:00:00.000Z",
        }

    def test_window_limits_plays(self):
        plays = [play(1, LAST_LAST, 100, days_ago=1), play(2, LAST_LAST, 101, days_ago=10)]

        report = artist_summary([LAST_LAST], plays, [], NOW, LAST_7_DAYS)

        assert report["summary"]["total_plays"] == 1
        assert report["summary"]["unique_listeners"] == 1

    def test_time_range_has_millisecond_precision(self):
        report = artist_summary([], [], [], datetime(2024, 3, 1, 12, 0, 0, 123456))
        assert report["timeRange"]["sevenDays"] == "2024-02-23T12:00:00.123Z"

    def test_empty(self):
        report = artist_summary([], [], [], NOW)
        assert report["summary"] == {"total_plays": 0, "unique_listeners": 0, "total_likes": 0}
        assert report["dailyPlays"] == {}
        assert report["topTracks"] == []
        assert report["demographics"] == {}

    def test_same_snapshot_same_bytes(self):
        plays = [
            play(1, LAST_LAST, 100, days_ago=2, country="GH"),
            play(2, ON_THE_LOW, 101, days_ago=1),
            play(3, LAST_LAST, 101, country="NG"),
        ]
        likes = [LikeRecord(1, 100, ON_THE_LOW)]
        first = json.dumps(artist_summary([LAST_LAST, ON_THE_LOW], plays, likes, NOW))
        second = json.dumps(artist_summary([LAST_LAST, ON_THE_LOW], plays, likes, NOW))
        assert first == second


class TestTrackSummary:
    def test_history_is_last_thirty_days(self):
        plays = [
            play(1, LAST_LAST, 100, days_ago=0, country="NG"),
            play(2, LAST_LAST, 101, days_ago=29, country="GH"),
            play(3, LAST_LAST, 102, days_ago=45, country="US"),
        ]
        likes = [LikeRecord(1, 100, LAST_LAST)]

        report = track_summary(plays, likes, NOW)

        assert report["plays"] == 3
        assert report["likes"] == 1
        assert report["playHistory"] == {"2024-02-01": 1, "2024-03-01": 1}
        assert report["listenerLocations"] == {"NG": 1, "GH": 1}


class TestListenerSummary:
    def test_counts_and_rankings(self):
        plays = [
            play(1, LAST_LAST, 100),
            play(2, FREE_MIND, 100),
            play(3, FREE_MIND, 100),
            play(4, ON_THE_LOW, 100),
        ]

        report = listener_summary(plays, NOW)

        assert report["total_plays"] == 4
        assert report["artists_discovered"] == 2
        assert report["unique_tracks"] == 3
        assert report["topArtists"] == [
            {"artist": {"id": 1, "stageName": "Burna"}, "count": 2},
            {"artist": {"id": 2, "stageName": "Tems"}, "count": 2},
        ]

    def test_untagged_genre_left_out_of_top_genres(self):
        # Country falls back to "Unknown" but genre rankings drop untagged tracks
        plays = [play(1, ON_THE_LOW, 100), play(2, ON_THE_LOW, 100), play(3, FREE_MIND, 100)]

        report = listener_summary(plays, NOW)

        assert report["topGenres"] == [{"genre": "rnb", "count": 1}]

    def test_empty(self):
        assert listener_summary([], NOW) == {
            "total_plays": 0,
            "artists_discovered": 0,
            "unique_tracks": 0,
            "topArtists": [],
            "topGenres": [],
        }


class TestHistoryExport:
    def test_rows_are_not_aggregated(self):
        rows = history_export([play(1, LAST_LAST, 100), play(2, LAST_LAST, 100)])
        assert len(rows) == 2
        assert rows[0] == {
            "id": 1,
            "trackId": 10,
            "userId": 100,
            "startedAt": "2024-03-01T12:00:00.000Z",
            "track": {
                "id": 10,
                "title": "Last Last",
                "genre": "afrobeats",
                "artistId": 1,
                "artist": {"id": 1, "stageName": "Burna"},
            },
        }


class TestTrackFeed:
    def test_ordered_by_plays(self):
        feed = track_feed([LAST_LAST, ON_THE_LOW, FREE_MIND], {20: 5, 10: 2}, 2)
        assert [(t["id"], t["plays"]) for t in feed] == [(20, 5), (10, 2)]

    def test_list_keeps_input_order(self):
        feed = track_list([ON_THE_LOW, FREE_MIND, LAST_LAST], 2)
        assert [t["id"] for t in feed] == [11, 20]
        assert "plays" not in feed[0]


def test_isoformat_truncates_to_milliseconds():
    assert isoformat(datetime(2024, 1, 1, 8, 30, 5, 999999)) == "2024-01-01T08:30:05.999Z"
