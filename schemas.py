from typing import Dict, List, Optional

from pydantic import BaseModel


class ArtistDisplay(BaseModel):
    id: int
    stageName: str


class TrackDisplay(BaseModel):
    id: int
    title: str
    genre: Optional[str]
    artistId: int
    artist: ArtistDisplay


class FeedTrack(TrackDisplay):
    plays: int


class PlayDisplay(BaseModel):
    id: int
    trackId: int
    userId: int
    startedAt: str
    track: TrackDisplay


# Artist report
class ArtistTotals(BaseModel):
    total_plays: int
    unique_listeners: int
    total_likes: int


class TopTrack(BaseModel):
    id: int
    title: str
    plays: int
    likes: int


class TimeRange(BaseModel):
    sevenDays: str
    thirtyDays: str


class ArtistSummary(BaseModel):
    summary: ArtistTotals
    dailyPlays: Dict[str, int]
    topTracks: List[TopTrack]
    demographics: Dict[str, int]
    timeRange: TimeRange


# Track report
class TrackSummary(BaseModel):
    plays: int
    likes: int
    playHistory: Dict[str, int]
    listenerLocations: Dict[str, int]


# Listener report
class ArtistCount(BaseModel):
    artist: ArtistDisplay
    count: int


class GenreCount(BaseModel):
    genre: str
    count: int


class ListenerSummary(BaseModel):
    total_plays: int
    artists_discovered: int
    unique_tracks: int
    topArtists: List[ArtistCount]
    topGenres: List[GenreCount]
