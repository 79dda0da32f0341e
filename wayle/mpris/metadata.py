"""Track metadata reported by media players."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

UNKNOWN = "Unknown"


@dataclass
class TrackMetadata:
    """What is known about the current track."""

    title: str = UNKNOWN
    artist: str = UNKNOWN
    album: str = UNKNOWN
    artwork_url: str | None = None
    length: timedelta | None = None
    track_id: str | None = None


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def track_metadata_from_mpris(metadata: Mapping[str, Any]) -> TrackMetadata:
    """Build ``TrackMetadata`` from an MPRIS metadata map, ignoring ill-typed entries."""
    track = TrackMetadata()

    title = metadata.get("xesam:title")
    if isinstance(title, str):
        track.title = title

    artist = metadata.get("xesam:artist")
    if isinstance(artist, (list, tuple)):
        names = [name for name in artist if isinstance(name, str)]
        if names:
            track.artist = ", ".join(names)
    elif isinstance(artist, str):
        track.artist = artist

    album = metadata.get("xesam:album")
    if isinstance(album, str):
        track.album = album

    art_url = metadata.get("mpris:artUrl")
    if isinstance(art_url, str):
        track.artwork_url = art_url

    length = metadata.get("mpris:length")
    if _is_positive_int(length):
        track.length = timedelta(microseconds=length)

    track_id = metadata.get("mpris:trackid")
    if isinstance(track_id, str):
        track.track_id = track_id

    return track