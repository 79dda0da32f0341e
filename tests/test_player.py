from datetime import timedelta

import pytest

from wayle.mpris.metadata import TrackMetadata
from wayle.mpris.player import (
    LoopMode,
    PlaybackState,
    PlayerAdded,
    PlayerCapabilities,
    PlayerEvent,
    PlayerId,
    PlayerInfo,
    PlayerRemoved,
    PlayerStateTracker,
    ShuffleMode,
    from_mpris_micros,
    parse_loop_mode,
    parse_playback_state,
    shuffle_mode_from_bool,
    to_mpris_micros,
)

PID = PlayerId("org.mpris.MediaPlayer2.vlc")


@pytest.mark.parametrize(
    "status,expected",
    [
        ("Playing", PlaybackState.PLAYING),
        ("Paused", PlaybackState.PAUSED),
        ("Stopped", PlaybackState.STOPPED),
        ("garbage", PlaybackState.STOPPED),
    ],
)
def test_parse_playback_state(status, expected):
    assert parse_playback_state(status) is expected


@pytest.mark.parametrize("state", list(PlaybackState))
def test_playback_state_round_trip(state):
    assert parse_playback_state(state.value) is state


@pytest.mark.parametrize(
    "status,expected",
    [
        ("None", LoopMode.NONE),
        ("Track", LoopMode.TRACK),
        ("Playlist", LoopMode.PLAYLIST),
        ("Random", LoopMode.UNSUPPORTED),
    ],
)
def test_parse_loop_mode(status, expected):
    assert parse_loop_mode(status) is expected


@pytest.mark.parametrize("mode", [LoopMode.NONE, LoopMode.TRACK, LoopMode.PLAYLIST])
def test_loop_mode_round_trip(mode):
    assert parse_loop_mode(mode.to_mpris()) is mode


def test_unsupported_loop_mode_maps_to_none():
    assert LoopMode.UNSUPPORTED.to_mpris() == "None"


def test_shuffle_conversions():
    assert shuffle_mode_from_bool(True) is ShuffleMode.ON
    assert shuffle_mode_from_bool(False) is ShuffleMode.OFF
    assert ShuffleMode.ON.to_bool() is True
    assert ShuffleMode.OFF.to_bool() is False
    assert ShuffleMode.UNSUPPORTED.to_bool() is False


def test_negative_micros_clamped():
    assert from_mpris_micros(-5) == timedelta(0)


@pytest.mark.parametrize("micros", [0, 1, 1_500_000, 3_600_000_000])
def test_micros_round_trip(micros):
    assert to_mpris_micros(from_mpris_micros(micros)) == micros


def test_player_id_equality_and_hash():
    same = PlayerId("org.mpris.MediaPlayer2.vlc")
    assert same == PID
    assert {PID: 1}[same] == 1
    assert PID.bus_name == "org.mpris.MediaPlayer2.vlc"


def test_tracker_defaults():
    info = PlayerInfo(PID, "VLC", True)
    tracker = PlayerStateTracker(info, object())
    assert tracker.last_playback_state is PlaybackState.STOPPED
    assert tracker.last_loop_mode is LoopMode.NONE
    assert tracker.last_shuffle_mode is ShuffleMode.OFF
    assert tracker.monitoring_handle is None


def test_snapshot_is_independent_copy():
    info = PlayerInfo(PID, "VLC", True, PlayerCapabilities(can_play=True))
    tracker = PlayerStateTracker(
        info,
        object(),
        last_metadata=TrackMetadata(title="Song"),
        last_position=timedelta(seconds=3),
        last_playback_state=PlaybackState.PLAYING,
    )
    snap = tracker.snapshot()
    assert snap.player_info == info
    assert snap.metadata == tracker.last_metadata
    assert snap.position == timedelta(seconds=3)
    assert snap.playback_state is PlaybackState.PLAYING
    snap.metadata.title = "Other"
    assert tracker.last_metadata.title == "Song"


def test_events_carry_player_id():
    info = PlayerInfo(PID, "VLC", False)
    added = PlayerAdded(info)
    removed = PlayerRemoved(PID)
    assert added.player_id == PID
    assert removed.player_id == PID
    assert isinstance(added, PlayerEvent) and isinstance(removed, PlayerEvent)