import pytest

from wayle.mpris.errors import PlayerNotFoundError
from wayle.mpris.manager import PlayerManager, load_active_player_from_file
from wayle.mpris.player import PlayerId, PlayerInfo, PlayerStateTracker
from wayle.runtime_state import get_active_player, set_active_player

FIRST = PlayerId("org.mpris.MediaPlayer2.first")
SECOND = PlayerId("org.mpris.MediaPlayer2.second")
GONE = PlayerId("org.mpris.MediaPlayer2.gone")


class Handle:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


def tracker(player_id):
    return PlayerStateTracker(PlayerInfo(player_id, player_id.bus_name, True), None)


def players(*ids):
    return {player_id: tracker(player_id) for player_id in ids}


def test_load_active_player_missing_file(tmp_path):
    assert load_active_player_from_file(tmp_path) is None


def test_load_active_player_round_trip(tmp_path):
    set_active_player(FIRST.bus_name, tmp_path)
    assert load_active_player_from_file(tmp_path) == FIRST


def test_set_active_player_unknown_raises(tmp_path):
    manager = PlayerManager(players(FIRST), config_dir=tmp_path)
    with pytest.raises(PlayerNotFoundError) as info:
        manager.set_active_player(GONE)
    assert info.value.player_id == GONE
    assert manager.active_player() is None


def test_set_active_player_persists(tmp_path):
    manager = PlayerManager(players(FIRST, SECOND), config_dir=tmp_path)
    manager.set_active_player(SECOND)
    assert manager.active_player() == SECOND
    assert get_active_player(tmp_path) == SECOND.bus_name


def test_clear_active_player(tmp_path):
    manager = PlayerManager(players(FIRST), active_player=FIRST, config_dir=tmp_path)
    manager.set_active_player(None)
    assert manager.active_player() is None
    assert get_active_player(tmp_path) is None


def test_active_player_falls_back_when_gone(tmp_path):
    manager = PlayerManager(players(FIRST), active_player=GONE, config_dir=tmp_path)
    assert manager.active_player() == FIRST
    assert get_active_player(tmp_path) == FIRST.bus_name


def test_fallback_without_players(tmp_path):
    set_active_player(GONE.bus_name, tmp_path)
    manager = PlayerManager(active_player=GONE, config_dir=tmp_path)
    assert manager.find_and_set_fallback_player() is None
    assert manager.active_player() is None
    assert get_active_player(tmp_path) is None


def test_validate_loaded_active_player(tmp_path):
    manager = PlayerManager(players(SECOND), active_player=GONE, config_dir=tmp_path)
    manager.validate_loaded_active_player()
    assert manager.active_player() == SECOND


def test_validate_keeps_known_player():
    manager = PlayerManager(players(FIRST, SECOND), active_player=SECOND)
    manager.validate_loaded_active_player()
    assert manager.active_player() == SECOND


def test_ignored_players():
    manager = PlayerManager(ignored_players=["firefox"])
    assert manager.should_ignore_player("org.mpris.MediaPlayer2.firefox.instance1")
    assert not manager.should_ignore_player("org.mpris.MediaPlayer2.spotify")
    manager.set_ignored_players(["spotify", "vlc"])
    assert manager.get_ignored_players() == ["spotify", "vlc"]
    assert manager.should_ignore_player("org.mpris.MediaPlayer2.spotify")


def test_get_ignored_players_is_a_copy():
    manager = PlayerManager(ignored_players=["vlc"])
    manager.get_ignored_players().append("other")
    assert manager.get_ignored_players() == ["vlc"]


@pytest.mark.asyncio
async def test_control_active_player_without_active():
    manager = PlayerManager(players(FIRST))

    async def action(player_id):
        return player_id

    assert await manager.control_active_player(action) is None


@pytest.mark.asyncio
async def test_control_active_player_runs_action():
    manager = PlayerManager(players(FIRST), active_player=FIRST)

    async def action(player_id):
        return player_id.bus_name

    assert await manager.control_active_player(action) == FIRST.bus_name


def test_shutdown_cancels_everything():
    tracked = players(FIRST, SECOND)
    handles = [Handle(), Handle()]
    for item, handle in zip(tracked.values(), handles):
        item.monitoring_handle = handle
    discovery = Handle()
    manager = PlayerManager(tracked)
    manager.discovery_task = discovery
    manager.shutdown()
    assert discovery.cancelled
    assert all(handle.cancelled for handle in handles)
    assert manager.players == {}
    assert manager.discovery_task is None