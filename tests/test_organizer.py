import json

from save_organizer.core.constants import SETTING_COMPACT_MODE
from save_organizer.core.signals import EventKind
from save_organizer.services.config_service import ConfigService
from save_organizer.services.game_service import GameRegistry
from save_organizer.services.organizer_service import Organizer

from conftest import FOLDER_GAME, GAMES, TEST_GAME, Recorder


def build_organizer(workspace, **kwargs):
    config_service = ConfigService(workspace.config_path)
    registry = GameRegistry(config_service, GAMES, platform="linux", environ={}, home=workspace.root / "home")
    return Organizer(config_service, GAMES, registry=registry, **kwargs)


def test_start_selects_first_game_without_history(organizer):
    organizer.start()

    assert organizer.selection.game == TEST_GAME
    assert organizer.selection.profile.name == "alpha"


def test_selection_is_remembered_between_runs(workspace):
    with build_organizer(workspace) as first:
        first.start()
        first.selection.switch_to_profile(first.profiles.get_profile(TEST_GAME, "beta"))

    raw = json.loads(workspace.config_path.read_text(encoding="utf-8"))
    assert raw["settings"]["last_game_key"] == TEST_GAME.key
    assert raw["games"][TEST_GAME.key]["last_profile"] == "beta"

    with build_organizer(workspace) as second:
        second.start()
        assert second.selection.game == TEST_GAME
        assert second.selection.profile.name == "beta"


def test_unknown_last_game_falls_back_to_first(workspace, config_service):
    config_service.update_setting("last_game_key", "DEMONS_SOULS")

    with build_organizer(workspace) as organizer:
        organizer.start()
        assert organizer.selection.game == GAMES[0]


def test_vanished_last_profile_keeps_default(workspace, config_service):
    config_service.update_setting("last_game_key", FOLDER_GAME.key)
    config_service.update_game_config(FOLDER_GAME.key, last_profile="deleted run")

    with build_organizer(workspace) as organizer:
        organizer.start()
        assert organizer.selection.game == FOLDER_GAME
        assert organizer.selection.profile.name == "runs"


def test_change_setting_persists_and_announces(organizer):
    recorder = Recorder()
    organizer.hub.subscribe(recorder)

    organizer.change_setting(SETTING_COMPACT_MODE, True)

    assert organizer.compact_mode is True
    assert recorder.payloads(EventKind.SETTING_CHANGED) == [SETTING_COMPACT_MODE]


def test_close_is_idempotent_and_disconnects(organizer):
    recorder = Recorder()
    organizer.hub.subscribe(recorder)
    organizer.selection.switch_to_game(TEST_GAME)

    organizer.close()
    organizer.close()

    assert organizer.selection.game is None
    assert not organizer.hub.is_subscribed(recorder)
    organizer.hub.publish(EventKind.SETTING_CHANGED, SETTING_COMPACT_MODE)
    assert EventKind.SETTING_CHANGED not in recorder.kinds()


def test_watcher_follows_selection(qapp, workspace):
    with build_organizer(workspace, watch_filesystem=True) as organizer:
        recorder = Recorder()
        organizer.hub.subscribe(recorder)
        organizer.selection.switch_to_game(TEST_GAME)
        alpha = organizer.selection.profile

        watched = set(organizer.watcher.watched_paths())
        assert str(workspace.profiles_dir) in watched
        assert str(alpha.directory) in watched
        assert str(workspace.live_file) in watched

        (alpha.directory / "dropped in").write_bytes(b"external")
        recorder.clear()
        organizer.watcher.on_directory_changed(str(alpha.directory))

        assert recorder.kinds() == [EventKind.ENTRIES_REFRESHED]
        assert [e.name for e in organizer.catalog.list_entries(alpha)] == ["dropped in"]


def test_set_save_location_announces_the_game(organizer, workspace):
    recorder = Recorder()
    organizer.hub.subscribe(recorder)
    other = workspace.root / "elsewhere"
    other.mkdir()
    (other / TEST_GAME.save_file_name).write_bytes(b"moved")

    organizer.set_save_location(TEST_GAME, other)

    assert recorder.kinds() == [EventKind.SAVE_LOCATION_CHANGED]
    assert recorder.payloads(EventKind.SAVE_LOCATION_CHANGED) == [TEST_GAME]
    assert organizer.registry.resolve_save_location(TEST_GAME) == other / TEST_GAME.save_file_name


def test_watcher_follows_save_location(qapp, workspace):
    with build_organizer(workspace, watch_filesystem=True) as organizer:
        organizer.selection.switch_to_game(TEST_GAME)
        other = workspace.root / "elsewhere"
        other.mkdir()
        (other / TEST_GAME.save_file_name).write_bytes(b"moved")

        organizer.set_save_location(TEST_GAME, other)

        watched = set(organizer.watcher.watched_paths())
        assert str(other / TEST_GAME.save_file_name) in watched
        assert str(workspace.live_file) not in watched
