import pytest

from save_organizer.core.exceptions import InvalidSelectionError, NotFoundError
from save_organizer.core.signals import EventKind
from save_organizer.models.game_model import Game
from save_organizer.models.profile_model import Profile

from conftest import FOLDER_GAME, NO_READ_ONLY_GAME, TEST_GAME


def test_switch_to_game_selects_first_profile(organizer, recorder):
    organizer.selection.switch_to_game(TEST_GAME)

    assert recorder.kinds() == [EventKind.CHANGED_TO_GAME, EventKind.CHANGED_TO_PROFILE]
    assert organizer.selection.game == TEST_GAME
    assert organizer.selection.profile.name == "alpha"
    assert organizer.selection.entry is None
    assert organizer.selection.is_profile_selected()


def test_game_without_profiles_selects_placeholder(organizer, recorder):
    organizer.selection.switch_to_game(NO_READ_ONLY_GAME)

    profile = recorder.payloads(EventKind.CHANGED_TO_PROFILE)[0]
    assert profile.is_placeholder
    assert profile.game == NO_READ_ONLY_GAME
    assert not organizer.selection.is_profile_selected()


def test_unknown_game_is_rejected(organizer, recorder):
    stranger = Game("BLOODBORNE", "Bloodborne", "BB", "userdata0000", "Bloodborne")

    with pytest.raises(InvalidSelectionError):
        organizer.selection.switch_to_game(stranger)
    assert recorder.events == []
    assert organizer.selection.game is None


def test_switch_to_profile(selected, recorder):
    beta = selected.profiles.get_profile(TEST_GAME, "beta")

    selected.selection.switch_to_profile(beta)

    assert recorder.kinds() == [EventKind.CHANGED_TO_PROFILE]
    assert selected.selection.profile is beta


def test_switch_to_placeholder_is_allowed(selected, recorder):
    selected.selection.switch_to_profile(Profile(TEST_GAME, ""))

    assert selected.selection.profile.is_placeholder
    assert recorder.kinds() == [EventKind.CHANGED_TO_PROFILE]


def test_profile_of_other_game_is_rejected(selected, recorder):
    foreign = selected.profiles.get_profile(FOLDER_GAME, "runs")

    with pytest.raises(InvalidSelectionError):
        selected.selection.switch_to_profile(foreign)
    assert selected.selection.profile.name == "alpha"
    assert recorder.events == []


def test_stale_profile_is_rejected(selected):
    gone = Profile(TEST_GAME, "gone", selected.profiles.profiles_directory(TEST_GAME) / "gone")

    with pytest.raises(NotFoundError):
        selected.selection.switch_to_profile(gone)


def test_switching_profile_clears_selected_entry(selected):
    alpha = selected.selection.profile
    entry = selected.catalog.create_entry(alpha, "first")
    selected.catalog.select_entry(entry)
    assert selected.selection.entry == entry

    selected.selection.switch_to_profile(selected.profiles.get_profile(TEST_GAME, "beta"))

    assert selected.selection.entry is None


def test_stage_entry_checks_ownership(selected):
    beta = selected.profiles.get_profile(TEST_GAME, "beta")
    entry = selected.catalog.create_entry(beta, "elsewhere")

    with pytest.raises(InvalidSelectionError):
        selected.selection.stage_entry(entry)
