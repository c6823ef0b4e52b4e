import pytest

from save_organizer.core.exceptions import (
    DuplicateNameError,
    InvalidNameError,
    NotFoundError,
    ProfileDirectoryNotSetError,
    SaveFileIOError,
)
from save_organizer.core.signals import EventKind

from conftest import NO_READ_ONLY_GAME, TEST_GAME


def names(profiles):
    return [p.name for p in profiles]


def test_first_scan_lists_folders_by_name(organizer, workspace):
    (workspace.profiles_dir / "Gamma").mkdir()
    (workspace.profiles_dir / "notes.txt").write_text("not a profile")

    assert names(organizer.profiles.list_profiles(TEST_GAME)) == ["alpha", "beta", "Gamma"]


def test_create_profile_appends_and_leaves_selection(selected, recorder, workspace):
    profile = selected.profiles.create_profile(TEST_GAME, "all bosses")

    assert profile.directory == workspace.profiles_dir / "all bosses"
    assert profile.directory.is_dir()
    assert names(selected.profiles.list_profiles(TEST_GAME)) == ["alpha", "beta", "all bosses"]
    assert recorder.kinds() == [EventKind.PROFILE_CREATED]
    assert recorder.payloads(EventKind.PROFILE_CREATED) == [profile]
    assert selected.selection.profile.name == "alpha"


def test_create_profile_in_explicit_directory(organizer, workspace):
    target = workspace.root / "elsewhere" / "any%"

    profile = organizer.profiles.create_profile(TEST_GAME, "any%", directory=target)

    assert profile.directory == target
    assert target.is_dir()


def test_duplicate_profile_name_is_rejected(organizer, recorder):
    with pytest.raises(DuplicateNameError):
        organizer.profiles.create_profile(TEST_GAME, "ALPHA")
    assert recorder.events == []
    assert names(organizer.profiles.list_profiles(TEST_GAME)) == ["alpha", "beta"]


@pytest.mark.parametrize("bad_name", ["", "   ", " padded", "a/b", "..", "x.organizer-tmp"])
def test_invalid_profile_names_are_rejected(organizer, bad_name):
    with pytest.raises(InvalidNameError):
        organizer.profiles.create_profile(TEST_GAME, bad_name)


def test_create_without_profiles_directory(organizer):
    with pytest.raises(ProfileDirectoryNotSetError):
        organizer.profiles.create_profile(NO_READ_ONLY_GAME, "any%")


def test_delete_selected_profile_falls_back_to_first(selected, recorder, workspace):
    alpha = selected.selection.profile

    selected.profiles.delete_profile(alpha)

    assert recorder.kinds() == [EventKind.PROFILE_DELETED, EventKind.CHANGED_TO_PROFILE]
    assert selected.selection.profile.name == "beta"
    # Without delete_files the folder stays on disk
    assert (workspace.profiles_dir / "alpha").is_dir()
    assert names(selected.profiles.list_profiles(TEST_GAME)) == ["beta"]


def test_deleting_last_profile_selects_placeholder(selected):
    for profile in selected.profiles.list_profiles(TEST_GAME):
        selected.profiles.delete_profile(profile)

    assert selected.selection.profile.is_placeholder
    assert selected.selection.profile.game == TEST_GAME


def test_delete_unselected_profile_keeps_selection(selected, recorder):
    selected.profiles.delete_profile(selected.profiles.get_profile(TEST_GAME, "beta"))

    assert recorder.kinds() == [EventKind.PROFILE_DELETED]
    assert selected.selection.profile.name == "alpha"


def test_delete_with_files_uses_recycle_bin(selected, system_utils, workspace):
    beta = selected.profiles.get_profile(TEST_GAME, "beta")

    selected.profiles.delete_profile(beta, delete_files=True)

    assert system_utils.recycled == [workspace.profiles_dir / "beta"]


def test_failed_recycle_keeps_profile(selected, system_utils, recorder):
    system_utils.succeed = False
    beta = selected.profiles.get_profile(TEST_GAME, "beta")

    with pytest.raises(SaveFileIOError):
        selected.profiles.delete_profile(beta, delete_files=True)
    assert names(selected.profiles.list_profiles(TEST_GAME)) == ["alpha", "beta"]
    assert recorder.events == []


def test_delete_unknown_profile(selected):
    with pytest.raises(NotFoundError):
        selected.profiles.delete_profile(selected.profiles.placeholder(TEST_GAME))


def test_rename_selected_profile_renames_folder(selected, recorder, workspace):
    renamed = selected.profiles.rename_profile(selected.selection.profile, "glitchless")

    assert renamed.directory == workspace.profiles_dir / "glitchless"
    assert renamed.directory.is_dir()
    assert not (workspace.profiles_dir / "alpha").exists()
    assert names(selected.profiles.list_profiles(TEST_GAME)) == ["glitchless", "beta"]
    assert recorder.payloads(EventKind.CHANGED_TO_PROFILE) == [renamed]
    assert selected.selection.profile.name == "glitchless"


def test_rename_to_existing_name_is_rejected(selected):
    with pytest.raises(DuplicateNameError):
        selected.profiles.rename_profile(selected.selection.profile, "Beta")


def test_set_profile_directory_rescans_and_repairs_selection(selected, recorder, workspace):
    new_dir = workspace.root / "other_profiles"
    (new_dir / "gamma").mkdir(parents=True)

    selected.profiles.set_profile_directory(TEST_GAME, new_dir)

    assert recorder.kinds() == [EventKind.PROFILE_DIRECTORY_CHANGED, EventKind.CHANGED_TO_PROFILE]
    assert names(selected.profiles.list_profiles(TEST_GAME)) == ["gamma"]
    assert selected.selection.profile.name == "gamma"
    assert selected.config_service.current.for_game(TEST_GAME.key).profiles_directory == new_dir


def test_refresh_picks_up_external_folders(selected, recorder, workspace):
    (workspace.profiles_dir / "aaa").mkdir()

    profiles = selected.profiles.refresh(TEST_GAME)

    # Known profiles keep their place, new folders are appended
    assert names(profiles) == ["alpha", "beta", "aaa"]
    assert recorder.kinds() == [EventKind.PROFILE_DIRECTORY_CHANGED]
    assert selected.selection.profile.name == "alpha"


def test_refresh_without_changes_is_silent(selected, recorder):
    selected.profiles.refresh(TEST_GAME)

    assert recorder.events == []


def test_first_profile_does_not_replace_placeholder_selection(organizer, recorder, workspace):
    organizer.selection.switch_to_game(NO_READ_ONLY_GAME)
    assert organizer.profiles.list_profiles(NO_READ_ONLY_GAME) == []
    recorder.clear()

    organizer.profiles.create_profile(NO_READ_ONLY_GAME, "Main", directory=workspace.root / "main")

    assert recorder.kinds() == [EventKind.PROFILE_CREATED]
    assert organizer.selection.profile.is_placeholder


def test_create_delete_sequence_keeps_unique_live_profiles(selected):
    expected = ["alpha", "beta"]
    for step, name in enumerate(["c1", "c2", "c3", "c4"]):
        selected.profiles.create_profile(TEST_GAME, name)
        expected.append(name)
        if step % 2:
            victim = expected.pop(0)
            selected.profiles.delete_profile(selected.profiles.get_profile(TEST_GAME, victim))

        current = names(selected.profiles.list_profiles(TEST_GAME))
        assert current == expected
        assert len(set(current)) == len(current)
        assert selected.selection.profile.name in current


def test_rename_announces_previous_and_renamed_profile(selected, recorder):
    beta = selected.profiles.get_profile(TEST_GAME, "beta")

    renamed = selected.profiles.rename_profile(beta, "any%")

    assert recorder.kinds() == [EventKind.PROFILE_RENAMED]
    assert recorder.payloads(EventKind.PROFILE_RENAMED) == [(beta, renamed)]

    recorder.clear()
    alpha = selected.selection.profile
    glitchless = selected.profiles.rename_profile(alpha, "glitchless")
    assert recorder.kinds() == [EventKind.PROFILE_RENAMED, EventKind.CHANGED_TO_PROFILE]
    assert recorder.payloads(EventKind.PROFILE_RENAMED) == [(alpha, glitchless)]
