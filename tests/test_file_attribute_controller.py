import os
import stat

import pytest

from save_organizer.core.exceptions import SaveFileIOError
from save_organizer.core.signals import EventKind
from save_organizer.utils import file_utils

from conftest import FOLDER_GAME, NO_READ_ONLY_GAME, TEST_GAME


def owner_writable(path):
    return bool(path.stat().st_mode & stat.S_IWUSR)


def test_toggle_flips_and_announces(selected, recorder, workspace):
    attributes = selected.attributes
    assert attributes.is_writable(TEST_GAME) is True

    assert attributes.toggle_writable(TEST_GAME) is False
    assert not owner_writable(workspace.live_file)
    assert recorder.payloads(EventKind.GAME_FILE_WRITABLE_STATE_CHANGED) == [False]

    assert attributes.toggle_writable(TEST_GAME) is True
    assert owner_writable(workspace.live_file)
    assert recorder.payloads(EventKind.GAME_FILE_WRITABLE_STATE_CHANGED) == [False, True]


def test_toggle_is_ignored_for_games_without_read_only(organizer, recorder, workspace):
    assert organizer.attributes.toggle_writable(NO_READ_ONLY_GAME) is None

    assert owner_writable(workspace.no_ro_file)
    assert recorder.events == []


def test_toggle_is_ignored_without_save_file(organizer, recorder, workspace):
    workspace.live_file.unlink()

    assert organizer.attributes.is_writable(TEST_GAME) is None
    assert organizer.attributes.toggle_writable(TEST_GAME) is None
    assert recorder.events == []


def test_failed_chmod_is_reported(organizer, recorder, monkeypatch):
    def broken_chmod(path, mode):
        raise PermissionError("not allowed")

    monkeypatch.setattr(file_utils.os, "chmod", broken_chmod)

    with pytest.raises(SaveFileIOError):
        organizer.attributes.toggle_writable(TEST_GAME)
    assert recorder.events == []


def test_external_change_is_detected_after_baseline(organizer, recorder, workspace):
    attributes = organizer.attributes

    # The first look only records what is there
    assert attributes.check_external_change(TEST_GAME) is False
    assert attributes.check_external_change(TEST_GAME) is False

    os.chmod(workspace.live_file, stat.S_IRUSR)

    assert attributes.check_external_change(TEST_GAME) is True
    assert recorder.payloads(EventKind.GAME_FILE_WRITABLE_STATE_CHANGED) == [False]


def test_folder_game_save_file_is_inside_the_folder(organizer, workspace):
    assert organizer.attributes.save_file(FOLDER_GAME) == workspace.folder_live / FOLDER_GAME.save_file_name
