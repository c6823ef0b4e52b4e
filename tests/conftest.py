import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from PyQt6.QtCore import QCoreApplication

from save_organizer.models.game_model import Game
from save_organizer.services.config_service import ConfigService
from save_organizer.services.game_service import GameRegistry
from save_organizer.services.organizer_service import Organizer
from save_organizer.utils.logger_utils import reconfigure_logger


TEST_GAME = Game("TEST_GAME", "Test Game", "TG", "SAVE0000.sl2", "TestGame")
NO_READ_ONLY_GAME = Game(
    "NO_READ_ONLY", "No Read-Only Game", "NRO", "NRO0000.sl2", "NoReadOnly", supports_read_only=False
)
FOLDER_GAME = Game(
    "FOLDER_GAME", "Folder Game", "FG", "slot.dat", "FolderGame", snapshot_directory=True
)
GAMES = (TEST_GAME, NO_READ_ONLY_GAME, FOLDER_GAME)


class Recorder:
    """Listener that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def on_event(self, event):
        self.events.append(event)

    def kinds(self):
        return [event.kind for event in self.events]

    def payloads(self, kind):
        return [event.payload for event in self.events if event.kind is kind]

    def clear(self):
        self.events.clear()


class FakeSystemUtils:
    """Stands in for the OS integration so tests never touch the real recycle bin."""

    def __init__(self, succeed=True):
        self.succeed = succeed
        self.recycled = []
        self.opened = []

    def move_to_recycle_bin(self, path):
        self.recycled.append(Path(path))
        return self.succeed

    def open_path_in_explorer(self, path):
        self.opened.append(Path(path))
        return True


def write_config(path: Path, data: dict):
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(scope="session", autouse=True)
def isolated_logs(tmp_path_factory):
    """Keeps log files out of the source tree."""
    reconfigure_logger(tmp_path_factory.mktemp("logs"))


@pytest.fixture
def workspace(tmp_path):
    """
    A profiles directory with two profiles for TEST_GAME and live save files
    for every test game.
    """
    profiles_dir = tmp_path / "profiles" / "test"
    (profiles_dir / "alpha").mkdir(parents=True)
    (profiles_dir / "beta").mkdir()

    live_dir = tmp_path / "live"
    live_dir.mkdir()
    live_file = live_dir / TEST_GAME.save_file_name
    live_file.write_bytes(b"v1")
    no_ro_file = live_dir / NO_READ_ONLY_GAME.save_file_name
    no_ro_file.write_bytes(b"nro")

    folder_live = tmp_path / "folder_live" / "slot"
    folder_live.mkdir(parents=True)
    (folder_live / FOLDER_GAME.save_file_name).write_bytes(b"f1")
    (folder_live / "extra.bin").write_bytes(b"x1")
    folder_profiles = tmp_path / "profiles" / "folder"
    (folder_profiles / "runs").mkdir(parents=True)

    config_path = tmp_path / "config.json"
    write_config(
        config_path,
        {
            "settings": {},
            "games": {
                TEST_GAME.key: {
                    "profiles_directory": str(profiles_dir),
                    "save_file_location": str(live_file),
                },
                NO_READ_ONLY_GAME.key: {"save_file_location": str(no_ro_file)},
                FOLDER_GAME.key: {
                    "profiles_directory": str(folder_profiles),
                    "save_file_location": str(folder_live),
                },
            },
        },
    )
    return SimpleNamespace(
        root=tmp_path,
        config_path=config_path,
        profiles_dir=profiles_dir,
        live_file=live_file,
        no_ro_file=no_ro_file,
        folder_live=folder_live,
        folder_profiles=folder_profiles,
    )


@pytest.fixture
def config_service(workspace):
    return ConfigService(workspace.config_path)


@pytest.fixture
def registry(config_service, workspace):
    # A fake home keeps the platform search away from real save folders
    return GameRegistry(
        config_service, GAMES, platform="linux", environ={}, home=workspace.root / "home"
    )


@pytest.fixture
def system_utils():
    return FakeSystemUtils()


@pytest.fixture
def organizer(qapp, config_service, registry, system_utils):
    org = Organizer(config_service, GAMES, registry=registry, system_utils=system_utils)
    yield org
    org.close()


@pytest.fixture
def recorder(organizer):
    rec = Recorder()
    organizer.hub.subscribe(rec)
    return rec


@pytest.fixture
def selected(organizer, recorder):
    """TEST_GAME selected with its first profile; the recorder starts empty."""
    organizer.selection.switch_to_game(TEST_GAME)
    recorder.clear()
    return organizer
