# save_organizer/services/game_service.py
import os
import sys
from pathlib import Path
from typing import Iterable, Mapping
from save_organizer.core.constants import PROTON_USER_DIR, STEAM_ROOT_CANDIDATES
from save_organizer.core.exceptions import NotFoundError
from save_organizer.models.game_model import Game
from save_organizer.models.profile_model import Profile
from save_organizer.services.config_service import ConfigService
from save_organizer.utils.logger_utils import logger


DEFAULT_GAMES: tuple[Game, ...] = (
    Game("DARK_SOULS", "Dark Souls: Prepare to Die Edition", "DS1",
         "DRAKS0005.sl2", "NBGI/DarkSouls", steam_app_id=211420, documents_based=True),
    Game("DARK_SOULS_REMASTERED", "Dark Souls Remastered", "DSR",
         "DRAKS0005.sl2", "NBGI/DARK SOULS REMASTERED", steam_app_id=570940, documents_based=True),
    Game("DARK_SOULS_II", "Dark Souls II", "DS2",
         "DARKSII0000.sl2", "DarkSoulsII", steam_app_id=236430),
    Game("DARK_SOULS_II_SOTFS", "Dark Souls II: Scholar of the First Sin", "DS2 SotFS",
         "DS2SOFS0000.sl2", "DarkSoulsII", steam_app_id=335300),
    Game("DARK_SOULS_III", "Dark Souls III", "DS3",
         "DS30000.sl2", "DarkSoulsIII", steam_app_id=374320),
    Game("SEKIRO", "Sekiro: Shadows Die Twice", "Sekiro",
         "S0000.sl2", "Sekiro", steam_app_id=814380, supports_read_only=False),
    Game("ELDEN_RING", "Elden Ring", "ER",
         "ER0000.sl2", "EldenRing", steam_app_id=1245620, supports_read_only=False),
)


class GameRegistry:
    """
    The fixed, ordered catalog of supported games and the logic that finds
    each game's live save file.
    """

    def __init__(
        self,
        config_service: ConfigService,
        games: Iterable[Game] = DEFAULT_GAMES,
        platform: str | None = None,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
    ):
        self.config_service = config_service
        self._games: tuple[Game, ...] = tuple(games)
        self._by_key = {game.key: game for game in self._games}
        if len(self._by_key) != len(self._games):
            raise ValueError("Game keys must be unique.")

        # --- Platform inputs, injectable for tests ---
        self._platform = platform or sys.platform
        self._environ = os.environ if environ is None else environ
        self._home = home or Path.home()

    # --- Catalog ---

    def list_games(self) -> list[Game]:
        return list(self._games)

    def get_game(self, key: str) -> Game:
        try:
            return self._by_key[key]
        except KeyError:
            raise NotFoundError(f"Unknown game: '{key}'") from None

    def contains(self, game: Game) -> bool:
        return game.key in self._by_key

    def supports_read_only(self, game: Game) -> bool:
        return game.supports_read_only

    # --- Save Location ---

    def resolve_save_location(self, game: Game, profile: Profile | None = None) -> Path | None:
        """
        Returns where the game's live save file is, or would be written. The
        file itself may be missing (the game or the user deleted it) as long
        as its folder exists. None means no save folder can be found. A
        configured location wins over the platform search. Without a real
        profile there is nothing to save into, so the placeholder profile also
        yields None.
        """
        if profile is not None and profile.is_placeholder:
            return None

        configured = self.config_service.current.for_game(game.key).save_file_location
        if configured is not None:
            if configured.is_dir():
                return configured / game.save_file_name
            if configured.is_file():
                return configured
            if configured.name == game.save_file_name and configured.parent.is_dir():
                logger.debug(f"Configured save file for '{game.caption}' is missing: {configured}")
                return configured
            logger.warning(f"Configured save location for '{game.caption}' does not exist: {configured}")
            return None

        roots = self._candidate_roots(game)
        for root in roots:
            found = self._find_save_file(root, game.save_file_name)
            if found is not None:
                logger.debug(f"Found save file for '{game.caption}' at: {found}")
                return found

        # No file anywhere: point into the first save folder that exists
        for root in roots:
            location = self._default_location(root, game.save_file_name)
            if location is not None:
                logger.debug(f"No save file for '{game.caption}' yet. It belongs at: {location}")
                return location

        logger.debug(f"No save folder found for '{game.caption}'.")
        return None

    def set_save_location(self, game: Game, path: Path | None):
        """Stores where the user says the save file lives (None to search again)."""
        logger.info(f"Setting save file location for '{game.caption}' to: {path}")
        self.config_service.update_game_config(game.key, save_file_location=path)

    def _candidate_roots(self, game: Game) -> list[Path]:
        """Folders that contain one subfolder per account holding the save file."""
        roots: list[Path] = []
        if self._platform == "win32":
            if game.documents_based:
                base = Path(self._environ.get("USERPROFILE", str(self._home))) / "Documents"
            else:
                base = Path(self._environ.get("APPDATA", str(self._home / "AppData" / "Roaming")))
            roots.append(base / game.save_folder)
        elif game.steam_app_id is not None:
            # Linux/Steam Deck: the game runs inside a Proton prefix
            sub_dir = "Documents" if game.documents_based else "AppData/Roaming"
            for steam_root in STEAM_ROOT_CANDIDATES:
                user_dir = self._home / steam_root / PROTON_USER_DIR.format(app_id=game.steam_app_id)
                roots.append(user_dir / sub_dir / game.save_folder)
        return roots

    @staticmethod
    def _find_save_file(root: Path, file_name: str) -> Path | None:
        if not root.is_dir():
            return None
        direct = root / file_name
        if direct.is_file():
            return direct
        try:
            account_dirs = sorted(p for p in root.iterdir() if p.is_dir())
        except OSError as e:
            logger.warning(f"Could not list save folder '{root}': {e}")
            return None
        for account_dir in account_dirs:
            candidate = account_dir / file_name
            if candidate.is_file():
                return candidate
        return None

    @staticmethod
    def _default_location(root: Path, file_name: str) -> Path | None:
        """The first account subfolder, or the root itself when it has none."""
        if not root.is_dir():
            return None
        try:
            account_dirs = sorted(p for p in root.iterdir() if p.is_dir())
        except OSError as e:
            logger.warning(f"Could not list save folder '{root}': {e}")
            return None
        return (account_dirs[0] if account_dirs else root) / file_name
