# save_organizer/core/constants.py

# --- Application Info ---
APP_NAME: str = "Save Organizer"
ORG_NAME: str = "soulsspeedruns"
APP_VERSION: str = "0.1.0"

# --- File & Directory Names ---
CONFIG_FILE_NAME: str = "config.json"
LOG_DIR_NAME: str = "logs"
TEMP_SUFFIX: str = ".organizer-tmp"
BACKUP_SUFFIX: str = ".organizer-old"

# --- Settings Keys ---
SETTING_COMPACT_MODE: str = "compact_mode"
SETTING_CHECK_FOR_UPDATES: str = "check_for_updates"
SETTING_LAST_GAME: str = "last_game_key"
APPEARANCE_SETTING_KEYS: frozenset[str] = frozenset(
    {SETTING_COMPACT_MODE, SETTING_CHECK_FOR_UPDATES}
)

# --- Config Sections ---
SECTION_SETTINGS: str = "settings"
SECTION_GAMES: str = "games"

# --- Read-Only Button ---
WRITABLE_TEXT: str = "Writable"
READ_ONLY_TEXT: str = "Read-Only"
WRITABLE_TOOLTIP: str = "Click to turn on read-only for the game's savefile."
READ_ONLY_TOOLTIP: str = "Click to turn off read-only for the game's savefile."

# --- Toast Messages ---
DELETE_SUCCESSFUL_MESSAGE: str = "DELETE SUCCESSFUL"

# --- Linux (Proton) Save Lookup ---
STEAM_ROOT_CANDIDATES: tuple[str, ...] = (
    ".steam/steam",
    ".local/share/Steam",
    ".var/app/com.valvesoftware.Steam/.local/share/Steam",
)
PROTON_USER_DIR: str = "steamapps/compatdata/{app_id}/pfx/drive_c/users/steamuser"
