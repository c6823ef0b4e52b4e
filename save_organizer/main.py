# save_organizer/main.py
import signal
import sys
from pathlib import Path
from PyQt6.QtCore import QCoreApplication, QTimer
from save_organizer.utils.logger_utils import logger, reconfigure_logger
from save_organizer.core.constants import APP_NAME, CONFIG_FILE_NAME, LOG_DIR_NAME, ORG_NAME
from save_organizer.core.signals import EventKind
from save_organizer.services import ConfigService, Organizer
from save_organizer.viewmodels import (
    MainWindowViewModel,
    ReadOnlyButtonViewModel,
    SaveListViewModel,
)


def main(argv: list[str] | None = None) -> int:
    """
    Headless entry point: restores the last session, watches the selected
    profile and logs every change until interrupted.
    """
    argv = sys.argv if argv is None else argv

    # --- 1. Qt Application Setup ---
    app = QCoreApplication(argv)
    app.setOrganizationName(ORG_NAME)
    app.setApplicationName(APP_NAME)

    # Let Ctrl+C through the Qt event loop
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(250)

    # --- 2. Composition Root ---
    try:
        app_path = Path(argv[1]) if len(argv) > 1 else Path(".")
        config_path = app_path / CONFIG_FILE_NAME
        log_path = app_path / LOG_DIR_NAME
        log_path.mkdir(parents=True, exist_ok=True)
        reconfigure_logger(log_path)
        logger.info("Application starting...")

        config_service = ConfigService(config_path)
        organizer = Organizer(config_service, watch_filesystem=True)

        main_window_vm = MainWindowViewModel(organizer)
        save_list_vm = SaveListViewModel(organizer)
        read_only_vm = ReadOnlyButtonViewModel(organizer)
    except Exception as e:
        logger.critical(f"Failed to initialize core components: {e}", exc_info=True)
        return 1

    # --- 3. Report what a window would show ---
    for vm in (main_window_vm, save_list_vm):
        vm.toast_requested.connect(lambda message, level: logger.info(f"[{level}] {message}"))
        vm.error_occurred.connect(lambda title, message: logger.error(f"{title}: {message}"))
    read_only_vm.appearance_changed.connect(
        lambda appearance: logger.info(f"Read-only button: {appearance}")
    )
    save_list_vm.entries_updated.connect(
        lambda entries: logger.info(f"Saves: {[e.name for e in entries]}")
    )
    organizer.hub.subscribe(
        lambda event: logger.info(f"{event.kind.value}: {event.payload}"),
        kinds=(EventKind.CHANGED_TO_GAME, EventKind.CHANGED_TO_PROFILE),
    )

    main_window_vm.start()

    logger.info("Entering event loop...")
    try:
        exit_code = app.exec()
        logger.info(f"Application exiting with code {exit_code}")
    finally:
        organizer.close()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
