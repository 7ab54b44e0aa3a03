# Main.py
""" Entry point for the Bifrost calculator.

   Responsibilities:
   - Detect run mode (script vs PyInstaller.exe)
   - Verify required files exist in development mode
   - Set up logging, load configuration and start the Qt GUI

"""
import sys
import logging
from pathlib import Path
from Bifrost import config_manager as config_manager
from Bifrost import error as E
from Bifrost.logging_config import setup_logging


# Resolve project root depending on run mode (Script or .exe)

if getattr(sys, 'frozen', False):
    PROJECT_ROOT = Path(sys._MEIPASS)
else:
    PROJECT_ROOT = Path(__file__).resolve().parent


def check_files_exist():

    """
      Fail fast in development if required files are missing / moved / renamed.
      In production (.exe) the files are embedded by the bundler and this check is skipped.
    """

    modules_dir = PROJECT_ROOT / "Bifrost"

    REQUIRED = [
        modules_dir / "UI.py",
        modules_dir / "ExpressionEditor.py",
        modules_dir / "EvaluationBridge.py",
        modules_dir / "Transport.py",
        modules_dir / "Session.py",
        modules_dir / "config_manager.py",
        PROJECT_ROOT / "config.json",
        PROJECT_ROOT / "ui_strings.json",
    ]

    missing_files = [file_path.name for file_path in REQUIRED if not file_path.exists()]

    if missing_files:
        for file_name in missing_files:
            logging.getLogger("Bifrost").error("%s%s", E.ERROR_MESSAGES["1000"], file_name)
        sys.exit(1)


def main():

    """
    Load configuration and start the GUI. No business logic here.
    """

    all_settings = config_manager.load_settings()
    logging.getLogger("Bifrost").info("Config loaded: %s", all_settings)

    # Imported late so the file check can run before PySide6 is touched
    from Bifrost import UI as UI

    # The UI owns the event loop
    UI.main()


def run():
    setup_logging(logging.DEBUG if "--debug" in sys.argv else logging.INFO)
    is_running_as_exe = getattr(sys, 'frozen', False)

    if not is_running_as_exe:
        logging.getLogger("Bifrost").info("Developer Mode: Checking file paths...")
        check_files_exist()
    else:
        logging.getLogger("Bifrost").info("Production mode (.exe) is starting...")
    main()


if __name__ == "__main__":
    run()
