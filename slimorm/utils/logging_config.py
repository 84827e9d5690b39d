import shutil
import logging
import logging.config
from pathlib import Path
from datetime import datetime


def build_config(log_dir: Path, level: str = "INFO") -> dict:
    """Full dictConfig for the slimorm loggers writing into log_dir."""
    return {
        "version": 1,
        "disable_existing_loggers": False,

        # --------------------------- Formatters --------------------------- #
        "formatters": {
            "simple": {
                "format": "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                "datefmt": "%H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(process)d] %(name)s:%(lineno)d - "
                    "%(levelname)s: %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },

        # ---------------------------- Handlers --------------------------- #
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "simple",
                "stream": "ext://sys.stdout",
            },
            "file_main": {
                "class": "logging.FileHandler",
                "level": "DEBUG",
                "formatter": "detailed",
                "filename": str(log_dir / "slimorm.log"),
                "mode": "a",
                "encoding": "utf-8",
            },
        },

        # ---------------------------- Loggers ---------------------------- #
        "loggers": {
            "slimorm": {
                "handlers": ["console", "file_main"],
                "level": "DEBUG",
                "propagate": False,
            },
        },

        # ------------------------------ Root ----------------------------- #
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
    }


# LOG FOLDER HOUSEKEEPING
# ==============================================================
def cleanup_old_logs(base_dir: Path, max_folders: int = 5) -> list:
    """Keep at most max_folders day folders under base_dir, oldest go first."""
    if not base_dir.exists():
        return []

    # Day folders are named YYYYmmdd so name order is date order
    folders = sorted(f for f in base_dir.iterdir() if f.is_dir())

    removed = []
    if len(folders) > max_folders:
        for folder in folders[:-max_folders]:
            try:
                shutil.rmtree(folder)
                removed.append(folder.name)
            except OSError as e:
                logging.getLogger(__name__).warning(f"Could not remove log folder {folder.name}: {e}")
    return removed


# LOGGER SETUP
# ==============================================================
def setup_logging(base_dir="logs", max_folders: int = 5, level: str = "INFO") -> Path:
    """Prepare today's log folder and apply the dictConfig."""
    today = datetime.now().strftime("%Y%m%d")
    base_dir = Path(base_dir)
    log_dir = base_dir / today
    log_dir.mkdir(parents=True, exist_ok=True)

    cleanup_old_logs(base_dir, max_folders=max_folders)

    logging.config.dictConfig(build_config(log_dir, level=level))
    return log_dir
