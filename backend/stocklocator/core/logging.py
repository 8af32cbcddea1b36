import logging
from pathlib import Path
from .config import Settings

def setup_logging(settings: Settings) -> None:
    settings.logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = Path(settings.logs_dir) / "stocklocator.log"

    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=fmt,
        handlers=[logging.FileHandler(log_file), logging.StreamHandler()],
    )
