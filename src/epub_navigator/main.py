# epub_navigator/src/epub_navigator/main.py
"""
Point d'entrée principal pour EPUB Navigator
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from .config import (
    LOG_BACKUP_COUNT,
    LOG_DIR,
    LOG_ENCODING,
    LOG_FILENAME,
    LOG_MAX_BYTES,
    ensure_directories,
)

USAGE = """Usage: python -m epub_navigator <book.epub> [--spine] [--json]
  book.epub: Chemin vers le fichier EPUB
  --spine: Affiche l'ordre de lecture
  --json: Affiche les détails au format JSON"""


def setup_logging():
    """Configure le système de logging."""
    ensure_directories()
    logger = logging.getLogger("epub_navigator")
    logger.setLevel(logging.DEBUG)

    # Handler pour fichier avec rotation
    logfile = os.path.join(LOG_DIR, LOG_FILENAME)
    handler = RotatingFileHandler(
        logfile, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding=LOG_ENCODING
    )
    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Handler pour console
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console)

    return logger


def run_cli(argv: List[str]) -> int:
    """Lance le mode ligne de commande."""
    logger = logging.getLogger("epub_navigator")

    paths = [arg for arg in argv if not arg.startswith("--")]
    if len(paths) != 1:
        print(USAGE)
        return 1

    epub_path = paths[0]
    if not os.path.isfile(epub_path):
        print(f"Error: {epub_path} is not a file")
        return 1

    from .cli import print_book_summary, print_details_json, safe_open_book

    session = safe_open_book(epub_path)
    if session is None:
        print(f"Error: could not open {epub_path}")
        return 1

    try:
        with session:
            if "--json" in argv:
                print_details_json(session)
            else:
                print_book_summary(session, show_spine="--spine" in argv)
        return 0
    except Exception as e:
        logger.exception("Error in CLI mode")
        print(f"Error: {e}")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Point d'entrée principal."""
    setup_logging()
    return run_cli(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    raise SystemExit(main())
