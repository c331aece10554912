# epub_navigator/src/epub_navigator/main.py
"""
Point d'entrée principal pour EPUB Navigator
Configure le logging puis lance l'inspection en ligne de commande
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
    LOG_MAX_BYTES,
    SUPPORTED_EXT,
    ensure_directories,
)
from .core.errors import BookOpenError


def setup_logging():
    """Configure le système de logging."""
    ensure_directories()
    logger = logging.getLogger("epub_navigator")
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        return logger

    # Handler pour fichier avec rotation
    logfile = os.path.join(LOG_DIR, "epub_navigator.log")
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


def run_cli(args: List[str]) -> int:
    """Lance le mode ligne de commande."""
    logger = logging.getLogger("epub_navigator")

    paths = [a for a in args if not a.startswith("--")]
    if len(paths) != 1:
        print("Usage: python -m epub_navigator <book.epub> [--toc]")
        print("  book.epub: Chemin vers le fichier EPUB")
        print("  --toc: Affiche aussi la table des matières")
        return 1

    book_path = paths[0]
    show_toc = "--toc" in args

    if not os.path.isfile(book_path):
        print(f"Error: {book_path} is not a valid file")
        return 1
    if not book_path.lower().endswith(SUPPORTED_EXT):
        logger.warning("Unexpected extension for %s, trying anyway", book_path)

    try:
        from .cli import cli_inspect_book
        from .core.epub import open_book

        with open_book(book_path) as document:
            cli_inspect_book(document, show_toc=show_toc)
        return 0
    except (BookOpenError, OSError) as e:
        logger.exception("Error in CLI mode")
        print(f"Error: {e}")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Point d'entrée principal."""
    setup_logging()
    return run_cli(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    raise SystemExit(main())
