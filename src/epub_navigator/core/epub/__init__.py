# epub_navigator/src/epub_navigator/core/epub/__init__.py
"""
Module EPUB - Résolution du paquet et de la navigation.

Ce module ouvre les livres EPUB, résout leur table des matières et sert
chapitres et ressources à la demande depuis le conteneur.
"""

# Exports publics
from .document import EpubDocument
from .reader import extract_metadata, open_book, safe_open_book

__all__ = [
    "EpubDocument",
    "extract_metadata",
    "open_book",
    "safe_open_book",
]
