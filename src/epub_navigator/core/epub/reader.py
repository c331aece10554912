# epub_navigator/src/epub_navigator/core/epub/reader.py
"""
Module de lecture EPUB.

Responsabilité unique: Ouvrir un livre (conteneur -> OPF -> navigation)
et en extraire un résumé de métadonnées.
"""

import logging
from typing import Dict, List, Optional

from ...config import MAX_TOC_DEPTH
from ..archive import ContainerIndex, Source
from ..errors import BookOpenError
from ..models import Book, Metadata
from .container import locate_package_document
from .document import EpubDocument
from .metadata_extractors import (
    detect_language_from_text,
    find_isbn_in_text,
    isbn_from_identifiers,
)
from .navigation import resolve_toc
from .package import parse_package

logger = logging.getLogger(__name__)


def open_book(source: Source, max_toc_depth: int = MAX_TOC_DEPTH) -> EpubDocument:
    """
    Ouvre un livre EPUB: pipeline bloquant et séquentiel.

    conteneur -> localisation OPF -> analyse du paquet -> table des matières.
    L'appelant peut exécuter l'ensemble dans un thread de travail.

    Args:
        source: Octets, chemin ou fichier binaire seekable
        max_toc_depth: Profondeur maximale de la table des matières

    Returns:
        EpubDocument prêt à servir chapitres et ressources

    Raises:
        NotAContainer, NoContainerPointer, MalformedPackage: Ouverture impossible
    """
    index = ContainerIndex.open(source)
    try:
        opf_path = locate_package_document(index)
        package = parse_package(index, opf_path)
        toc = resolve_toc(
            index,
            opf_path,
            package.manifest,
            package.spine,
            toc_id=package.toc_id,
            max_depth=max_toc_depth,
        )
    except BaseException:
        index.close()
        raise

    book = Book(
        opf_path=opf_path,
        metadata=package.metadata,
        manifest=package.manifest,
        spine=package.spine,
        toc=toc.nodes,
        toc_source=toc.source,
        cover_id=package.cover_id,
        warnings=package.warnings,
    )
    logger.info(
        "Opened book %r: %d chapters, TOC from %s",
        book.metadata.first("title"),
        book.chapter_count,
        book.toc_source.value,
    )
    return EpubDocument(book, index)


def safe_open_book(source: Source) -> Optional[EpubDocument]:
    """
    Ouvre un livre EPUB de manière sécurisée.

    Returns:
        EpubDocument si succès, None sinon
    """
    try:
        return open_book(source)
    except (BookOpenError, OSError) as e:
        logger.exception("Failed to open EPUB %s: %s", _describe(source), e)
        return None


def _describe(source: Source) -> str:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"<{len(source)} bytes>"
    return str(getattr(source, "name", source))


# --- Extracteurs de métadonnées de base ---


def _get_authors(metadata: Metadata) -> Optional[List[str]]:
    """Liste des auteurs ou None si aucun trouvé."""
    return metadata.get_all("creator") or None


def _get_tags(metadata: Metadata) -> Optional[List[str]]:
    """Sujets/tags ou None si aucun trouvé."""
    return metadata.get_all("subject") or None


# --- Fonction principale d'extraction ---


def extract_metadata(source: Source) -> Dict:
    """
    Extrait un résumé des métadonnées d'un livre EPUB.

    Utilise des stratégies de fallback pour les données manquantes
    (langue détectée dans le texte, ISBN cherché dans les chapitres).

    Args:
        source: Octets, chemin ou fichier binaire seekable

    Returns:
        Dictionnaire contenant toutes les métadonnées extraites.
        Les clés possibles sont: title, authors, language, identifier,
        publisher, date, tags, summary, cover_data, chapter_count
    """
    data = {
        k: None
        for k in [
            "title",
            "authors",
            "language",
            "identifier",
            "publisher",
            "date",
            "tags",
            "summary",
            "cover_data",
            "chapter_count",
        ]
    }

    document = safe_open_book(source)
    if document is None:
        logger.warning("Could not read EPUB: %s", _describe(source))
        return data

    with document:
        metadata = document.metadata
        data["title"] = metadata.first("title")
        data["authors"] = _get_authors(metadata)
        data["language"] = metadata.first("language")
        data["identifier"] = isbn_from_identifiers(metadata)
        data["publisher"] = metadata.first("publisher")
        data["date"] = metadata.first("date")
        data["summary"] = metadata.first("description")
        data["tags"] = _get_tags(metadata)
        data["chapter_count"] = document.chapter_count
        data["cover_data"] = document.cover_image_bytes()

        if not data["language"]:
            data["language"] = detect_language_from_text(document)

        if not data["identifier"]:
            data["identifier"] = find_isbn_in_text(document)

    logger.info("Extracted metadata for %s", _describe(source))
    return data
