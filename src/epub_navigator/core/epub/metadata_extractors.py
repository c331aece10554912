# epub_navigator/src/epub_navigator/core/epub/metadata_extractors.py
"""
Module d'extracteurs de métadonnées avancés.

Responsabilité unique: Fournir des extracteurs spécialisés pour
les métadonnées difficiles à obtenir (langue, ISBN depuis le texte).
"""

import logging
import re
from typing import TYPE_CHECKING, Iterator, Optional

from isbnlib import canonical, is_isbn10, is_isbn13
from langdetect import DetectorFactory, detect
from langdetect.lang_detect_exception import LangDetectException

from ...config import ISBN_RE, LANGDETECT_MAX_CHAPTERS, LANGDETECT_SAMPLE_CHARS
from ..errors import EpubError
from ..models import Metadata
from ..text_utils import clean_html_text

if TYPE_CHECKING:
    from .document import EpubDocument

logger = logging.getLogger(__name__)

_ISBN_PREFIX_RE = re.compile(r"^\s*ISBN(?:-1[03])?:?\s*", re.IGNORECASE)

# Résultats reproductibles d'un appel à l'autre
DetectorFactory.seed = 0


def _iter_chapter_texts(document: "EpubDocument", limit: Optional[int] = None) -> Iterator[str]:
    """Texte brut (HTML retiré) des chapitres dans l'ordre du spine."""
    count = document.chapter_count if limit is None else min(limit, document.chapter_count)
    for i in range(count):
        try:
            raw = document.chapter_bytes(i).decode("utf-8", errors="ignore")
        except EpubError:
            logger.debug("Chapter %d skipped during text scan", i, exc_info=True)
            continue
        yield clean_html_text(raw)


def _valid_isbn(candidate: str) -> Optional[str]:
    candidate = _ISBN_PREFIX_RE.sub("", candidate)
    if is_isbn10(candidate) or is_isbn13(candidate):
        return canonical(candidate)
    return None


def isbn_from_identifiers(metadata: Metadata) -> Optional[str]:
    """
    Extrait l'ISBN canonique depuis les dc:identifier.

    Returns:
        ISBN canonique ou None
    """
    for ident in metadata.get_all("identifier"):
        m = ISBN_RE.search(ident)
        if m:
            isbn = _valid_isbn(m.group(0))
            if isbn:
                return isbn
    return None


def detect_language_from_text(document: "EpubDocument") -> Optional[str]:
    """
    Détecte la langue du livre depuis son contenu textuel.

    Fallback utilisé quand la métadonnée DC language est absente.
    Analyse les premiers caractères des premiers chapitres du spine.

    Args:
        document: Livre ouvert

    Returns:
        Code de langue (ex: 'fr', 'en') ou None si échec
    """
    sample = ""
    for text in _iter_chapter_texts(document, LANGDETECT_MAX_CHAPTERS):
        sample = f"{sample} {text}".strip()
        if len(sample) >= LANGDETECT_SAMPLE_CHARS:
            break
    sample = sample[:LANGDETECT_SAMPLE_CHARS]

    if not sample:
        return None

    try:
        detected_lang = detect(sample)
    except LangDetectException:
        logger.info("Language detection failed.", exc_info=True)
        return None

    logger.info("Language detected from text: %s", detected_lang)
    return detected_lang


def find_isbn_in_text(document: "EpubDocument") -> Optional[str]:
    """
    Recherche un ISBN dans le contenu textuel du livre.

    Fallback utilisé quand l'ISBN n'est pas dans les métadonnées.
    Parcourt les chapitres du spine à la recherche d'un ISBN valide.

    Args:
        document: Livre ouvert

    Returns:
        ISBN canonique ou None si non trouvé
    """
    for text in _iter_chapter_texts(document):
        for m in ISBN_RE.finditer(text):
            isbn = _valid_isbn(m.group(0))
            if isbn:
                logger.info("ISBN found in text: %s", isbn)
                return isbn
    return None
