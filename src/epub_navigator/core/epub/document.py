# epub_navigator/src/epub_navigator/core/epub/document.py
"""
Façade d'accès au contenu d'un livre ouvert.

Toutes les lectures s'appuient sur le Book construit à l'ouverture et
sur l'index du conteneur; le document OPF n'est jamais relu.
"""

import html
import logging
from typing import Optional, Tuple

import lxml.html
from lxml import etree

from ...config import COVER_THUMBNAIL_SIZE, PLACEHOLDER_CHAPTER, TEXT_ENCODING
from ..archive import ContainerIndex
from ..errors import ChapterOutOfRange, DecodeFailure, EpubError, NotFound
from ..models import Book, Metadata, TocNode, TocSource
from ..paths import is_remote, resolve_path
from .cover_finder import find_cover_data, make_thumbnail

logger = logging.getLogger(__name__)


def decode_text(data: bytes, name: str = "") -> str:
    """
    Décode des octets UTF-8 (BOM toléré).

    Raises:
        DecodeFailure: Si les octets ne sont pas de l'UTF-8 valide
    """
    try:
        return data.decode(TEXT_ENCODING + "-sig")
    except UnicodeDecodeError as e:
        raise DecodeFailure(f"{name or 'content'} is not valid {TEXT_ENCODING}: {e}") from e


class EpubDocument:
    """Livre ouvert: Book en lecture seule + index du conteneur."""

    def __init__(self, book: Book, index: ContainerIndex):
        self._book = book
        self._index = index
        self._closed = False

    # --- Propriétés ---

    @property
    def book(self) -> Book:
        return self._book

    @property
    def metadata(self) -> Metadata:
        return self._book.metadata

    @property
    def toc(self) -> Tuple[TocNode, ...]:
        return self._book.toc

    @property
    def toc_source(self) -> TocSource:
        return self._book.toc_source

    @property
    def chapter_count(self) -> int:
        return self._book.chapter_count

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self):
        if self._closed:
            raise ValueError("I/O operation on closed EpubDocument")

    def _check_index(self, index: int):
        if not 0 <= index < self.chapter_count:
            raise ChapterOutOfRange(index, self.chapter_count)

    # --- Chapitres ---

    def chapter_href(self, index: int) -> Optional[str]:
        """Clé canonique du chapitre, None hors limites ou si l'idref est inconnu."""
        item = self._book.spine_item(index)
        return item.href if item is not None else None

    def chapter_bytes(self, index: int) -> bytes:
        """
        Octets bruts du chapitre à la position index du spine.

        Raises:
            ChapterOutOfRange: Si index n'est pas dans [0, chapter_count)
            NotFound: Si l'idref ou le fichier est introuvable
        """
        self._ensure_open()
        self._check_index(index)
        href = self.chapter_href(index)
        if href is None:
            idref = self._book.spine[index].idref
            raise NotFound(idref, f"Spine item {idref!r} is not in the manifest")
        return self._index.get(href)

    def chapter_text(self, index: int) -> str:
        """
        Texte décodé du chapitre.

        Un chapitre absent ou mal encodé donne un document de remplacement
        plutôt qu'une exception, pour que le reste du livre reste lisible.

        Raises:
            ChapterOutOfRange: Si index n'est pas dans [0, chapter_count)
        """
        self._ensure_open()
        self._check_index(index)
        try:
            return decode_text(self.chapter_bytes(index), self.chapter_href(index) or "")
        except EpubError as e:
            logger.warning("Chapter %d unavailable: %s", index, e)
            return PLACEHOLDER_CHAPTER.format(reason=html.escape(type(e).__name__))

    def chapter_body_html(self, index: int) -> str:
        """
        Contenu HTML du <body> du chapitre, sans l'élément <title>.

        Retourne le texte brut du chapitre si le balisage ne peut pas être analysé.
        """
        text = self.chapter_text(index)
        try:
            parser = lxml.html.HTMLParser(encoding=TEXT_ENCODING)
            root = lxml.html.document_fromstring(text.encode(TEXT_ENCODING), parser=parser)
        except (etree.LxmlError, ValueError):
            logger.debug("Chapter %d is not parsable as HTML", index, exc_info=True)
            return text

        for title in list(root.iter("title")):
            title.drop_tree()

        body = root.find("body")
        if body is None:
            return lxml.html.tostring(root, encoding="unicode")
        inner = [html.escape(body.text or "", quote=False)]
        inner.extend(lxml.html.tostring(child, encoding="unicode") for child in body)
        return "".join(inner)

    # --- Ressources ---

    def resource_bytes(self, base_href: str, ref: str) -> bytes:
        """
        Octets d'une ressource référencée depuis le document base_href.

        Args:
            base_href: Clé du document qui contient la référence (chapitre ouvert)
            ref: Référence relative telle qu'écrite dans ce document

        Raises:
            NotFound: Référence distante ou fichier absent du conteneur
        """
        self._ensure_open()
        if is_remote(ref):
            raise NotFound(ref, f"Remote reference not resolved: {ref}")
        return self._index.get(resolve_path(base_href, ref))

    def chapter_resource_bytes(self, index: int, ref: str) -> bytes:
        """Ressource référencée depuis le chapitre index (images, feuilles de style)."""
        self._ensure_open()
        self._check_index(index)
        href = self.chapter_href(index)
        if href is None:
            raise NotFound(ref, f"Chapter {index} has no manifest entry")
        return self.resource_bytes(href, ref)

    # --- Couverture ---

    def cover_image_bytes(self) -> Optional[bytes]:
        """Octets de l'image de couverture, ou None; ne lève jamais d'exception."""
        if self._closed:
            return None
        return find_cover_data(self._book, self._index)

    def cover_thumbnail(self, size: Tuple[int, int] = COVER_THUMBNAIL_SIZE) -> Optional[bytes]:
        """Vignette PNG de la couverture (en mémoire), ou None."""
        return make_thumbnail(self.cover_image_bytes(), size)

    # --- Cycle de vie ---

    def close(self):
        if not self._closed:
            self._index.close()
            self._closed = True

    def __enter__(self) -> "EpubDocument":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self) -> str:
        title = self._book.metadata.first("title")
        return f"<EpubDocument {title!r} chapters={self.chapter_count}>"
