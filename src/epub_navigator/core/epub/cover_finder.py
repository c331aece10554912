# epub_navigator/src/epub_navigator/core/epub/cover_finder.py
"""
Module de recherche de couverture EPUB.

Responsabilité unique: Implémenter différentes stratégies pour trouver
la couverture d'un livre déjà analysé.

Pattern: Strategy Pattern pour les différentes méthodes de recherche.
"""

import io
import logging
from typing import Callable, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ...config import COVER_IMAGE_PROPERTY, COVER_THUMBNAIL_SIZE
from ..archive import ContainerIndex
from ..errors import EpubError
from ..models import Book, ManifestItem

logger = logging.getLogger(__name__)


def _find_cover_by_opf(book: Book) -> List[ManifestItem]:
    """
    Stratégie 1: Identifiant explicite <meta name="cover">.

    Retenu seulement si l'item référencé est une image.
    """
    item = book.manifest.get(book.cover_id) if book.cover_id else None
    if item is not None and item.is_image:
        return [item]
    return []


def _find_cover_by_property(book: Book) -> List[ManifestItem]:
    """Stratégie 2: Items portant la propriété EPUB 3 'cover-image'."""
    return [
        item for item in book.manifest.values() if COVER_IMAGE_PROPERTY in item.properties
    ]


def _find_cover_by_name(book: Book) -> List[ManifestItem]:
    """Stratégie 3: Images dont l'id ou le href contient "cover"."""
    return [
        item
        for item in book.images()
        if "cover" in item.id.lower() or "cover" in item.href.lower()
    ]


def _find_first_image(book: Book) -> List[ManifestItem]:
    """Stratégie 4: Première image du manifeste, faute de mieux."""
    return book.images()[:1]


_STRATEGIES: Tuple[Tuple[str, Callable[[Book], List[ManifestItem]]], ...] = (
    ("OPF metadata", _find_cover_by_opf),
    ("cover-image property", _find_cover_by_property),
    ("file name", _find_cover_by_name),
    ("first image", _find_first_image),
)


def find_cover_candidates(book: Book) -> List[Tuple[str, ManifestItem]]:
    """Candidats ordonnés (stratégie, item), sans doublons."""
    seen = set()
    candidates = []
    for label, strategy in _STRATEGIES:
        for item in strategy(book):
            if item.id not in seen:
                seen.add(item.id)
                candidates.append((label, item))
    return candidates


def find_cover_data(book: Book, index: ContainerIndex) -> Optional[bytes]:
    """
    Tente d'extraire les données de la couverture en utilisant plusieurs stratégies.

    La première lecture réussie dans le conteneur l'emporte; un candidat
    absent ou illisible passe au suivant.

    Args:
        book: Livre analysé
        index: Index du conteneur

    Returns:
        Données binaires de la couverture ou None si non trouvée
    """
    for label, item in find_cover_candidates(book):
        try:
            data = index.get(item.href)
        except EpubError:
            logger.debug("Cover candidate %s unreadable", item.href, exc_info=True)
            continue
        logger.info("Cover found via %s: %s", label, item.href)
        return data

    logger.info("No cover found in %s", book.opf_path)
    return None


def make_thumbnail(
    data: Optional[bytes], size: Tuple[int, int] = COVER_THUMBNAIL_SIZE
) -> Optional[bytes]:
    """
    Réduit une image en vignette PNG, en mémoire.

    Returns:
        Octets PNG ou None si l'image ne peut pas être décodée
    """
    if not data:
        return None
    try:
        pil = Image.open(io.BytesIO(data))
        pil.thumbnail(size, Image.Resampling.LANCZOS)
        if pil.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            pil = pil.convert("RGBA")
        out = io.BytesIO()
        pil.save(out, format="PNG")
        return out.getvalue()
    except (UnidentifiedImageError, OSError, ValueError):
        logger.warning("Could not build cover thumbnail", exc_info=True)
        return None
