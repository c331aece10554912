# epub_navigator/src/epub_navigator/core/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from ..config import IMAGE_MEDIA_PREFIX


@dataclass(frozen=True)
class ArchiveEntry:
    """Entrée du conteneur ZIP, telle que lue dans le répertoire central."""

    name: str
    compressed_size: int
    uncompressed_size: int
    is_compressed: bool


class Metadata(Mapping[str, str]):
    """
    Métadonnées du paquet, indexées par nom local d'élément.

    Un champ répété (plusieurs dc:creator par exemple) conserve toutes ses
    valeurs dans l'ordre du document; l'accès par clé les joint avec "; ".
    """

    SEPARATOR = "; "

    def __init__(self, values: Optional[Mapping[str, List[str]]] = None):
        self._values: Dict[str, Tuple[str, ...]] = {
            k: tuple(v) for k, v in (values or {}).items() if v
        }

    def __getitem__(self, key: str) -> str:
        return self.SEPARATOR.join(self._values[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get_all(self, key: str) -> List[str]:
        return list(self._values.get(key, ()))

    def first(self, key: str) -> Optional[str]:
        values = self._values.get(key)
        return values[0] if values else None

    def __repr__(self) -> str:
        return f"Metadata({dict(self._values)!r})"


@dataclass(frozen=True)
class ManifestItem:
    """Ressource déclarée dans le manifeste; href est une clé canonique du conteneur."""

    id: str
    href: str
    media_type: str = ""
    properties: FrozenSet[str] = frozenset()

    @property
    def is_image(self) -> bool:
        return self.media_type.lower().startswith(IMAGE_MEDIA_PREFIX)


@dataclass(frozen=True)
class SpineItem:
    idref: str
    linear: bool = True


@dataclass(frozen=True)
class TocNode:
    """Entrée de la table des matières (arbre de profondeur finie)."""

    title: str
    href: Optional[str] = None
    fragment: Optional[str] = None
    children: Tuple["TocNode", ...] = ()

    def walk(self) -> Iterator["TocNode"]:
        """Parcours en profondeur (pré-ordre) sans récursion."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class TocSource(Enum):
    """Stratégie ayant produit la table des matières."""

    EPUB3_NAV = "nav"
    EPUB2_NCX = "ncx"
    SPINE = "spine"
    NONE = "none"


@dataclass(frozen=True)
class PackageDocument:
    """Résultat brut de l'analyse du document OPF."""

    metadata: Metadata
    manifest: Dict[str, ManifestItem]
    spine: Tuple[SpineItem, ...]
    toc_id: Optional[str] = None
    cover_id: Optional[str] = None
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Book:
    """Agrégat racine, construit une seule fois à l'ouverture puis en lecture seule."""

    opf_path: str
    metadata: Metadata
    manifest: Dict[str, ManifestItem]
    spine: Tuple[SpineItem, ...]
    toc: Tuple[TocNode, ...] = ()
    toc_source: TocSource = TocSource.NONE
    cover_id: Optional[str] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def chapter_count(self) -> int:
        return len(self.spine)

    def spine_item(self, index: int) -> Optional[ManifestItem]:
        """Item du manifeste pour la position index du spine (None si non résolu)."""
        if index < 0 or index >= len(self.spine):
            return None
        return self.manifest.get(self.spine[index].idref)

    def images(self) -> List[ManifestItem]:
        return [item for item in self.manifest.values() if item.is_image]
