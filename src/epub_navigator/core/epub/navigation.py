# epub_navigator/src/epub_navigator/core/epub/navigation.py
"""
Module de résolution de la table des matières.

Responsabilité unique: produire un arbre TocNode normalisé à partir de
l'un des deux formats de navigation (EPUB 3 nav, EPUB 2 NCX), avec un
repli sur l'ordre du spine.

Pattern: machine à états explicite (EPUB3_NAV -> EPUB2_NCX -> SPINE),
chaque stratégie étant testable indépendamment.
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from ...config import MAX_TOC_DEPTH, NAV_PROPERTY, NCX_MEDIA_TYPE, TOC_NAV_TYPE, UNTITLED
from ..archive import ContainerIndex
from ..models import ManifestItem, SpineItem, TocNode, TocSource
from ..paths import is_remote, resolve_path, split_fragment
from ..xml_utils import (
    attr,
    children,
    first_child,
    first_descendant,
    local_name,
    parse_xml,
    text_content,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedToc:
    """Arbre de navigation résolu et stratégie qui l'a produit."""

    nodes: Tuple[TocNode, ...] = ()
    source: TocSource = TocSource.NONE

    def __iter__(self) -> Iterator[TocNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


@dataclass(frozen=True)
class _TocContext:
    index: ContainerIndex
    opf_path: str
    manifest: Dict[str, ManifestItem]
    spine: Sequence[SpineItem]
    toc_id: Optional[str]
    max_depth: int


class _TreeBuilder:
    """Construit les nœuds d'un document de navigation en bornant la profondeur."""

    def __init__(self, doc_path: str, max_depth: int):
        self.doc_path = doc_path
        self.max_depth = max_depth
        self.truncated = False

    def node(self, title: str, raw_href: Optional[str], kids: List[TocNode]) -> TocNode:
        href = fragment = None
        raw_href = (raw_href or "").strip()
        if raw_href and not is_remote(raw_href):
            _, fragment = split_fragment(raw_href)
            # Les hrefs sont relatifs au document de navigation, pas à l'OPF.
            href = resolve_path(self.doc_path, raw_href)
        return TocNode(
            title=title or UNTITLED, href=href, fragment=fragment, children=tuple(kids)
        )

    def can_descend(self, depth: int) -> bool:
        if depth < self.max_depth:
            return True
        if not self.truncated:
            logger.warning(
                "Navigation in %s nested deeper than %d levels; truncated",
                self.doc_path,
                self.max_depth,
            )
            self.truncated = True
        return False

    # --- EPUB 3: <nav><ol><li><a/> ---

    def nav_list(self, ol, depth: int = 0) -> List[TocNode]:
        nodes = []
        for li in children(ol, "li"):
            label_el = self._nav_label(li)
            title = text_content(label_el) if label_el is not None else ""
            raw_href = attr(label_el, "href") if label_el is not None else None

            kids: List[TocNode] = []
            sub_ol = first_child(li, "ol")
            if sub_ol is not None and self.can_descend(depth + 1):
                kids = self.nav_list(sub_ol, depth + 1)

            if not title and not raw_href and not kids:
                continue
            nodes.append(self.node(title, raw_href, kids))
        return nodes

    @staticmethod
    def _nav_label(li):
        for name in ("a", "span"):
            el = first_child(li, name)
            if el is not None:
                return el
        for child in li:
            if local_name(child) == "ol":
                continue
            el = first_descendant(child, "a")
            if el is not None:
                return el
        return None

    # --- EPUB 2: <navMap><navPoint> ---

    def ncx_points(self, parent, depth: int = 0) -> List[TocNode]:
        nodes = []
        for point in children(parent, "navPoint"):
            title = ""
            label_el = first_child(point, "navLabel")
            if label_el is not None:
                text_el = first_child(label_el, "text")
                title = text_content(text_el if text_el is not None else label_el)

            content_el = first_child(point, "content")
            raw_href = attr(content_el, "src") if content_el is not None else None

            kids: List[TocNode] = []
            has_children = first_child(point, "navPoint") is not None
            if has_children and self.can_descend(depth + 1):
                kids = self.ncx_points(point, depth + 1)

            if not title and not raw_href and not kids:
                continue
            nodes.append(self.node(title, raw_href, kids))
        return nodes


# --- Détection des documents de navigation ---


def find_nav_item(manifest: Dict[str, ManifestItem]) -> Optional[ManifestItem]:
    """Premier item du manifeste portant la propriété 'nav'."""
    return next(
        (item for item in manifest.values() if NAV_PROPERTY in item.properties), None
    )


def find_ncx_item(
    manifest: Dict[str, ManifestItem], toc_id: Optional[str] = None
) -> Optional[ManifestItem]:
    """Document NCX: attribut toc du spine, sinon premier item de type NCX."""
    if toc_id and toc_id in manifest:
        return manifest[toc_id]
    return next(
        (item for item in manifest.values() if item.media_type.lower() == NCX_MEDIA_TYPE),
        None,
    )


# --- Stratégies ---


def parse_nav_document(data: bytes, nav_path: str, max_depth: int = MAX_TOC_DEPTH) -> List[TocNode]:
    """
    Analyse un document de navigation EPUB 3.

    Le <nav> dont epub:type contient 'toc' est préféré, sinon le premier <nav>.
    """
    root = parse_xml(data)
    navs = [el for el in root.iter() if local_name(el) == "nav"]
    if not navs:
        logger.debug("No <nav> element in %s", nav_path)
        return []

    toc_nav = next(
        (nav for nav in navs if TOC_NAV_TYPE in (attr(nav, "type") or "").split()),
        navs[0],
    )
    ol = first_descendant(toc_nav, "ol")
    if ol is None:
        return []
    return _TreeBuilder(nav_path, max_depth).nav_list(ol)


def parse_ncx_document(data: bytes, ncx_path: str, max_depth: int = MAX_TOC_DEPTH) -> List[TocNode]:
    """Analyse un document NCX (EPUB 2): navMap/navPoint imbriqués."""
    root = parse_xml(data)
    nav_map = root if local_name(root) == "navMap" else first_descendant(root, "navMap")
    if nav_map is None:
        logger.debug("No <navMap> element in %s", ncx_path)
        return []
    return _TreeBuilder(ncx_path, max_depth).ncx_points(nav_map)


def _toc_from_nav(ctx: _TocContext) -> List[TocNode]:
    item = find_nav_item(ctx.manifest)
    if item is None:
        return []
    return parse_nav_document(ctx.index.get(item.href), item.href, ctx.max_depth)


def _toc_from_ncx(ctx: _TocContext) -> List[TocNode]:
    item = find_ncx_item(ctx.manifest, ctx.toc_id)
    if item is None:
        return []
    return parse_ncx_document(ctx.index.get(item.href), item.href, ctx.max_depth)


def _toc_from_spine(ctx: _TocContext) -> List[TocNode]:
    """Liste à plat: un nœud par position du spine, titré par nom de fichier."""
    nodes = []
    for spine_item in ctx.spine:
        item = ctx.manifest.get(spine_item.idref)
        if item is None:
            nodes.append(TocNode(title=spine_item.idref or UNTITLED))
        else:
            nodes.append(TocNode(title=posixpath.basename(item.href) or item.href, href=item.href))
    return nodes


_STRATEGIES: Tuple[Tuple[TocSource, Callable[[_TocContext], List[TocNode]]], ...] = (
    (TocSource.EPUB3_NAV, _toc_from_nav),
    (TocSource.EPUB2_NCX, _toc_from_ncx),
    (TocSource.SPINE, _toc_from_spine),
)


# --- Fonction principale ---


def resolve_toc(
    index: ContainerIndex,
    opf_path: str,
    manifest: Dict[str, ManifestItem],
    spine: Sequence[SpineItem],
    toc_id: Optional[str] = None,
    max_depth: int = MAX_TOC_DEPTH,
) -> ResolvedToc:
    """
    Résout la table des matières; ne lève jamais d'exception.

    Stratégies essayées dans l'ordre, la première non vide l'emporte:
    1. Document nav EPUB 3
    2. Document NCX EPUB 2
    3. Liste à plat issue du spine

    Returns:
        ResolvedToc (vide seulement si toutes les stratégies échouent)
    """
    ctx = _TocContext(index, opf_path, manifest, spine, toc_id, max_depth)

    for source, strategy in _STRATEGIES:
        try:
            nodes = strategy(ctx)
        except Exception:
            logger.warning("TOC strategy %s failed for %s", source.name, opf_path, exc_info=True)
            continue
        if nodes:
            logger.info("TOC resolved via %s (%d top-level entries)", source.name, len(nodes))
            return ResolvedToc(nodes=tuple(nodes), source=source)
        logger.debug("TOC strategy %s yielded no entries", source.name)

    logger.info("No table of contents available for %s", opf_path)
    return ResolvedToc()
