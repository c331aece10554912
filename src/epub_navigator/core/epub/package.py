# epub_navigator/src/epub_navigator/core/epub/package.py
"""
Module d'analyse du document de paquet (OPF).

Responsabilité unique: extraire métadonnées, manifeste, spine et
pointeur de couverture en une seule lecture du document.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..archive import ContainerIndex
from ..errors import EpubError, MalformedPackage
from ..models import ManifestItem, Metadata, PackageDocument, SpineItem
from ..paths import resolve_path
from ..xml_utils import attr, children, first_child, local_name, parse_xml, text_content

logger = logging.getLogger(__name__)


# --- Sections du paquet ---

_LEGACY_METADATA_WRAPPERS = ("dc-metadata", "x-metadata")


def _metadata_elements(metadata_el):
    """Enfants de <metadata>, y compris ceux des enveloppes OEB 1.x."""
    for el in metadata_el:
        name = local_name(el)
        if name in _LEGACY_METADATA_WRAPPERS:
            yield from _metadata_elements(el)
        elif name:
            yield el


def _parse_metadata(metadata_el) -> Tuple[Metadata, Optional[str]]:
    """
    Collecte les champs de métadonnées par nom local.

    Returns:
        (Metadata, identifiant de couverture éventuel)
    """
    values: Dict[str, List[str]] = {}
    cover_id = None

    for el in _metadata_elements(metadata_el):
        name = local_name(el)

        if name == "meta":
            if attr(el, "refines") is not None:
                continue
            meta_name = attr(el, "name")
            prop = attr(el, "property")
            if meta_name:
                key, value = meta_name.strip(), (attr(el, "content") or "").strip()
                if key.lower() == "cover" and value and cover_id is None:
                    cover_id = value
            elif prop:
                key, value = prop.strip(), text_content(el)
            else:
                continue
        else:
            key, value = name, text_content(el)

        if key and value:
            values.setdefault(key, []).append(value)

    return Metadata(values), cover_id


def _parse_manifest(
    manifest_el, opf_path: str, warnings: List[str]
) -> Dict[str, ManifestItem]:
    """Construit le manifeste, hrefs canonicalisés contre le document OPF."""
    manifest: Dict[str, ManifestItem] = {}

    for item in children(manifest_el, "item"):
        item_id = (attr(item, "id") or "").strip()
        href = attr(item, "href")
        if not item_id or not href:
            msg = f"Manifest item skipped (missing id or href): id={item_id!r} href={href!r}"
            logger.warning(msg)
            warnings.append(msg)
            continue

        if item_id in manifest:
            raise MalformedPackage(f"Duplicate manifest id: {item_id}")

        manifest[item_id] = ManifestItem(
            id=item_id,
            href=resolve_path(opf_path, href.strip()),
            media_type=(attr(item, "media-type") or "").strip(),
            properties=frozenset((attr(item, "properties") or "").split()),
        )

    return manifest


def _parse_spine(spine_el, warnings: List[str]) -> Tuple[SpineItem, ...]:
    spine = []
    for itemref in children(spine_el, "itemref"):
        idref = (attr(itemref, "idref") or "").strip()
        if not idref:
            # Position conservée: chapitre non résolu, comme un idref inconnu.
            msg = f"Spine itemref {len(spine)} has no idref"
            logger.warning(msg)
            warnings.append(msg)
        linear = (attr(itemref, "linear") or "yes").strip().lower() != "no"
        spine.append(SpineItem(idref=idref, linear=linear))
    return tuple(spine)


# --- Fonction principale ---


def parse_package(index: ContainerIndex, opf_path: str) -> PackageDocument:
    """
    Analyse le document de paquet une seule fois.

    Args:
        index: Index du conteneur
        opf_path: Clé canonique du document OPF

    Returns:
        PackageDocument (métadonnées, manifeste, spine, toc_id, cover_id)

    Raises:
        MalformedPackage: Document absent ou illisible, ou section
            metadata/manifest/spine manquante
    """
    try:
        root = parse_xml(index.get(opf_path))
    except (EpubError, ValueError) as e:
        raise MalformedPackage(f"Cannot read package document {opf_path}: {e}") from e

    sections = {}
    for name in ("metadata", "manifest", "spine"):
        el = first_child(root, name)
        if el is None:
            # Section hors de la racine: premier élément du même nom.
            el = next((n for n in root.iter() if local_name(n) == name), None)
        if el is None:
            raise MalformedPackage(f"Package document {opf_path} has no <{name}> element")
        sections[name] = el

    warnings: List[str] = []
    metadata, cover_id = _parse_metadata(sections["metadata"])
    manifest = _parse_manifest(sections["manifest"], opf_path, warnings)
    spine = _parse_spine(sections["spine"], warnings)
    toc_id = (attr(sections["spine"], "toc") or "").strip() or None

    logger.info(
        "Parsed package %s: %d manifest items, %d spine items",
        opf_path,
        len(manifest),
        len(spine),
    )
    return PackageDocument(
        metadata=metadata,
        manifest=manifest,
        spine=spine,
        toc_id=toc_id,
        cover_id=cover_id,
        warnings=tuple(warnings),
    )
