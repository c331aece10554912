# epub_navigator/src/epub_navigator/core/xml_utils.py
"""
Utilitaires XML partagés (lxml).
"""

from typing import Iterator, Optional

from lxml import etree


def _make_parser() -> etree.XMLParser:
    # Un parseur par appel: les instances lxml ne se partagent pas entre threads.
    return etree.XMLParser(
        recover=True,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )


def parse_xml(data: bytes) -> etree._Element:
    """
    Analyse un document XML/XHTML de manière tolérante.

    Raises:
        ValueError: Si aucun élément racine ne peut être reconstruit
    """
    try:
        root = etree.fromstring(data, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        raise ValueError(f"Unparsable XML document: {e}") from e
    if root is None:
        raise ValueError("Empty or unparsable XML document")
    return root


def local_name(element) -> str:
    """Nom local d'un élément, sans espace de noms ('' pour les PI/commentaires)."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname


def attr(element, name: str) -> Optional[str]:
    """Attribut par nom local, quel que soit son espace de noms."""
    value = element.get(name)
    if value is not None:
        return value
    for key, val in element.attrib.items():
        if key.startswith("{") and etree.QName(key).localname == name:
            return val
    return None


def children(element, name: str) -> Iterator:
    for child in element:
        if local_name(child) == name:
            yield child


def first_child(element, name: str):
    return next(children(element, name), None)


def first_descendant(element, name: str):
    for node in element.iter():
        if node is not element and local_name(node) == name:
            return node
    return None


def text_content(element) -> str:
    """Texte d'un élément et de ses descendants, espaces normalisés."""
    return " ".join("".join(element.itertext()).split())
