# epub_navigator/src/epub_navigator/core/paths.py
"""
Algèbre des chemins internes au conteneur.

Toutes les références (manifeste, navigation, ressources des chapitres)
passent par resolve_path afin d'obtenir la même clé canonique:
slashs avant, pas de slash initial, pourcentages décodés, sans fragment.
"""

import re
from typing import List, Optional, Tuple
from urllib.parse import unquote

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def split_fragment(ref: str) -> Tuple[str, Optional[str]]:
    """Sépare 'chap.xhtml#sec' en ('chap.xhtml', 'sec'); fragment None si absent."""
    if not ref:
        return "", None
    path, sep, fragment = ref.partition("#")
    return path, (unquote(fragment) if sep else None)


def _segments(path: str) -> List[str]:
    return [s for s in path.replace("\\", "/").split("/") if s]


def directory_of(path: str) -> str:
    """Répertoire d'un chemin du conteneur ('' à la racine)."""
    segments = _segments(path)
    return "/".join(segments[:-1])


def resolve_path(base_path: str, relative_ref: str) -> str:
    """
    Résout une référence relative par rapport au document base_path.

    Fonction pure et totale: une entrée malformée donne une
    canonicalisation au mieux, jamais une exception.

    Args:
        base_path: Chemin du document qui contient la référence
            (ex: 'OEBPS/Text/chapter1.xhtml')
        relative_ref: Référence telle qu'écrite dans le document
            (ex: '../Images/cover.jpg' ou 'chap2.xhtml#s3')

    Returns:
        Clé canonique du conteneur (ex: 'OEBPS/Images/cover.jpg').
        Une référence vide ou réduite à une ancre désigne base_path lui-même.
    """
    # Décodage avant la coupe au premier '#': une clé canonique n'en contient jamais.
    path = unquote(relative_ref or "").partition("#")[0].replace("\\", "/")

    if not path:
        return canonicalize(base_path or "")

    if path.startswith("/"):
        parts: List[str] = []
    else:
        parts = _segments(directory_of(base_path or ""))

    for segment in _segments(path):
        if segment == ".":
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)

    return "/".join(parts)


def canonicalize(ref: str) -> str:
    """Forme canonique d'une référence déjà relative à la racine du conteneur."""
    if not ref:
        return ""
    return resolve_path("", ref)


def normalize_key(name: str) -> str:
    """Clé de recherche de l'index: insensible à la casse et aux antislashs."""
    return name.replace("\\", "/").lstrip("/").lower()


def is_remote(ref: str) -> bool:
    """Vrai pour les références externes (http:, mailto:, data:...)."""
    return bool(ref) and bool(_SCHEME_RE.match(ref.strip()))
