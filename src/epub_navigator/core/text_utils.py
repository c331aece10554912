# epub_navigator/src/epub_navigator/core/text_utils.py
"""
Utilitaires pour le nettoyage de chaînes de caractères.
"""

import html
import re

_BLOCK_RE = re.compile(r"<(script|style|head)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)


def clean_html_text(html_content: str) -> str:
    """Nettoie le HTML pour extraire le texte."""
    if not html_content:
        return ""
    # Supprimer les blocs non textuels puis les balises HTML
    text = _BLOCK_RE.sub(" ", html_content)
    text = re.sub(r"<[^>]+>", " ", text)
    text = html.unescape(text)
    # Supprimer les espaces multiples
    text = re.sub(r"\s+", " ", text)
    return text.strip()
