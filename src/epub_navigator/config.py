# epub_navigator/src/epub_navigator/config.py
"""
Configuration et constantes pour EPUB Navigator
"""

import os
import re

# ---------- Conteneur ----------
CONTAINER_PATH = "META-INF/container.xml"
MAX_ENTRY_BYTES = 256 * 1024 * 1024  # 256MB par entrée décompressée

# ---------- Types de médias ----------
OPF_MEDIA_TYPE = "application/oebps-package+xml"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
IMAGE_MEDIA_PREFIX = "image/"

# ---------- Jetons de propriétés du manifeste ----------
NAV_PROPERTY = "nav"
COVER_IMAGE_PROPERTY = "cover-image"
TOC_NAV_TYPE = "toc"

# ---------- Table des matières ----------
MAX_TOC_DEPTH = 64
UNTITLED = "Untitled"

# ---------- Contenu ----------
TEXT_ENCODING = "utf-8"
PLACEHOLDER_CHAPTER = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<html xmlns="http://www.w3.org/1999/xhtml">'
    "<head><title>Unavailable</title></head>"
    "<body><p>This chapter could not be loaded ({reason}).</p></body>"
    "</html>"
)
COVER_THUMBNAIL_SIZE = (200, 300)

# ---------- Extensions supportées ----------
SUPPORTED_EXT = (".epub",)

# ---------- Expressions régulières ----------
ISBN_RE = re.compile(r"(?:(?:ISBN(?:-1[03])?:?\s*)?)(97[89][ -]?)?[0-9][0-9 -]{8,}[0-9Xx]")

# ---------- Détection de langue ----------
LANGDETECT_SAMPLE_CHARS = 3000
LANGDETECT_MAX_CHAPTERS = 3

# ---------- Configuration logging ----------
LOG_DIR = "logs"
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 5
LOG_ENCODING = "utf-8"


# ---------- Initialisation des dossiers ----------
def ensure_directories():
    """Crée les dossiers nécessaires s'ils n'existent pas."""
    os.makedirs(LOG_DIR, exist_ok=True)
