# epub_navigator/src/epub_navigator/core/errors.py
"""
Hiérarchie des erreurs du moteur EPUB.

Les erreurs fatales (sous-classes de BookOpenError) interrompent
l'ouverture du livre. Les autres sont locales à une requête de contenu
et n'empêchent jamais les lectures suivantes.
"""


class EpubError(Exception):
    """Erreur de base pour tout le paquet."""


# --- Erreurs fatales (ouverture du livre) ---


class BookOpenError(EpubError):
    """Le livre ne peut pas être ouvert."""


class NotAContainer(BookOpenError):
    """La source n'est pas une archive ZIP lisible."""


class NoContainerPointer(BookOpenError):
    """META-INF/container.xml absent ou sans chemin vers le document de paquet."""


class MalformedPackage(BookOpenError):
    """Le document de paquet (OPF) est illisible ou incomplet."""


# --- Erreurs par requête ---


class NotFound(EpubError, LookupError):
    """Le chemin demandé n'existe pas dans le conteneur."""

    def __init__(self, name: str, message: str = ""):
        self.name = name
        super().__init__(message or f"Entry not found in container: {name}")


class ChapterOutOfRange(NotFound, IndexError):
    """Index de chapitre hors de [0, chapter_count)."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(
            f"#{index}", f"Chapter index {index} out of range ({count} chapters)"
        )


class DecodeFailure(EpubError, ValueError):
    """Les octets ne forment pas un texte valide."""


class EntryTooLarge(EpubError):
    """L'entrée dépasse la taille décompressée autorisée."""


class ArchiveReadError(EpubError):
    """Les données d'une entrée sont corrompues ou illisibles."""
