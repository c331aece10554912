# epub_navigator/src/epub_navigator/core/archive.py
"""
Index du conteneur ZIP.

Responsabilité unique: ouvrir l'archive, construire une fois l'index
nom -> entrée, puis décompresser une seule entrée à la demande.
Aucune extraction en masse.
"""

import io
import logging
import os
import threading
import zipfile
import zlib
from typing import BinaryIO, Dict, List, Union

from ..config import MAX_ENTRY_BYTES
from .errors import ArchiveReadError, EntryTooLarge, NotAContainer, NotFound
from .models import ArchiveEntry
from .paths import normalize_key

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]", BinaryIO]


class ContainerIndex:
    """Lecteur adressable par nom d'un conteneur ZIP."""

    def __init__(self, zf: zipfile.ZipFile, max_entry_bytes: int = MAX_ENTRY_BYTES):
        self._zf = zf
        self._lock = threading.Lock()
        self._max_entry_bytes = max_entry_bytes
        self._infos: Dict[str, zipfile.ZipInfo] = {}
        self._entries: List[ArchiveEntry] = []

        for info in zf.infolist():
            if info.is_dir():
                continue
            key = normalize_key(info.filename)
            if key in self._infos:
                logger.debug("Duplicate archive entry ignored: %s", info.filename)
                continue
            self._infos[key] = info
            self._entries.append(
                ArchiveEntry(
                    name=info.filename.replace("\\", "/"),
                    compressed_size=info.compress_size,
                    uncompressed_size=info.file_size,
                    is_compressed=info.compress_type != zipfile.ZIP_STORED,
                )
            )
        logger.debug("Indexed %d archive entries", len(self._entries))

    @classmethod
    def open(cls, source: Source, max_entry_bytes: int = MAX_ENTRY_BYTES) -> "ContainerIndex":
        """
        Ouvre une archive depuis des octets, un chemin ou un fichier seekable.

        Raises:
            NotAContainer: Si la source n'est pas une archive ZIP valide
            OSError: Si le fichier ne peut pas être lu
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            if not len(source):
                raise NotAContainer("Empty buffer")
            source = io.BytesIO(bytes(source))
        elif isinstance(source, (str, os.PathLike)):
            source = os.fspath(source)

        try:
            zf = zipfile.ZipFile(source, "r")
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError) as e:
            raise NotAContainer(f"Not a ZIP container: {e}") from e

        try:
            return cls(zf, max_entry_bytes=max_entry_bytes)
        except Exception:
            zf.close()
            raise

    def list(self) -> List[ArchiveEntry]:
        """Entrées (hors répertoires) dans l'ordre de l'archive."""
        return list(self._entries)

    def contains(self, name: str) -> bool:
        return normalize_key(name) in self._infos

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> bytes:
        """
        Décompresse et retourne le contenu d'une entrée.

        Raises:
            NotFound: Si aucune entrée ne correspond (casse et antislashs ignorés)
            EntryTooLarge: Si la taille décompressée déclarée dépasse la limite
            ArchiveReadError: Si les données de l'entrée sont illisibles
        """
        info = self._infos.get(normalize_key(name or ""))
        if info is None:
            raise NotFound(name)

        if info.file_size > self._max_entry_bytes:
            raise EntryTooLarge(
                f"Entry {info.filename} is {info.file_size} bytes "
                f"(limit {self._max_entry_bytes})"
            )

        try:
            with self._lock:
                return self._zf.read(info)
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError) as e:
            raise ArchiveReadError(f"Cannot read entry {info.filename}: {e}") from e

    def close(self):
        with self._lock:
            self._zf.close()

    def __enter__(self) -> "ContainerIndex":
        return self

    def __exit__(self, *exc_info):
        self.close()
