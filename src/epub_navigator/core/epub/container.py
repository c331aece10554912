# epub_navigator/src/epub_navigator/core/epub/container.py
"""
Module de localisation du document de paquet.

Responsabilité unique: lire META-INF/container.xml et en extraire le
chemin du document OPF.
"""

import logging

from ...config import CONTAINER_PATH, OPF_MEDIA_TYPE
from ..archive import ContainerIndex
from ..errors import EpubError, NoContainerPointer
from ..paths import canonicalize
from ..xml_utils import attr, local_name, parse_xml

logger = logging.getLogger(__name__)


def locate_package_document(index: ContainerIndex) -> str:
    """
    Trouve le chemin du document de paquet déclaré par le conteneur.

    Le premier rootfile de type OPF est préféré, sinon le premier rootfile.

    Args:
        index: Index du conteneur ouvert

    Returns:
        Clé canonique du document OPF (ex: 'OEBPS/content.opf')

    Raises:
        NoContainerPointer: Entrée absente, illisible ou sans full-path
    """
    try:
        root = parse_xml(index.get(CONTAINER_PATH))
    except (EpubError, ValueError) as e:
        raise NoContainerPointer(f"Cannot read {CONTAINER_PATH}: {e}") from e

    rootfiles = [el for el in root.iter() if local_name(el) == "rootfile"]
    if not rootfiles:
        raise NoContainerPointer(f"No rootfile element in {CONTAINER_PATH}")

    preferred = [rf for rf in rootfiles if attr(rf, "media-type") == OPF_MEDIA_TYPE]
    rootfile = (preferred or rootfiles)[0]

    full_path = canonicalize((attr(rootfile, "full-path") or "").strip())
    if not full_path:
        raise NoContainerPointer(f"rootfile without full-path in {CONTAINER_PATH}")

    logger.debug("Package document located at %s", full_path)
    return full_path
