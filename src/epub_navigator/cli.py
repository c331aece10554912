# epub_navigator/src/epub_navigator/cli.py
"""
Logique pour le mode ligne de commande.

Affiche le résumé d'un livre et sa table des matières.
"""

import logging
from typing import Sequence

from .core.epub import EpubDocument
from .core.models import TocNode

logger = logging.getLogger(__name__)


def print_book_summary(document: EpubDocument):
    """Affiche un résumé des métadonnées du livre."""
    book = document.book
    metadata = document.metadata

    print("\n=== Résumé du livre ===")
    print(f"Titre: {metadata.first('title') or '-'}")
    print(f"Auteurs: {', '.join(metadata.get_all('creator')) or '-'}")
    print(f"Langue: {metadata.first('language') or '-'}")
    print(f"Document OPF: {book.opf_path}")
    print(f"Chapitres: {document.chapter_count}")
    print(f"Ressources: {len(book.manifest)}")
    print(f"Table des matières: {document.toc_source.value}")

    cover = document.cover_image_bytes()
    print(f"Couverture: {f'{len(cover)} octets' if cover else 'absente'}")

    if book.warnings:
        print("\n=== Avertissements ===")
        for warning in book.warnings:
            print(f"  {warning}")


def print_toc(nodes: Sequence[TocNode]):
    """Affiche la table des matières, indentée par niveau."""
    print("\n=== Table des matières ===")
    if not nodes:
        print("  (vide)")
        return

    # Pile explicite: (nœud, niveau), parcours en pré-ordre
    stack = [(node, 0) for node in reversed(nodes)]
    while stack:
        node, level = stack.pop()
        target = node.href or "-"
        if node.fragment:
            target = f"{target}#{node.fragment}"
        print(f"{'  ' * (level + 1)}{node.title} -> {target}")
        stack.extend((child, level + 1) for child in reversed(node.children))


def cli_inspect_book(document: EpubDocument, show_toc: bool = False):
    """
    Affiche les informations d'un livre ouvert en mode CLI.

    Args:
        document: Livre ouvert
        show_toc: Si True, affiche aussi la table des matières
    """
    logger.info("CLI mode - inspecting %s", document.book.opf_path)
    print_book_summary(document)
    if show_toc:
        print_toc(document.toc)
