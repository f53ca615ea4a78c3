# epub_navigator/src/epub_navigator/cli.py
"""
Logique pour le mode ligne de commande.

Utilise BookSession pour ouvrir le livre et afficher son contenu.
"""

import json
import logging
from typing import Optional

from .core.errors import EpubError
from .core.session import BookSession

logger = logging.getLogger(__name__)


def safe_open_book(epub_path: str) -> Optional[BookSession]:
    """
    Ouvre un fichier EPUB de manière sécurisée.

    Args:
        epub_path: Chemin vers le fichier EPUB

    Returns:
        Session ouverte si succès, None sinon
    """
    try:
        return BookSession.open(epub_path)
    except (EpubError, OSError) as e:
        logger.exception("Failed to open %s: %s", epub_path, e)
        return None


def print_book_summary(session: BookSession, show_spine: bool = False):
    """Affiche un résumé du livre ouvert."""
    publication = session.publication
    details = session.details()

    print(f"\n=== {details.display_title} ===")
    print(f"Version: EPUB {publication.version.value}")

    authors = publication.authors()
    if authors:
        print(f"Auteurs: {', '.join(authors)}")
    if details.isbn:
        print(f"ISBN: {details.isbn}")

    print(f"Ressources: {len(publication.resources)}")
    print(f"Spine: {publication.spine_length} document(s)")

    cover = publication.cover()
    print(f"Couverture: {cover.url if cover else '-'}")
    nav = publication.nav()
    print(f"Navigation: {nav.url if nav else '-'}")

    if show_spine:
        print("\n=== Ordre de lecture ===")
        for position, item in enumerate(publication.spine_items()):
            print(f"{position:4d}  {item.url}  ({item.media_type})")


def print_details_json(session: BookSession):
    """Affiche les détails du livre au format JSON."""
    print(json.dumps(session.details().to_dict(), ensure_ascii=False, indent=2))
