# epub_navigator/src/epub_navigator/core/epub/navigation.py
"""
Module de navigation dans le spine.

Fonctions pures sur une publication déjà assemblée: aucune lecture
d'archive, aucun état.
"""

from typing import TYPE_CHECKING, Optional, Tuple

from ..models import ResourceItem

if TYPE_CHECKING:
    from .publication import Publication


def navigate_from(publication: "Publication", url: str, forward: bool) -> Optional[ResourceItem]:
    """
    Ressource adjacente dans l'ordre de lecture.

    Returns:
        La ressource suivante (ou précédente), ou None si ``url`` est hors
        du spine ou déjà à l'extrémité (fin de livre, pas une erreur)

    Raises:
        UrlNotFoundError: si ``url`` est inconnue
    """
    _, spine_index = publication.resource_index(url)
    if spine_index is None:
        return None

    target = spine_index + 1 if forward else spine_index - 1
    if target < 0 or target >= len(publication.spine):
        return None
    return publication.resources[publication.spine[target]]


def navigate_to(publication: "Publication", url: str) -> Tuple[ResourceItem, bool]:
    """Ressource située à ``url`` et indicateur d'appartenance au spine."""
    resource_index, spine_index = publication.resource_index(url)
    return publication.resources[resource_index], spine_index is not None


def navigate_to_start(publication: "Publication") -> ResourceItem:
    # TODO: tenir compte du guide et de page-progression-direction
    return publication.resources[publication.spine[0]]
