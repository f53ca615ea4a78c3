# epub_navigator/src/epub_navigator/core/epub/container.py
"""
Module de lecture du fichier container.

Responsabilité unique: trouver le document de package déclaré dans
``META-INF/container.xml``.
"""

import logging
from typing import BinaryIO

from lxml import etree

from ..errors import ContainerFileError
from .urls import join_url
from .xml_events import START, iter_xml_events

logger = logging.getLogger(__name__)


def parse_container_file(base_url: str, reader: BinaryIO) -> str:
    """
    Extrait l'URL absolue du document de package.

    Le premier ``<rootfile>`` rencontré dans l'ordre du document l'emporte.

    Args:
        base_url: URL racine de l'archive
        reader: Flux du fichier container.xml

    Returns:
        URL absolue du document de package

    Raises:
        ContainerFileError: aucun rootfile exploitable, ou XML invalide
        OSError: erreur d'E/S, propagée telle quelle
    """
    try:
        for event in iter_xml_events(reader):
            if event.kind != START or event.local_name != "rootfile":
                continue

            full_path = event.get("full-path")
            if not full_path:
                break
            try:
                url = join_url(base_url, full_path)
            except ValueError:
                break
            logger.debug("Package document declared at %s", url)
            return url
    except etree.LxmlError as e:
        raise ContainerFileError(str(e)) from e

    raise ContainerFileError("no usable rootfile")
