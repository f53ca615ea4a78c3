# epub_navigator/src/epub_navigator/core/epub/publication.py
"""
Module d'assemblage de la publication.

Responsabilité unique: transformer un ``Package`` en vue interrogeable
(ressources ordonnées, index URL -> position, couverture, navigation).
"""

import logging
import zipfile
import zlib
from types import MappingProxyType
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple

from isbnlib import canonical, is_isbn10, is_isbn13

from ...config import BASE_URL, CONTAINER_PATH, ISBN_RE
from ..errors import (
    ArchiveError,
    ContainerFileError,
    InvalidHrefError,
    ManifestError,
    PackageDocError,
    SpineError,
    UrlNotFoundError,
)
from ..models import MetadataItem, Package, ResourceIndex, ResourceItem, Version
from . import navigation
from .archive import EpubArchive
from .container import parse_container_file
from .package import parse_package
from .urls import join_url, normalize_url

logger = logging.getLogger(__name__)


class _Assembly:
    """
    Consommation du manifeste en deux phases.

    Phase 1: les entrées référencées par le spine, dans l'ordre du spine.
    Phase 2: le reste, dans l'ordre du document. Chaque entrée est retirée
    du manifeste exactement une fois; il est vide à la fin.
    """

    def __init__(self, package: Package, package_url: str):
        self.package = package
        self.package_url = package_url
        self.resources: List[ResourceItem] = []
        self.spine: List[int] = []
        self.resource_indexes: Dict[str, ResourceIndex] = {}
        self.legacy_toc: Optional[int] = None
        self.legacy_cover: Optional[int] = None

        self._toc_id = package.spine.toc
        self._cover_id = next(
            (item.value for item in package.metadata if item.property == "cover"), None
        )

    def _consume(self, item_id: str, in_spine: bool):
        item = self.package.manifest.pop(item_id)
        try:
            url = join_url(self.package_url, item.href)
        except ValueError as e:
            raise InvalidHrefError(item.href) from e
        if url in self.resource_indexes:
            raise ManifestError(f"two items resolve to {url}")

        index = len(self.resources)
        spine_index = None
        if in_spine:
            spine_index = len(self.spine)
            self.spine.append(index)

        item.url = url
        self.resources.append(item)
        self.resource_indexes[url] = ResourceIndex(index, spine_index)

        if item_id == self._toc_id:
            self.legacy_toc = index
        if item_id == self._cover_id:
            self.legacy_cover = index

    def run(self):
        manifest = self.package.manifest
        if not self.package.spine.itemrefs:
            raise SpineError("empty spine")

        for itemref in self.package.spine.itemrefs:
            if itemref.idref not in manifest:
                raise SpineError(f"itemref {itemref.idref!r} is missing from manifest or repeated")
            self._consume(itemref.idref, in_spine=True)

        for item_id in list(manifest):
            self._consume(item_id, in_spine=False)


# --- Politiques par dialecte ---


def _legacy_cover(publication: "Publication") -> Optional[ResourceItem]:
    if publication.legacy_cover_index is None:
        return None
    return publication.resources[publication.legacy_cover_index]


def _epub3_cover(publication: "Publication") -> Optional[ResourceItem]:
    found = publication.find_resource("cover-image")
    return found if found is not None else _legacy_cover(publication)


def _epub3_nav(publication: "Publication") -> Optional[ResourceItem]:
    return publication.find_resource("nav")


def _no_nav(publication: "Publication") -> Optional[ResourceItem]:
    return None


_COVER_POLICIES: Dict[Version, Callable[["Publication"], Optional[ResourceItem]]] = {
    Version.EPUB3: _epub3_cover,
    Version.EPUB2: _legacy_cover,
}

_NAV_POLICIES: Dict[Version, Callable[["Publication"], Optional[ResourceItem]]] = {
    Version.EPUB3: _epub3_nav,
    Version.EPUB2: _no_nav,
}


class Publication:
    """
    Publication EPUB assemblée, immuable après construction.

    ``resources`` commence par les items du spine, dans l'ordre du spine,
    suivis des autres items du manifeste. ``resource_indexes`` associe
    chaque URL absolue à sa position.
    """

    def __init__(
        self,
        package_url: str,
        version: Version,
        metadata: List[MetadataItem],
        resources: List[ResourceItem],
        spine: List[int],
        resource_indexes: Dict[str, ResourceIndex],
        legacy_toc: Optional[int] = None,
        legacy_cover: Optional[int] = None,
        base_url: str = BASE_URL,
    ):
        self.base_url = base_url
        self.package_url = package_url
        self.version = version
        self._metadata = tuple(metadata)
        self.resources = tuple(resources)
        self.spine = tuple(spine)
        self.resource_indexes = MappingProxyType(dict(resource_indexes))
        self.legacy_toc_index = legacy_toc
        self.legacy_cover_index = legacy_cover

    # --- Construction ---

    @classmethod
    def open(cls, reader: BinaryIO) -> Tuple["Publication", EpubArchive]:
        """
        Ouvre un EPUB depuis une source binaire avec ``seek``.

        Tout ou rien: en cas d'erreur, l'archive est refermée et aucune
        publication partielle n'est retournée.

        Returns:
            Tuple (publication, archive); l'archive sert à lire les ressources

        Raises:
            EpubError: archive, container ou document de package invalide
            OSError: erreur d'E/S, propagée telle quelle
        """
        archive = EpubArchive.open(reader, BASE_URL)
        try:
            publication = cls._from_archive(archive)
        except Exception:
            archive.close()
            raise
        return publication, archive

    @classmethod
    def _from_archive(cls, archive: EpubArchive) -> "Publication":
        try:
            try:
                container = archive.get_reader(join_url(BASE_URL, CONTAINER_PATH))
            except UrlNotFoundError as e:
                raise ContainerFileError(f"{CONTAINER_PATH} not found") from e
            package_url = parse_container_file(BASE_URL, container)

            try:
                package_doc = archive.get_reader(package_url)
            except UrlNotFoundError as e:
                raise PackageDocError(f"{package_url} not found") from e
            package = parse_package(package_doc)
        except (zipfile.BadZipFile, zlib.error) as e:
            raise ArchiveError(str(e)) from e

        publication = cls.from_package(package, package_url)
        logger.info(
            "Opened EPUB %s: %d resource(s), %d in spine",
            publication.version.value,
            len(publication.resources),
            len(publication.spine),
        )
        return publication

    @classmethod
    def from_package(cls, package: Package, package_url: str) -> "Publication":
        """
        Assemble une publication en consommant ``package.manifest``.

        Raises:
            SpineError: spine vide, ou itemref absent du manifeste
            ManifestError: deux items résolus vers la même URL
            InvalidHrefError: href non résoluble
        """
        assembly = _Assembly(package, package_url)
        assembly.run()
        return cls(
            package_url=package_url,
            version=package.version,
            metadata=package.metadata,
            resources=assembly.resources,
            spine=assembly.spine,
            resource_indexes=assembly.resource_indexes,
            legacy_toc=assembly.legacy_toc,
            legacy_cover=assembly.legacy_cover,
        )

    # --- Recherche ---

    def resource_index(self, url: str) -> ResourceIndex:
        """
        Raises:
            UrlNotFoundError: si ``url`` ne désigne aucune ressource
        """
        found = self.resource_indexes.get(url)
        if found is None:
            try:
                found = self.resource_indexes.get(normalize_url(url))
            except ValueError:
                found = None
        if found is None:
            raise UrlNotFoundError(url)
        return found

    def resource(self, url: str) -> ResourceItem:
        return self.resources[self.resource_index(url).resource_index]

    def find_resource(self, token: str) -> Optional[ResourceItem]:
        """Première ressource dont ``properties`` contient ``token``."""
        return next((item for item in self.resources if item.has_property(token)), None)

    def spine_items(self) -> List[ResourceItem]:
        return [self.resources[index] for index in self.spine]

    @property
    def spine_length(self) -> int:
        return len(self.spine)

    # --- Navigation ---

    def navigate_from(self, url: str, forward: bool) -> Optional[ResourceItem]:
        return navigation.navigate_from(self, url, forward)

    def navigate_to(self, url: str) -> Tuple[ResourceItem, bool]:
        return navigation.navigate_to(self, url)

    def navigate_to_start(self) -> ResourceItem:
        return navigation.navigate_to_start(self)

    # --- Métadonnées ---

    def metadata(self) -> Tuple[MetadataItem, ...]:
        return self._metadata

    def find_metadata(self, prop: str) -> List[MetadataItem]:
        return [item for item in self._metadata if item.property == prop]

    def title(self) -> Optional[MetadataItem]:
        return next((item for item in self._metadata if item.property == "title"), None)

    def authors(self) -> List[str]:
        return [item.value for item in self.find_metadata("creator") if item.value]

    def isbn(self) -> Optional[str]:
        """ISBN canonique trouvé parmi les ``dc:identifier``, ou None."""
        for ident in self.find_metadata("identifier"):
            match = ISBN_RE.search(ident.value)
            if not match:
                continue
            candidate = match.group(0)
            if is_isbn10(candidate) or is_isbn13(candidate):
                return canonical(candidate)
        return None

    def cover(self) -> Optional[ResourceItem]:
        return _COVER_POLICIES[self.version](self)

    def nav(self) -> Optional[ResourceItem]:
        return _NAV_POLICIES[self.version](self)

    def legacy_toc(self) -> Optional[ResourceItem]:
        if self.legacy_toc_index is None:
            return None
        return self.resources[self.legacy_toc_index]
