# epub_navigator/src/epub_navigator/core/epub/archive.py
"""
Module d'accès à l'archive OCF.

Responsabilité unique: indexer les entrées du zip par URL absolue et
ouvrir une entrée sous forme de flux décompressé.
"""

import logging
import zipfile
import zlib
from typing import BinaryIO, Dict, Iterator, Optional

from ...config import BASE_URL, TEXT_ENCODING
from ..errors import ArchiveError, UrlNotFoundError
from .urls import join_url, normalize_url

logger = logging.getLogger(__name__)


class EpubArchive:
    """
    Archive zip d'un EPUB, adressée par URL ``epub:``.

    Le curseur de décompression est un état mutable: un seul flux est
    actif à la fois. Ouvrir une nouvelle entrée ferme la précédente.
    L'accès concurrent doit être sérialisé par l'appelant.
    """

    def __init__(self, zip_file: zipfile.ZipFile, zip_indexes: Dict[str, zipfile.ZipInfo]):
        self._zip = zip_file
        self._zip_indexes = zip_indexes
        self._active: Optional[BinaryIO] = None

    @classmethod
    def open(cls, reader: BinaryIO, base_url: str = BASE_URL) -> "EpubArchive":
        """
        Lit le répertoire central et construit l'index URL -> entrée.

        Args:
            reader: Source binaire avec ``seek``
            base_url: URL racine contre laquelle les noms d'entrées sont résolus

        Raises:
            ArchiveError: si le répertoire central est corrompu
            OSError: erreur d'E/S de la source, propagée telle quelle
        """
        try:
            zip_file = zipfile.ZipFile(reader)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, EOFError) as e:
            raise ArchiveError(str(e)) from e

        zip_indexes = {}
        for info in zip_file.infolist():
            name = info.filename.replace("\\", "/")
            if name.endswith("/"):
                continue
            try:
                url = join_url(base_url, name)
            except ValueError:
                logger.debug("Skipping zip entry with unusable name: %r", info.filename)
                continue
            zip_indexes[url] = info

        logger.debug("Indexed %d archive entries", len(zip_indexes))
        return cls(zip_file, zip_indexes)

    def __contains__(self, url: str) -> bool:
        return self._lookup(url) is not None

    def __enter__(self) -> "EpubArchive":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def urls(self) -> Iterator[str]:
        return iter(self._zip_indexes)

    def _lookup(self, url: str) -> Optional[zipfile.ZipInfo]:
        info = self._zip_indexes.get(url)
        if info is None:
            try:
                info = self._zip_indexes.get(normalize_url(url))
            except ValueError:
                return None
        return info

    def _close_active(self):
        if self._active is not None:
            self._active.close()
            self._active = None

    def get_reader(self, url: str) -> BinaryIO:
        """
        Ouvre l'entrée située à ``url``.

        Returns:
            Flux binaire décompressé, positionné au début de l'entrée

        Raises:
            UrlNotFoundError: si aucune entrée ne correspond
            ArchiveError: en-tête local invalide, entrée chiffrée ou méthode
                de compression non prise en charge
        """
        info = self._lookup(url)
        if info is None:
            raise UrlNotFoundError(url)

        self._close_active()
        try:
            self._active = self._zip.open(info)
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as e:
            raise ArchiveError(str(e)) from e
        return self._active

    def read_bytes(self, url: str) -> bytes:
        """
        Lit une entrée entière.

        Raises:
            ArchiveError: données compressées corrompues ou CRC invalide
        """
        with self.get_reader(url) as stream:
            try:
                data = stream.read()
            except (zipfile.BadZipFile, zlib.error) as e:
                raise ArchiveError(str(e)) from e
        self._active = None
        return data

    def read_text(self, url: str, encoding: str = TEXT_ENCODING) -> str:
        """Lit une entrée entière et la décode."""
        return self.read_bytes(url).decode(encoding)

    def close(self):
        self._close_active()
        self._zip.close()
