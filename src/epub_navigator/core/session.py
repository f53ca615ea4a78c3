# epub_navigator/src/epub_navigator/core/session.py
"""
Session de lecture d'un livre ouvert.

Associe une publication à son archive et sérialise tous les accès avec un
verrou unique: l'archive ne supporte qu'un flux actif à la fois. Ce service
est la frontière utilisée par l'interface (ou la CLI) pour lire les pages,
naviguer et afficher les détails.
"""

import base64
import hashlib
import logging
import os
import threading
from typing import BinaryIO, Optional, Tuple

from ..config import (
    CONTENT_MIMETYPES,
    FINGERPRINT_BYTES,
    READ_CHUNK_SIZE,
    TEXT_ENCODING,
)
from .epub import EpubArchive, Publication
from .errors import EpubContentError, NavigationMissingError
from .models import BookDetails, ContentPage, FileInfo, ResourceItem

logger = logging.getLogger(__name__)


def compute_fingerprint(path: str, limit: int = FINGERPRINT_BYTES) -> str:
    """Empreinte hexadécimale (16 caractères) du premier Mio du fichier."""
    hasher = hashlib.blake2b(digest_size=8)
    remains = limit
    with open(path, "rb") as f:
        while remains > 0:
            chunk = f.read(min(remains, READ_CHUNK_SIZE))
            if not chunk:
                break
            hasher.update(chunk)
            remains -= len(chunk)
    return hasher.hexdigest()


def read_file_info(path: str) -> FileInfo:
    """Taille et dates (en ms) du fichier; 0 si une date est indisponible."""
    st = os.stat(path)
    birth = getattr(st, "st_birthtime", 0)
    return FileInfo(
        path=os.path.abspath(path),
        size=st.st_size,
        created=int(birth * 1000),
        modified=int(st.st_mtime * 1000),
    )


def resource_data_uri(content: bytes, media_type: str) -> str:
    """Encode une ressource binaire en URI ``data:`` base64."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


class BookSession:
    """
    Livre ouvert: publication, archive et position courante.

    Toutes les méthodes publiques prennent le verrou de la session.
    """

    def __init__(
        self,
        publication: Publication,
        archive: EpubArchive,
        file_info: Optional[FileInfo] = None,
        fingerprint: str = "",
        handle: Optional[BinaryIO] = None,
    ):
        self.publication = publication
        self.file_info = file_info or FileInfo()
        self.fingerprint = fingerprint
        self.current_url: Optional[str] = None
        self._archive = archive
        self._handle = handle
        self._lock = threading.Lock()

    @classmethod
    def open(cls, path: str) -> "BookSession":
        """
        Ouvre le livre situé à ``path``.

        Raises:
            EpubError: EPUB invalide
            OSError: fichier illisible
        """
        logger.info("Loading book at %s", path)
        file_info = read_file_info(path)
        fingerprint = compute_fingerprint(path)

        handle = open(path, "rb")
        try:
            publication, archive = Publication.open(handle)
        except Exception:
            handle.close()
            raise

        logger.debug("Book opened, fingerprint %s", fingerprint)
        return cls(publication, archive, file_info, fingerprint, handle)

    def __enter__(self) -> "BookSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        with self._lock:
            self._archive.close()
            if self._handle is not None:
                self._handle.close()
                self._handle = None

    # --- Helpers (appelés verrou pris) ---

    def _page(self, item: ResourceItem) -> ContentPage:
        if item.media_type.lower() not in CONTENT_MIMETYPES:
            raise EpubContentError(f"{item.url} is {item.media_type}")
        try:
            text = self._archive.read_text(item.url, TEXT_ENCODING)
        except UnicodeDecodeError as e:
            raise EpubContentError(f"{item.url} is not {TEXT_ENCODING}") from e

        spine_index = self.publication.resource_index(item.url).spine_index
        return ContentPage(item.url, text, item.media_type, spine_index)

    def _go(self, item: ResourceItem) -> ContentPage:
        page = self._page(item)
        self.current_url = item.url
        return page

    # --- Navigation ---

    def start(self) -> ContentPage:
        """Première page du spine."""
        with self._lock:
            return self._go(self.publication.navigate_to_start())

    def navigate_adjacent(self, forward: bool) -> Optional[ContentPage]:
        """
        Page suivante ou précédente.

        Sans page courante, retourne la première page. Retourne None en fin
        de livre (ce n'est pas une erreur).
        """
        with self._lock:
            if self.current_url is None:
                return self._go(self.publication.navigate_to_start())
            dest = self.publication.navigate_from(self.current_url, forward)
            if dest is None:
                return None
            return self._go(dest)

    def navigate_to(self, url: str) -> ContentPage:
        with self._lock:
            item, _in_spine = self.publication.navigate_to(url)
            return self._go(item)

    # --- Ressources ---

    def get_resource(self, url: str) -> str:
        """
        Contenu d'une ressource, sous forme affichable.

        Images: URI ``data:`` base64. Texte: chaîne décodée. Autres types:
        chaîne vide.
        """
        with self._lock:
            item = self.publication.resource(url)
            content = self._archive.read_bytes(item.url)

        media_type = item.media_type
        if media_type.startswith("image/"):
            return resource_data_uri(content, media_type)
        if media_type.startswith("text/"):
            try:
                return content.decode(TEXT_ENCODING)
            except UnicodeDecodeError as e:
                raise EpubContentError(f"{item.url} is not {TEXT_ENCODING}") from e

        logger.warning("Cannot handle resource %s because of media type %s", url, media_type)
        return ""

    def get_toc(self) -> Tuple[str, str]:
        """
        Document de navigation EPUB3.

        Returns:
            Tuple (url, xhtml)

        Raises:
            NavigationMissingError: pas de document de navigation
        """
        with self._lock:
            nav = self.publication.nav()
            if nav is None:
                raise NavigationMissingError()
            return nav.url, self._archive.read_text(nav.url, TEXT_ENCODING)

    def details(self) -> BookDetails:
        """Détails affichables du livre ouvert."""
        with self._lock:
            publication = self.publication
            title = publication.title()
            display_title = title.value if title else os.path.basename(self.file_info.path)

            cover_data_uri = ""
            cover = publication.cover()
            if cover is not None:
                content = self._archive.read_bytes(cover.url)
                cover_data_uri = resource_data_uri(content, cover.media_type)

            return BookDetails(
                file_info=self.file_info,
                metadata=[item.to_dict() for item in publication.metadata()],
                spine_length=publication.spine_length,
                display_title=display_title,
                cover_data_uri=cover_data_uri,
                fingerprint=self.fingerprint,
                isbn=publication.isbn(),
            )
