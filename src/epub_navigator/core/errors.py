# epub_navigator/src/epub_navigator/core/errors.py
"""
Hiérarchie des erreurs EPUB.

Les erreurs structurelles (archive, container, document de package) sont
fatales pour une ouverture. Les erreurs d'E/S restent des ``OSError`` et
ne sont jamais converties, pour que l'appelant puisse réessayer.
"""

from typing import Optional


class EpubError(Exception):
    """Erreur de base, affichable telle quelle dans une interface."""

    message = "EPUB error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class ArchiveError(EpubError):
    message = "EPUB archive structure has issues"


class ContainerFileError(EpubError):
    message = "EPUB container file is missing or invalid"


class PackageDocError(EpubError):
    message = "EPUB package document is missing or invalid"


class ManifestError(PackageDocError):
    message = "EPUB package document has invalid manifest"


class SpineError(PackageDocError):
    message = "EPUB package document has invalid spine"


class InvalidHrefError(EpubError):
    message = "EPUB contains invalid href"


class EpubContentError(EpubError):
    message = "EPUB content error"


class NavigationMissingError(EpubError):
    message = "EPUB navigation file is missing"


class UrlNotFoundError(LookupError):
    """Aucune ressource à l'URL demandée. Erreur locale, récupérable."""

    def __init__(self, url: Optional[str] = None):
        self.url = url
        super().__init__(f"No resource at given URL: {url}" if url else "No resource at given URL")
