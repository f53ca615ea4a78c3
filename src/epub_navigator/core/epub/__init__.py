# epub_navigator/src/epub_navigator/core/epub/__init__.py
"""
Module EPUB - Lecture du conteneur et du document de package.

Ce module ouvre une archive OCF, localise et analyse le document de
package, puis assemble une publication navigable.
"""

# Exports publics
from .archive import EpubArchive
from .container import parse_container_file
from .package import PackageParser, parse_package
from .publication import Publication

__all__ = [
    "EpubArchive",
    "PackageParser",
    "Publication",
    "parse_container_file",
    "parse_package",
]
