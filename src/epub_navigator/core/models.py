from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional


class Version(Enum):
    """Dialecte du document de package."""

    EPUB2 = "2.0"
    EPUB3 = "3.0"


@dataclass(frozen=True)
class PropertiesValue:
    """Valeur brute d'un attribut ``properties`` (jetons séparés par des espaces)."""

    raw: str

    def has(self, token: str) -> bool:
        return token in self.raw.split()

    def __contains__(self, token: str) -> bool:
        return self.has(token)

    def __str__(self) -> str:
        return self.raw


@dataclass
class ResourceItem:
    """``<package><manifest><item>``, complété par son URL absolue."""

    href: str
    media_type: str
    properties: Optional[PropertiesValue] = None
    url: Optional[str] = None

    def has_property(self, token: str) -> bool:
        return self.properties is not None and self.properties.has(token)


@dataclass
class MetadataRefinement:
    """Sous-expression EPUB3 (``<meta refines=...>``) rattachée à un item."""

    property: str
    value: str = ""
    lang: Optional[str] = None
    scheme: Optional[str] = None


@dataclass
class MetadataItem:
    """
    Item de métadonnées principal.

    Suit le modèle EPUB3 (éléments dcterms et ``<meta>`` primaires). Pour un
    document EPUB2, les attributs OPF sont approximés en raffinements et les
    ``<meta name= content=>`` XHTML1.1 sont marqués ``legacy``.
    """

    property: str
    value: str = ""
    id: Optional[str] = None
    lang: Optional[str] = None
    refined: List[MetadataRefinement] = field(default_factory=list)
    legacy: bool = False

    def to_dict(self) -> Dict:
        """Représentation affichable; l'id reste interne."""
        return {
            "property": self.property,
            "value": self.value,
            "lang": self.lang,
            "refined": [
                {"property": r.property, "value": r.value, "lang": r.lang, "scheme": r.scheme}
                for r in self.refined
            ],
            "legacy": self.legacy,
        }


@dataclass
class Itemref:
    """``<package><spine><itemref>``"""

    idref: str
    properties: Optional[PropertiesValue] = None
    linear: bool = True


@dataclass
class Spine:
    """``<package><spine>``"""

    # Id de la ressource NCX (héritage EPUB2)
    toc: Optional[str] = None
    itemrefs: List[Itemref] = field(default_factory=list)


@dataclass
class Package:
    """``<package>`` tel que lu, avant assemblage en publication."""

    version: Version = Version.EPUB2
    metadata: List[MetadataItem] = field(default_factory=list)
    manifest: Dict[str, ResourceItem] = field(default_factory=dict)
    spine: Spine = field(default_factory=Spine)


class ResourceIndex(NamedTuple):
    """Position dans ``resources`` et, le cas échéant, dans le spine."""

    resource_index: int
    spine_index: Optional[int]


@dataclass
class FileInfo:
    path: str = ""
    size: int = 0
    created: int = 0  # ms, 0 si indisponible
    modified: int = 0  # ms, 0 si indisponible


@dataclass
class ContentPage:
    """Document de contenu prêt à être transmis au rendu."""

    url: str
    text: str
    media_type: str
    spine_index: Optional[int] = None


@dataclass
class BookDetails:
    """Modèle de données pour le panneau de détails d'un livre ouvert."""

    file_info: FileInfo
    metadata: List[Dict] = field(default_factory=list)
    spine_length: int = 0
    display_title: str = ""  # vide si aucun titre
    cover_data_uri: str = ""  # vide si aucune couverture
    fingerprint: str = ""
    isbn: str | None = None

    def to_dict(self) -> Dict:
        return {
            "fileInfo": {
                "path": self.file_info.path,
                "size": self.file_info.size,
                "created": self.file_info.created,
                "modified": self.file_info.modified,
            },
            "metadata": self.metadata,
            "spineLength": self.spine_length,
            "displayTitle": self.display_title,
            "coverBase64": self.cover_data_uri,
            "fingerprint": self.fingerprint,
            "isbn": self.isbn,
        }
