# epub_navigator/src/epub_navigator/core/epub/package.py
"""
Module d'analyse du document de package (OPF).

Responsabilité unique: lire ``<package>`` en flux et produire la version,
les métadonnées (avec leurs raffinements), le manifeste et le spine.
"""

import logging
from typing import BinaryIO, Dict, List, NamedTuple, Optional, Union

from lxml import etree

from ...config import DC_NS, OPF_NS, XML_NS
from ..errors import ManifestError, PackageDocError, SpineError
from ..models import (
    Itemref,
    MetadataItem,
    MetadataRefinement,
    Package,
    PropertiesValue,
    ResourceItem,
    Version,
)
from .xml_events import END, START, TEXT, XmlEvent, iter_xml_events, split_tag

logger = logging.getLogger(__name__)


# --- Valeur en attente: le prochain jeton texte complète l'item ouvert ---


class AwaitingPrimary(NamedTuple):
    index: int


class AwaitingRefinement(NamedTuple):
    target_id: str


PendingValue = Union[None, AwaitingPrimary, AwaitingRefinement]


def _properties(value: Optional[str]) -> Optional[PropertiesValue]:
    return PropertiesValue(value) if value is not None else None


class PackageParser:
    """
    Analyseur séquentiel du document de package.

    Les sous-analyseurs (metadata, manifest, spine) consomment le même
    itérateur d'événements jusqu'à leur balise fermante.
    """

    def __init__(self, reader: BinaryIO):
        self._events = iter_xml_events(reader)
        self._seen_package = False
        self.out = Package()

    def parse(self) -> Package:
        """
        Raises:
            PackageDocError: document invalide (ManifestError, SpineError pour
                les sections correspondantes)
            OSError: erreur d'E/S, propagée telle quelle
        """
        try:
            self._parse()
        except etree.LxmlError as e:
            raise PackageDocError(str(e)) from e

        if not self._seen_package:
            raise PackageDocError("no <package> element")

        logger.debug(
            "Parsed package: version=%s, %d metadata item(s), %d manifest item(s), %d itemref(s)",
            self.out.version.value,
            len(self.out.metadata),
            len(self.out.manifest),
            len(self.out.spine.itemrefs),
        )
        return self.out

    def _parse(self):
        for event in self._events:
            if event.kind == END and event.local_name == "package":
                return
            if event.kind != START:
                continue

            if event.local_name == "package":
                self._seen_package = True
                version = event.get("version")
                if version is None:
                    raise PackageDocError("<package> has no version")
                self.out.version = Version.EPUB3 if version.lower() == "3.0" else Version.EPUB2
            elif event.local_name == "metadata":
                self.out.metadata = self._parse_metadata()
            elif event.local_name == "manifest":
                self.out.manifest = self._parse_manifest()
            elif event.local_name == "spine":
                self.out.spine.toc = event.get("toc")
                self.out.spine.itemrefs = self._parse_spine()

    # --- <metadata> ---

    def _parse_metadata(self) -> List[MetadataItem]:
        metadata: List[MetadataItem] = []
        refinements: Dict[str, List[MetadataRefinement]] = {}
        legacy = self.out.version is Version.EPUB2

        pending: PendingValue = None
        for event in self._events:
            if event.kind == END:
                if event.local_name == "metadata":
                    break
                # Élément vide: pas de valeur
                pending = None
                continue

            if event.kind == TEXT:
                if isinstance(pending, AwaitingPrimary):
                    metadata[pending.index].value = event.text
                elif isinstance(pending, AwaitingRefinement):
                    refinements[pending.target_id][-1].value = event.text
                pending = None
                continue

            if event.namespace == DC_NS:
                metadata.append(self._dublin_core_item(event, legacy))
                pending = AwaitingPrimary(len(metadata) - 1)

            elif event.local_name == "meta":
                prop = event.get("property")
                if prop is None:
                    # <meta name= content=> XHTML1.1
                    name, content = event.get("name"), event.get("content")
                    if name is not None and content is not None:
                        metadata.append(MetadataItem(name, content, legacy=True))
                    continue
                if event.namespace != OPF_NS:
                    continue

                lang = event.get("lang", XML_NS)
                refines = event.get("refines")
                if refines is not None:
                    target_id = refines[1:] if refines.startswith("#") else refines
                    refinements.setdefault(target_id, []).append(
                        MetadataRefinement(prop, lang=lang, scheme=event.get("scheme"))
                    )
                    pending = AwaitingRefinement(target_id)
                else:
                    metadata.append(MetadataItem(prop, id=event.get("id"), lang=lang))
                    pending = AwaitingPrimary(len(metadata) - 1)

        for item in metadata:
            if item.id is None:
                continue
            refs = refinements.pop(item.id, None)
            if refs:
                item.refined.extend(refs)

        if refinements:
            logger.warning("Dropped refinements for unknown id(s): %s", ", ".join(sorted(refinements)))
        return metadata

    @staticmethod
    def _dublin_core_item(event: XmlEvent, legacy: bool) -> MetadataItem:
        item = MetadataItem(event.local_name)
        for key, value in event.attrib.items():
            namespace, local = split_tag(key)
            if local == "id":
                item.id = value
            elif local == "lang":
                item.lang = value
            elif legacy and namespace == OPF_NS:
                # opf:role, opf:file-as... approximés en raffinements EPUB3
                item.refined.append(MetadataRefinement(local, value))
        return item

    # --- <manifest> ---

    def _parse_manifest(self) -> Dict[str, ResourceItem]:
        manifest: Dict[str, ResourceItem] = {}
        for event in self._events:
            if event.kind == END and event.local_name == "manifest":
                break
            if event.kind != START or event.local_name != "item":
                continue

            item_id = event.get("id")
            href = event.get("href")
            media_type = event.get("media-type")
            if item_id is None or href is None or media_type is None:
                raise ManifestError(f"<item id={item_id!r}> lacks id, href or media-type")
            manifest[item_id] = ResourceItem(href, media_type, _properties(event.get("properties")))
        return manifest

    # --- <spine> ---

    def _parse_spine(self) -> List[Itemref]:
        itemrefs: List[Itemref] = []
        for event in self._events:
            if event.kind == END and event.local_name == "spine":
                break
            if event.kind != START or event.local_name != "itemref":
                continue

            idref = event.get("idref")
            if idref is None:
                raise SpineError("<itemref> lacks idref")
            linear = (event.get("linear") or "yes").strip().lower() != "no"
            itemrefs.append(Itemref(idref, _properties(event.get("properties")), linear))
        return itemrefs


def parse_package(reader: BinaryIO) -> Package:
    """Lit un document de package complet."""
    return PackageParser(reader).parse()
