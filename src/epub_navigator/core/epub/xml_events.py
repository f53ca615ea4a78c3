# epub_navigator/src/epub_navigator/core/epub/xml_events.py
"""
Flux d'événements XML.

Alimente un ``XMLParser`` lxml par morceaux et restitue, dans l'ordre du
document, des jetons ``start`` / ``end`` / ``text``. Le texte est réduit
(``strip``) et les textes vides sont omis.
"""

from types import MappingProxyType
from typing import BinaryIO, Iterator, List, Mapping, NamedTuple, Optional

from lxml import etree

from ...config import READ_CHUNK_SIZE

START = "start"
END = "end"
TEXT = "text"


class XmlEvent(NamedTuple):
    kind: str
    namespace: Optional[str] = None
    local_name: str = ""
    attrib: Mapping[str, str] = MappingProxyType({})
    text: str = ""

    def get(self, local_name: str, namespace: Optional[str] = None) -> Optional[str]:
        """Valeur d'un attribut, par nom local et espace de noms (aucun par défaut)."""
        key = f"{{{namespace}}}{local_name}" if namespace else local_name
        return self.attrib.get(key)

    def get_any(self, local_name: str) -> Optional[str]:
        """Valeur d'un attribut par nom local, quel que soit son espace de noms."""
        for key, value in self.attrib.items():
            if split_tag(key)[1] == local_name:
                return value
        return None


def split_tag(tag: str):
    """``{ns}local`` -> ``(ns, local)``"""
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return None, tag


class _EventCollector:
    """Cible lxml qui met les événements en file."""

    def __init__(self):
        self.events: List[XmlEvent] = []
        self._text: List[str] = []

    def _flush_text(self):
        if self._text:
            text = "".join(self._text).strip()
            self._text = []
            if text:
                self.events.append(XmlEvent(TEXT, text=text))

    def start(self, tag, attrib):
        self._flush_text()
        namespace, local = split_tag(tag)
        self.events.append(XmlEvent(START, namespace, local, dict(attrib)))

    def end(self, tag):
        self._flush_text()
        namespace, local = split_tag(tag)
        self.events.append(XmlEvent(END, namespace, local))

    def data(self, data):
        self._text.append(data)

    def close(self):
        self._flush_text()

    def drain(self) -> List[XmlEvent]:
        events, self.events = self.events, []
        return events


def iter_xml_events(reader: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[XmlEvent]:
    """
    Itère sur les événements XML lus depuis ``reader``.

    Raises:
        lxml.etree.LxmlError: document mal formé
        OSError: erreur d'E/S de la source, propagée telle quelle
    """
    collector = _EventCollector()
    parser = etree.XMLParser(target=collector, resolve_entities=False, no_network=True)

    started = False
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            break
        if not started:
            # Tolère les blancs avant la déclaration XML
            chunk = chunk.lstrip()
            if not chunk:
                continue
            started = True
        parser.feed(chunk)
        yield from collector.drain()

    if not started:
        return
    parser.close()
    yield from collector.drain()
