# tests/conftest.py
"""
Configuration globale pour pytest.

Fournit des fixtures réutilisables pour tous les tests: documents de
package EPUB2/EPUB3 et archives construites en mémoire.
"""

import io
import struct
import zipfile
from typing import Callable, Dict, Optional, Union

import pytest

CONTAINER_XML = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

EPUB3_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="pub-id" xml:lang="en">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <meta property="dcterms:modified" refines="#pub-id">2024</meta>
    <dc:identifier id="pub-id">urn:isbn:978-0-306-40615-7</dc:identifier>
    <dc:title id="title">Philosophical Works</dc:title>
    <meta refines="#title" property="title-type">main</meta>
    <dc:creator id="creator">René Descartes</dc:creator>
    <meta refines="#creator" property="role" scheme="marc:relators">aut</meta>
    <dc:language>en</dc:language>
    <meta property="dcterms:modified" xml:lang="en">2024-01-01T00:00:00Z</meta>
    <meta refines="#ghost" property="role">nobody</meta>
  </metadata>
  <manifest>
    <item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav"/>
    <item id="c1" href="text/chapter1.xhtml" media-type="application/xhtml+xml"/>
    <item id="c2" href="text/chapter2.xhtml" media-type="application/xhtml+xml"/>
    <item id="css" href="styles/main.css" media-type="text/css"/>
    <item id="cover" href="images/cover.png" media-type="image/png" properties="cover-image"/>
  </manifest>
  <spine>
    <itemref idref="c1"/>
    <itemref idref="c2"/>
    <itemref idref="nav" linear="no"/>
  </spine>
</package>
"""

EPUB2_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
    <dc:title>Old Book</dc:title>
    <dc:creator opf:role="aut" opf:file-as="Doe, Jane">Jane Doe</dc:creator>
    <dc:identifier id="bookid" opf:scheme="ISBN">0-306-40615-2</dc:identifier>
    <meta name="cover" content="cover-img"/>
  </metadata>
  <manifest>
    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>
    <item id="cover-img" href="cover.jpg" media-type="image/jpeg"/>
    <item id="ch1" href="ch1.html" media-type="application/xhtml+xml"/>
    <item id="ch2" href="ch2.html" media-type="application/xhtml+xml"/>
  </manifest>
  <spine toc="ncx">
    <itemref idref="ch1"/>
    <itemref idref="ch2"/>
  </spine>
</package>
"""

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16


def _xhtml(title: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">'
        f"<head><title>{title}</title></head><body><h1>{title}</h1></body></html>"
    )


def build_epub(
    files: Dict[str, Union[str, bytes]],
    package_path: Optional[str] = "EPUB/package.opf",
) -> io.BytesIO:
    """Construit une archive EPUB en mémoire."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        if package_path is not None:
            zf.writestr("META-INF/container.xml", CONTAINER_XML.format(path=package_path))
        for name, content in files.items():
            zf.writestr(name, content)
    buffer.seek(0)
    return buffer


# Décalages dans un en-tête du répertoire central
_CD_SIGNATURE = b"PK\x01\x02"
_CD_FIELDS = {"flag_bits": (8, "<H"), "compress_type": (10, "<H"), "CRC": (16, "<I")}


def patch_zip_entry(data: bytes, name: str, **fields: int) -> io.BytesIO:
    """
    Réécrit des champs de l'entrée ``name`` dans le répertoire central.

    Permet de simuler une archive corrompue (CRC faux, entrée chiffrée,
    méthode de compression inconnue).
    """
    raw = bytearray(data)
    encoded = name.encode("utf-8")
    start = raw.find(_CD_SIGNATURE)
    while start != -1:
        name_length = struct.unpack_from("<H", raw, start + 28)[0]
        if bytes(raw[start + 46 : start + 46 + name_length]) == encoded:
            for field, value in fields.items():
                offset, fmt = _CD_FIELDS[field]
                struct.pack_into(fmt, raw, start + offset, value)
            return io.BytesIO(bytes(raw))
        start = raw.find(_CD_SIGNATURE, start + 4)
    raise KeyError(name)


@pytest.fixture
def make_epub() -> Callable[..., io.BytesIO]:
    """Retourne la fabrique d'archives EPUB en mémoire."""
    return build_epub


@pytest.fixture
def corrupt_entry() -> Callable[..., io.BytesIO]:
    """Retourne la fonction de corruption d'une entrée zip."""
    return patch_zip_entry


@pytest.fixture
def epub3_files() -> Dict[str, Union[str, bytes]]:
    """Contenu d'un EPUB3 complet (package à EPUB/package.opf)."""
    return {
        "EPUB/package.opf": EPUB3_OPF,
        "EPUB/nav.xhtml": _xhtml("Contents"),
        "EPUB/text/chapter1.xhtml": _xhtml("Chapter 1"),
        "EPUB/text/chapter2.xhtml": _xhtml("Chapter 2"),
        "EPUB/styles/main.css": "body { margin: 0; }",
        "EPUB/images/cover.png": PNG_BYTES,
    }


@pytest.fixture
def epub2_files() -> Dict[str, Union[str, bytes]]:
    """Contenu d'un EPUB2 (package à OEBPS/content.opf)."""
    return {
        "OEBPS/content.opf": EPUB2_OPF,
        "OEBPS/toc.ncx": "<ncx/>",
        "OEBPS/cover.jpg": JPEG_BYTES,
        "OEBPS/ch1.html": _xhtml("One"),
        "OEBPS/ch2.html": _xhtml("Two"),
    }


@pytest.fixture
def epub3_stream(epub3_files) -> io.BytesIO:
    return build_epub(epub3_files)


@pytest.fixture
def epub2_stream(epub2_files) -> io.BytesIO:
    return build_epub(epub2_files, package_path="OEBPS/content.opf")


@pytest.fixture
def epub3_path(tmp_path, epub3_stream) -> str:
    """Écrit l'EPUB3 d'exemple sur disque."""
    path = tmp_path / "descartes.epub"
    path.write_bytes(epub3_stream.getvalue())
    return str(path)
