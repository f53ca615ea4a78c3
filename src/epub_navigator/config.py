# epub_navigator/src/epub_navigator/config.py
"""
Configuration et constantes pour EPUB Navigator
"""

import os
import re

# ---------- Adressage interne ----------
BASE_URL = "epub:/"
CONTAINER_PATH = "META-INF/container.xml"

# ---------- Espaces de noms ----------
DC_NS = "http://purl.org/dc/elements/1.1/"
OPF_NS = "http://www.idpf.org/2007/opf"
XML_NS = "http://www.w3.org/XML/1998/namespace"

# ---------- Types MIME ----------
MIMETYPE_XHTML = "application/xhtml+xml"
MIMETYPE_SVG = "image/svg+xml"
CONTENT_MIMETYPES = (MIMETYPE_XHTML, MIMETYPE_SVG)

# ---------- Lecture ----------
READ_CHUNK_SIZE = 64 * 1024
FINGERPRINT_BYTES = 1 << 20  # 1 MiB
TEXT_ENCODING = "utf-8"

# ---------- Expressions régulières ----------
ISBN_RE = re.compile(r"(?:(?:ISBN(?:-1[03])?:?\s*)?)(97[89][ -]?)?[0-9][0-9 -]{8,}[0-9Xx]")

# ---------- Configuration logging ----------
LOG_DIR_ENV_VAR = "EPUB_NAVIGATOR_LOG_DIR"
LOG_DIR = os.getenv(LOG_DIR_ENV_VAR, "logs")
LOG_FILENAME = "epub_navigator.log"
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 5
LOG_ENCODING = "utf-8"


# ---------- Initialisation des dossiers ----------
def ensure_directories():
    """Crée les dossiers nécessaires s'ils n'existent pas."""
    os.makedirs(LOG_DIR, exist_ok=True)
