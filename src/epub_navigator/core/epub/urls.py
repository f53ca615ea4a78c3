# epub_navigator/src/epub_navigator/core/epub/urls.py
"""
Résolution des URL internes ``epub:``.

``urllib.parse.urljoin`` ne résout les références relatives que pour les
schémas qu'il connaît; ``epub`` n'en fait pas partie. Les ressources de
l'archive sont donc adressées avec ces helpers, qui produisent une forme
canonique (chemin normalisé, percent-encoding stable) commune aux noms
d'entrées zip et aux href du manifeste.
"""

import posixpath
from urllib.parse import quote, urlsplit

_PATH_SAFE = "/%!$&'()*+,;=:@-._~"
_QUERY_SAFE = _PATH_SAFE + "?"


def _normalize_path(path: str) -> str:
    """Réduit les segments ``.`` et ``..`` sans jamais remonter au-dessus de ``/``."""
    trailing = path.endswith("/") or posixpath.basename(path) in (".", "..")
    segments = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)

    normalized = "/" + "/".join(segments)
    if trailing and segments:
        normalized += "/"
    return normalized


def _compose(scheme: str, path: str, query: str = "", fragment: str = "") -> str:
    url = f"{scheme}:{quote(path, safe=_PATH_SAFE)}"
    if query:
        url += "?" + quote(query, safe=_QUERY_SAFE)
    if fragment:
        url += "#" + quote(fragment, safe=_QUERY_SAFE)
    return url


def join_url(base: str, reference: str) -> str:
    """
    Résout ``reference`` par rapport à l'URL ``base``.

    Args:
        base: URL absolue (ex: ``epub:/EPUB/package.opf``)
        reference: href relatif, enraciné (``/x``) ou absolu

    Returns:
        URL absolue canonique

    Raises:
        ValueError: si la référence n'est pas une URL valide
    """
    ref = urlsplit(reference)
    if ref.scheme:
        # Lien externe (http:, mailto:...), conservé tel quel
        return reference
    if ref.netloc:
        raise ValueError(f"network-path reference not allowed: {reference!r}")

    base_parts = urlsplit(base)
    if ref.path.startswith("/"):
        path = ref.path
    elif ref.path:
        path = posixpath.dirname(base_parts.path) + "/" + ref.path
    else:
        path = base_parts.path

    query = ref.query if (ref.path or ref.query) else base_parts.query
    return _compose(base_parts.scheme, _normalize_path(path), query, ref.fragment)


def normalize_url(url: str) -> str:
    """Forme canonique d'une clé de recherche (le fragment est ignoré)."""
    parts = urlsplit(url)
    if not parts.scheme or parts.netloc:
        raise ValueError(f"not an absolute resource URL: {url!r}")
    return _compose(parts.scheme, _normalize_path(parts.path), parts.query)
