# tests/conftest.py
"""
Configuration globale pour pytest.

Fournit des fixtures réutilisables pour tous les tests: constructeurs
d'archives EPUB en mémoire et livres d'exemple (EPUB 3, EPUB 2, minimal).
"""

import io
import zipfile
from typing import Dict, Iterable, Optional, Tuple, Union

import pytest
from PIL import Image

Content = Union[str, bytes]


def container_xml(opf_path: str = "OEBPS/content.opf") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
        "<rootfiles>"
        f'<rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>'
        "</rootfiles>"
        "</container>"
    )


def opf_xml(
    items: Iterable[Tuple[str, str, str, str]],
    spine: Iterable[str],
    metadata: str = "<dc:title>Untitled Test</dc:title>",
    toc_id: Optional[str] = None,
) -> str:
    """Document OPF: items = (id, href, media-type, properties)."""
    manifest = "".join(
        f'<item id="{i}" href="{h}" media-type="{m}"'
        + (f' properties="{p}"' if p else "")
        + "/>"
        for i, h, m, p in items
    )
    itemrefs = "".join(f'<itemref idref="{idref}"/>' for idref in spine)
    toc_attr = f' toc="{toc_id}"' if toc_id else ""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="bookid">'
        f'<metadata xmlns:dc="http://purl.org/dc/elements/1.1/">{metadata}</metadata>'
        f"<manifest>{manifest}</manifest>"
        f"<spine{toc_attr}>{itemrefs}</spine>"
        "</package>"
    )


def xhtml(title: str, body: str) -> str:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">'
        f"<head><title>{title}</title></head><body>{body}</body></html>"
    )


def build_zip(files: Dict[str, Content], mimetype: bool = True) -> bytes:
    """Archive ZIP en mémoire; 'mimetype' stocké en premier comme dans un vrai EPUB."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        if mimetype:
            zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        for name, content in files.items():
            zf.writestr(name, content, compress_type=zipfile.ZIP_DEFLATED)
    return buf.getvalue()


def png_bytes(size=(10, 10), color=(200, 30, 30)) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def make_epub():
    """Retourne un constructeur: (fichiers, chemin OPF ou None) -> octets EPUB."""

    def _make(files: Dict[str, Content], opf_path: Optional[str] = "OEBPS/content.opf") -> bytes:
        all_files: Dict[str, Content] = {}
        if opf_path is not None:
            all_files["META-INF/container.xml"] = container_xml(opf_path)
        all_files.update(files)
        return build_zip(all_files)

    return _make


@pytest.fixture
def make_opf():
    return opf_xml


@pytest.fixture
def make_xhtml():
    return xhtml


@pytest.fixture
def cover_png() -> bytes:
    return png_bytes((400, 600), (10, 120, 200))


@pytest.fixture
def pic_png() -> bytes:
    return png_bytes((10, 10))


# --- Livre EPUB 3 ---

EPUB3_NAV = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">'
    "<head><title>Navigation</title></head><body>"
    '<nav epub:type="landmarks"><ol><li><a href="chapter2.xhtml">Landmark</a></li></ol></nav>'
    '<nav epub:type="toc" id="toc"><h1>Contents</h1><ol>'
    '<li><a href="chapter1.xhtml">Chapter   One</a>'
    '<ol><li><a href="chapter1.xhtml#s1">Section 1.1</a></li></ol>'
    "</li>"
    '<li><a href="chapter2.xhtml">Chapter Two</a></li>'
    "</ol></nav>"
    "</body></html>"
)

EPUB3_NCX = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1"><navMap>'
    '<navPoint id="n1" playOrder="1"><navLabel><text>NCX One</text></navLabel>'
    '<content src="Text/chapter1.xhtml"/></navPoint>'
    "</navMap></ncx>"
)

EPUB3_METADATA = (
    "<dc:title>Sample Book</dc:title>"
    "<dc:creator>Jane Doe</dc:creator>"
    "<dc:creator>John Roe</dc:creator>"
    "<dc:language>en</dc:language>"
    '<dc:identifier id="bookid">urn:isbn:9780306406157</dc:identifier>'
    "<dc:publisher>Test Press</dc:publisher>"
    "<dc:subject>Fiction</dc:subject>"
    '<meta property="dcterms:modified">2024-01-01T00:00:00Z</meta>'
    '<meta refines="#bookid" property="identifier-type">isbn</meta>'
    '<meta name="cover" content="cover-img"/>'
)


@pytest.fixture
def epub3_bytes(make_epub, cover_png, pic_png) -> bytes:
    """
    Livre EPUB 3: nav dans OEBPS/Text (répertoire différent de l'OPF),
    NCX concurrent, manifeste dans un ordre différent du spine,
    chapitre 2 stocké avec une casse différente.
    """
    opf = opf_xml(
        items=[
            ("ch2", "Text/chapter2.xhtml", "application/xhtml+xml", ""),
            ("ch1", "Text/chapter1.xhtml", "application/xhtml+xml", ""),
            ("nav", "Text/nav.xhtml", "application/xhtml+xml", "nav"),
            ("ncx", "toc.ncx", "application/x-dtbncx+xml", ""),
            ("pic", "Images/pic%20one.png", "image/png", ""),
            ("cover-img", "Images/cover.png", "image/png", "cover-image"),
            ("css", "Styles/style.css", "text/css", ""),
        ],
        spine=["ch1", "ch2"],
        metadata=EPUB3_METADATA,
        toc_id="ncx",
    )
    chapter1 = xhtml(
        "Chapter One",
        '<h1 id="s1">Chapter One</h1><p>Hello &amp; welcome.</p>'
        '<img src="../Images/pic%20one.png" alt=""/>',
    )
    chapter2 = xhtml("Chapter Two", "<h1>Chapter Two</h1><p>Second chapter.</p>")
    return make_epub(
        {
            "OEBPS/content.opf": opf,
            "OEBPS/Text/chapter1.xhtml": chapter1,
            "OEBPS/TEXT/CHAPTER2.xhtml": chapter2,
            "OEBPS/Text/nav.xhtml": EPUB3_NAV,
            "OEBPS/toc.ncx": EPUB3_NCX,
            "OEBPS/Images/pic one.png": pic_png,
            "OEBPS/Images/cover.png": cover_png,
            "OEBPS/Styles/style.css": "body { margin: 0 }",
        }
    )


# --- Livre EPUB 2 ---

EPUB2_NCX = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">'
    "<head/><docTitle><text>Legacy</text></docTitle><navMap>"
    '<navPoint id="p1" playOrder="1"><navLabel><text>Part One</text></navLabel>'
    '<content src="../chapter%201.xhtml#start"/>'
    '<navPoint id="p1-1" playOrder="2"><navLabel><text>First</text></navLabel>'
    '<content src="../chapter%201.xhtml#first"/>'
    '<navPoint id="p1-1-1" playOrder="3"><navLabel><text>Deep</text></navLabel>'
    '<content src="../chapter%201.xhtml#deep"/></navPoint>'
    "</navPoint>"
    "</navPoint>"
    '<navPoint id="p2" playOrder="4"><navLabel><text>Part Two</text></navLabel>'
    '<content src="../chapter2.xhtml"/></navPoint>'
    "</navMap></ncx>"
)


@pytest.fixture
def epub2_bytes(make_epub, cover_png, pic_png) -> bytes:
    """
    Livre EPUB 2: NCX seul (dans OPS/nav/), noms de fichiers encodés,
    pointeur de couverture vers une page XHTML, idref inconnu dans le spine.
    """
    opf = opf_xml(
        items=[
            ("ch1", "chapter%201.xhtml", "application/xhtml+xml", ""),
            ("ch2", "chapter2.xhtml", "application/xhtml+xml", ""),
            ("toc", "nav/toc.ncx", "application/x-dtbncx+xml", ""),
            ("cover-page", "cover.xhtml", "application/xhtml+xml", ""),
            ("img0", "images/a.png", "image/png", ""),
            ("img1", "images/Front-COVER.png", "image/png", ""),
        ],
        spine=["cover-page", "ch1", "missing", "ch2"],
        metadata=(
            "<dc:title>Legacy Book</dc:title>"
            "<dc:creator>Old Author</dc:creator>"
            '<meta name="cover" content="cover-page"/>'
        ),
        toc_id="toc",
    )
    return make_epub(
        {
            "OPS/package.opf": opf,
            "OPS/chapter 1.xhtml": xhtml("One", "<p>Chapter one text.</p>"),
            "OPS/chapter2.xhtml": xhtml("Two", "<p>Chapter two text.</p>"),
            "OPS/cover.xhtml": xhtml("Cover", '<img src="images/Front-COVER.png"/>'),
            "OPS/nav/toc.ncx": EPUB2_NCX,
            "OPS/images/a.png": pic_png,
            "OPS/images/Front-COVER.png": cover_png,
        },
        opf_path="OPS/package.opf",
    )


# --- Livre minimal (sans navigation) ---


@pytest.fixture
def bare_epub_bytes(make_epub) -> bytes:
    """Livre sans nav ni NCX, OPF à la racine de l'archive."""
    opf = opf_xml(
        items=[
            ("a", "a.xhtml", "application/xhtml+xml", ""),
            ("b", "sub/b.xhtml", "application/xhtml+xml", ""),
        ],
        spine=["a", "b"],
    )
    return make_epub(
        {
            "content.opf": opf,
            "a.xhtml": xhtml("A", "<p>A</p>"),
            "sub/b.xhtml": xhtml("B", "<p>B</p>"),
        },
        opf_path="content.opf",
    )


@pytest.fixture
def epub3_path(tmp_path, epub3_bytes):
    path = tmp_path / "sample.epub"
    path.write_bytes(epub3_bytes)
    return path
