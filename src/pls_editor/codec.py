"""PLS XML codec for pls-editor.

Decodes a W3C pronunciation-lexicon document into a :class:`Lexicon` and
encodes one back. Only ``lexeme`` children with ``grapheme``, ``alias`` and
``phoneme`` are understood; other content is dropped on decode.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lxml import etree

from pls_editor.exceptions import (
    EncodeError,
    MalformedXmlError,
    MissingLexiconRootError,
)
from pls_editor.models import DEFAULT_LANGUAGE, Lexicon, LexiconEntry

logger = logging.getLogger(__name__)

PLS_NS = "http://www.w3.org/2005/01/pronunciation-lexicon"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XML_NS = "http://www.w3.org/XML/1998/namespace"
SCHEMA_LOCATION = (
    f"{PLS_NS} "
    "http://www.w3.org/TR/2007/CR-pronunciation-lexicon-20071212/pls.xsd"
)

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
INDENT = "    "

_LANG_ATTR = f"{{{XML_NS}}}lang"


def _pls(tag: str) -> str:
    return f"{{{PLS_NS}}}{tag}"


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def _parser(encoding: str | None = None) -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False, no_network=True, encoding=encoding
    )


def _local_name(element: etree._Element) -> str | None:
    # Comments and processing instructions have a non-string tag
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def _children(element: etree._Element, name: str) -> list[etree._Element]:
    """Child elements with the given local name, always as a list."""
    return [child for child in element if _local_name(child) == name]


def _text_content(element: etree._Element) -> str:
    return etree.tostring(
        element, method="text", encoding="unicode", with_tail=False
    )


def _first_text(element: etree._Element, name: str) -> str:
    found = _children(element, name)
    return _text_content(found[0]) if found else ""


def _decode_lexeme(lexeme: etree._Element) -> LexiconEntry:
    return LexiconEntry(
        graphemes=tuple(_text_content(g) for g in _children(lexeme, "grapheme")),
        alias=_first_text(lexeme, "alias"),
        phoneme=_first_text(lexeme, "phoneme"),
    )


def decode(xml_text: str | bytes) -> Lexicon:
    """Parse PLS XML into a :class:`Lexicon`.

    Raises:
        MalformedXmlError: The input is empty or not well-formed.
        MissingLexiconRootError: The root element is not ``lexicon``.
    """
    # Text input is already decoded; its declared encoding must not apply
    if isinstance(xml_text, str):
        data, encoding = xml_text.encode("utf-8"), "utf-8"
    else:
        data, encoding = xml_text, None
    if not data or not data.strip():
        raise MalformedXmlError("Document is empty")

    try:
        root = etree.fromstring(data, _parser(encoding))
    except (etree.XMLSyntaxError, ValueError) as e:
        raise MalformedXmlError(f"Failed to parse XML: {e}") from e

    if root is None or _local_name(root) != "lexicon":
        tag = None if root is None else _local_name(root)
        raise MissingLexiconRootError(
            f"Expected <lexicon> root element, found {tag!r}"
        )

    language = root.get(_LANG_ATTR) or DEFAULT_LANGUAGE
    entries = tuple(_decode_lexeme(lx) for lx in _children(root, "lexeme"))
    logger.debug(f"Decoded {len(entries)} lexeme(s), language {language!r}")
    return Lexicon(language=language, entries=entries)


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def _build_tree(language: str, entries: Sequence[LexiconEntry]) -> etree._Element:
    root = etree.Element(_pls("lexicon"), nsmap={None: PLS_NS, "xsi": XSI_NS})
    root.set("version", "1.0")
    root.set(f"{{{XSI_NS}}}schemaLocation", SCHEMA_LOCATION)
    root.set("alphabet", "ipa")
    root.set(_LANG_ATTR, language or DEFAULT_LANGUAGE)

    for idx, entry in enumerate(entries):
        if not isinstance(entry, LexiconEntry):
            raise EncodeError(
                f"Entry #{idx} is {type(entry).__name__}, not LexiconEntry"
            )
        lexeme = etree.SubElement(root, _pls("lexeme"))
        for grapheme in entry.graphemes:
            etree.SubElement(lexeme, _pls("grapheme")).text = grapheme
        if entry.alias:
            etree.SubElement(lexeme, _pls("alias")).text = entry.alias
        if entry.phoneme:
            etree.SubElement(lexeme, _pls("phoneme")).text = entry.phoneme

    return root


def encode(language: str, entries: Sequence[LexiconEntry]) -> str:
    """Serialize entries to PLS XML text.

    Output is deterministic: the same input always yields the same string.

    Raises:
        EncodeError: ``entries`` is not a list/tuple of entries, holds text
            XML cannot represent, or serialization produced nothing.
    """
    if not isinstance(entries, (list, tuple)):
        raise EncodeError(
            f"Entries must be a list or tuple, got {type(entries).__name__}"
        )

    try:
        root = _build_tree(language, entries)
        etree.indent(root, space=INDENT)
        body = etree.tostring(root, encoding="unicode")
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Failed to build XML: {e}") from e

    if not body or not body.strip():
        raise EncodeError("Generated XML is empty")

    return f"{XML_DECLARATION}\n{body}\n"


def encode_lexicon(lexicon: Lexicon) -> str:
    """Serialize a :class:`Lexicon` (shorthand for :func:`encode`)."""
    return encode(lexicon.language, lexicon.entries)
