"""XML text <-> generic tree mapping backed by lxml.

The generic tree is a plain dict:

- attributes are keyed with ``@_`` and their qualified name
  (``@_xsi:type``, ``@_kaiord:timeCreated``),
- namespace declarations introduced on an element appear as ``@_xmlns`` or
  ``@_xmlns:<prefix>``,
- child elements are keyed by local name when they live in the default
  namespace, ``prefix:Local`` otherwise; repeated children become a list,
- leaf text becomes a scalar (numeric strings become numbers) and text next to
  attributes or children is kept under ``#text``.

Building a tree back to text resolves prefixes against the declarations in
scope, so any subtree captured from a parsed document can be re-emitted as is.
"""

from __future__ import annotations

import re
from typing import Any

from lxml import etree

from kaiord.tcx.constants import ATTR_PREFIX, TEXT_KEY

XML_NS = "http://www.w3.org/XML/1998/namespace"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

_INT_RE = re.compile(r"^-?(0|[1-9]\d*)$")
_FLOAT_RE = re.compile(r"^-?(0|[1-9]\d*)\.\d+$")
_XMLNS_KEY = f"{ATTR_PREFIX}xmlns"
_DECLARATION_RE = re.compile(rb"^\s*<\?xml[^>]*\?>")

# Subtrees kept verbatim by the codecs; they carry every prefix they use
SELF_CONTAINED = frozenset({"Extensions"})


def parse_xml(text: str | bytes) -> dict[str, Any]:
    """Parse XML text into a generic tree.

    Bytes are decoded by lxml using the document's own encoding declaration.
    Text is already decoded, so its declaration is dropped before parsing.

    Args:
        text: XML document text or raw file bytes

    Returns:
        Dict with a single key, the root element name

    Raises:
        ValueError: If the text is empty
        lxml.etree.XMLSyntaxError: If the text is not well-formed XML
    """
    if not text or not text.strip():
        raise ValueError("XML document is empty")
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
    root = etree.fromstring(to_xml_bytes(text), parser)
    return {_qualified_name(root.tag, root.nsmap): _element_to_value(root, {})}


def build_xml(tree: dict[str, Any], pretty_print: bool = True) -> str:
    """Serialize a generic tree into XML text with an XML declaration.

    Raises:
        ValueError: If the tree does not hold exactly one root element or uses
            an undeclared namespace prefix
    """
    roots = [key for key in tree if not key.startswith(ATTR_PREFIX) and not key.startswith("?")]
    if len(roots) != 1:
        raise ValueError(f"XML tree must hold exactly one root element, found {len(roots)}")
    name = roots[0]
    value = tree[name]
    if isinstance(value, list):
        raise ValueError("XML root element cannot repeat")
    root = _build_element(None, name, value, {})
    body = etree.tostring(root, pretty_print=pretty_print, encoding="unicode")
    return XML_DECLARATION + body


def to_xml_bytes(text: str | bytes) -> bytes:
    """Return bytes lxml can parse without misreading the declared encoding."""
    if isinstance(text, bytes):
        return text.strip()
    return _DECLARATION_RE.sub(b"", text.strip().encode("utf-8"), count=1).lstrip()


def as_list(value: Any) -> list[Any]:
    """Normalize a child value that may be a single node or a list of nodes."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def as_number(value: Any) -> int | float | None:
    """Return ``value`` as a number, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return value
    if isinstance(value, dict):
        return as_number(value.get(TEXT_KEY))
    if isinstance(value, str):
        return _coerce_number(value.strip())
    return None


def local_name(key: str) -> str:
    """Strip the namespace prefix from a tree key."""
    return key.rsplit(":", 1)[-1]


def coerce_scalar(text: str) -> str | int | float:
    number = _coerce_number(text)
    return text if number is None else number


def _coerce_number(text: str) -> int | float | None:
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return None


def _qualified_name(tag: str, nsmap: dict[str | None, str], attribute: bool = False) -> str:
    qname = etree.QName(tag)
    namespace = qname.namespace
    if namespace is None:
        return qname.localname
    if namespace == XML_NS:
        return f"xml:{qname.localname}"
    prefixes = [prefix for prefix, uri in nsmap.items() if uri == namespace]
    # Unprefixed attributes never pick up the default namespace
    if not attribute and None in prefixes:
        return qname.localname
    named = sorted(prefix for prefix in prefixes if prefix)
    if named:
        return f"{named[0]}:{qname.localname}"
    return qname.localname


def _element_to_value(element: etree._Element, parent_nsmap: dict[str | None, str]) -> Any:
    node: dict[str, Any] = {}
    nsmap = element.nsmap

    for prefix, uri in nsmap.items():
        if parent_nsmap.get(prefix) != uri:
            key = _XMLNS_KEY if prefix is None else f"{_XMLNS_KEY}:{prefix}"
            node[key] = uri

    for name, raw in element.attrib.items():
        node[ATTR_PREFIX + _qualified_name(name, nsmap, attribute=True)] = coerce_scalar(raw)

    has_children = False
    for child in element:
        if not isinstance(child.tag, str):
            # comments and processing instructions
            continue
        has_children = True
        key = _qualified_name(child.tag, child.nsmap)
        value = _element_to_value(child, nsmap)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]

    if etree.QName(element).localname in SELF_CONTAINED:
        _declare_inherited_prefixes(node, element)

    text = (element.text or "").strip()
    if not node and not has_children:
        return coerce_scalar(text) if text else ""
    if text:
        node[TEXT_KEY] = coerce_scalar(text)
    return node


def _declare_inherited_prefixes(node: dict[str, Any], element: etree._Element) -> None:
    used: set[str] = set()
    for descendant in element.iter():
        if not isinstance(descendant.tag, str):
            continue
        names = [_qualified_name(descendant.tag, descendant.nsmap)]
        names += [_qualified_name(name, descendant.nsmap, attribute=True) for name in descendant.attrib]
        used.update(name.split(":", 1)[0] for name in names if ":" in name)
    used.discard("xml")

    for prefix in sorted(used):
        key = f"{_XMLNS_KEY}:{prefix}"
        if key not in node and prefix in element.nsmap:
            node[key] = element.nsmap[prefix]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _resolve(name: str, scope: dict[str | None, str], attribute: bool = False) -> str:
    if ":" in name:
        prefix, local = name.split(":", 1)
        if prefix == "xml":
            return f"{{{XML_NS}}}{local}"
        if prefix not in scope:
            raise ValueError(f"Undeclared namespace prefix '{prefix}' in '{name}'")
        return f"{{{scope[prefix]}}}{local}"
    if attribute or scope.get(None) is None:
        return name
    return f"{{{scope[None]}}}{name}"


def _build_element(
    parent: etree._Element | None,
    name: str,
    value: Any,
    scope: dict[str | None, str],
) -> etree._Element:
    declared: dict[str | None, str] = {}
    if isinstance(value, dict):
        for key, uri in value.items():
            if key == _XMLNS_KEY:
                declared[None] = str(uri)
            elif key.startswith(f"{_XMLNS_KEY}:"):
                declared[key[len(_XMLNS_KEY) + 1 :]] = str(uri)
    inner_scope = {**scope, **declared}

    tag = _resolve(name, inner_scope)
    nsmap = declared or None
    if parent is None:
        element = etree.Element(tag, nsmap=nsmap)
    else:
        element = etree.SubElement(parent, tag, nsmap=nsmap)

    if not isinstance(value, dict):
        if value is not None and value != "":
            element.text = _format_value(value)
        return element

    for key, child in value.items():
        if key == _XMLNS_KEY or key.startswith(f"{_XMLNS_KEY}:"):
            continue
        if key.startswith(ATTR_PREFIX):
            if child is None:
                continue
            attr_name = _resolve(key[len(ATTR_PREFIX) :], inner_scope, attribute=True)
            element.set(attr_name, _format_value(child))
        elif key == TEXT_KEY:
            element.text = _format_value(child)
        else:
            for item in as_list(child):
                _build_element(element, key, item, inner_scope)
    return element
