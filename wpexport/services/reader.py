"""WordPress WXR export reader.

Elements are matched by local name so the ``wp:`` namespace version of the
export (1.0, 1.1, 1.2) does not matter.  Every field access is explicit:
:meth:`ExportItem.text` returns an optional scalar and
:meth:`ExportItem.texts` returns an ordered sequence.
"""

import logging
from typing import List, NamedTuple, Optional, Union
from xml.etree import ElementTree

from wpexport.exceptions import ExportParseError, MalformedRecordError

logger = logging.getLogger(__name__)

_CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"


class CategoryEntry(NamedTuple):
    domain: str
    nicename: str
    name: str


class MetaEntry(NamedTuple):
    key: str
    value: Optional[str]


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _element_text(element: ElementTree.Element) -> str:
    return (element.text or "").strip()


class ExportItem:
    """Read-only view of one ``<item>`` in the export channel."""

    __slots__ = ("_element",)

    def __init__(self, element: ElementTree.Element) -> None:
        self._element = element

    def _children(self, name: str) -> List[ElementTree.Element]:
        return [child for child in self._element if _local_name(child.tag) == name]

    def text(self, name: str) -> Optional[str]:
        """Return the text of the first child called *name*, or *None* if absent."""
        children = self._children(name)
        return _element_text(children[0]) if children else None

    def texts(self, name: str) -> List[str]:
        return [_element_text(child) for child in self._children(name)]

    def require(self, name: str) -> str:
        """Like :meth:`text` but raise :class:`MalformedRecordError` when absent."""
        value = self.text(name)
        if value is None:
            raise MalformedRecordError(name, self.post_id)
        return value

    @property
    def post_id(self) -> Optional[str]:
        return self.text("post_id")

    @property
    def post_type(self) -> str:
        return self.text("post_type") or ""

    @property
    def status(self) -> str:
        return self.text("status") or ""

    @property
    def content(self) -> str:
        """Raw body markup from ``content:encoded`` (``excerpt:encoded`` is ignored)."""
        for child in self._element:
            if child.tag == f"{{{_CONTENT_NS}}}encoded":
                return child.text or ""
        return ""

    def categories(self) -> List[CategoryEntry]:
        entries: List[CategoryEntry] = []
        for child in self._children("category"):
            name = _element_text(child)
            entries.append(
                CategoryEntry(
                    domain=child.get("domain", ""),
                    nicename=child.get("nicename", name),
                    name=name,
                )
            )
        return entries

    def postmeta(self) -> Optional[List[MetaEntry]]:
        """Return the item's meta entries, or *None* when it has no postmeta block."""
        blocks = self._children("postmeta")
        if not blocks:
            return None
        entries: List[MetaEntry] = []
        for block in blocks:
            meta = ExportItem(block)
            key = meta.text("meta_key")
            if key is not None:
                entries.append(MetaEntry(key=key, value=meta.text("meta_value")))
        return entries


class Export:
    """The parsed export: every ``<item>`` of the first channel, in document order."""

    def __init__(self, items: List[ExportItem]) -> None:
        self.items = items

    def items_of_type(self, post_type: str) -> List[ExportItem]:
        return [item for item in self.items if item.post_type == post_type]


def read_export(xml_text: Union[str, bytes]) -> Export:
    """Parse WXR export markup into an :class:`Export`.

    Raises:
        ExportParseError: if the document is not well-formed XML or has no channel.
    """
    try:
        root = ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as exc:
        raise ExportParseError(f"Export is not well-formed XML: {exc}") from exc

    channel = next((el for el in root.iter() if _local_name(el.tag) == "channel"), None)
    if channel is None:
        raise ExportParseError("Export has no <channel> element.")

    items = [ExportItem(el) for el in channel if _local_name(el.tag) == "item"]
    logger.debug("Read %d items from export", len(items))
    return Export(items)
