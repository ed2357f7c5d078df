"""Builds small WordPress WXR documents for tests."""

from typing import Iterable, Optional, Tuple
from xml.sax.saxutils import escape, quoteattr

WP_NS = "http://wordpress.org/export/1.2/"

_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<rss version="2.0"'
    ' xmlns:excerpt="http://wordpress.org/export/1.2/excerpt/"'
    ' xmlns:content="http://purl.org/rss/1.0/modules/content/"'
    ' xmlns:dc="http://purl.org/dc/elements/1.1/"'
    ' xmlns:wp="{wp_ns}">\n'
    "<channel>\n<title>Test site</title>\n<link>https://site.test</link>\n"
)
_FOOTER = "</channel>\n</rss>\n"


def make_item(
    post_id: Optional[str] = "10",
    post_type: str = "post",
    status: str = "publish",
    title: str = "Hello",
    name: str = "hello",
    creator: Optional[str] = "admin",
    pub_date: str = "Wed, 01 Jan 2020 12:00:00 +0000",
    link: str = "https://site.test/hello/",
    content: str = "",
    categories: Iterable[Tuple[str, str, str]] = (),
    postmeta: Optional[Iterable[Tuple[str, str]]] = None,
    attachment_url: Optional[str] = None,
    parent: str = "0",
) -> str:
    parts = [
        "<item>",
        f"<title>{escape(title)}</title>",
        f"<link>{escape(link)}</link>",
        f"<pubDate>{pub_date}</pubDate>",
    ]
    if creator is not None:
        parts.append(f"<dc:creator><![CDATA[{creator}]]></dc:creator>")
    parts.append(f"<content:encoded><![CDATA[{content}]]></content:encoded>")
    parts.append("<excerpt:encoded><![CDATA[]]></excerpt:encoded>")
    if post_id is not None:
        parts.append(f"<wp:post_id>{post_id}</wp:post_id>")
    parts += [
        f"<wp:post_name><![CDATA[{name}]]></wp:post_name>",
        f"<wp:status><![CDATA[{status}]]></wp:status>",
        f"<wp:post_parent>{parent}</wp:post_parent>",
        f"<wp:post_type><![CDATA[{post_type}]]></wp:post_type>",
    ]
    if attachment_url is not None:
        parts.append(f"<wp:attachment_url><![CDATA[{attachment_url}]]></wp:attachment_url>")
    for domain, nicename, label in categories:
        parts.append(
            f"<category domain={quoteattr(domain)} nicename={quoteattr(nicename)}>"
            f"<![CDATA[{label}]]></category>"
        )
    if postmeta is not None:
        for key, value in postmeta:
            parts.append(
                "<wp:postmeta>"
                f"<wp:meta_key><![CDATA[{key}]]></wp:meta_key>"
                f"<wp:meta_value><![CDATA[{value}]]></wp:meta_value>"
                "</wp:postmeta>"
            )
    parts.append("</item>")
    return "\n".join(parts)


def make_export(*items: str, wp_ns: str = WP_NS) -> str:
    return _HEADER.format(wp_ns=wp_ns) + "\n".join(items) + "\n" + _FOOTER
