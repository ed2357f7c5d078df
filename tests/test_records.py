"""Tests for record extraction in wpexport.services.records."""

from datetime import datetime, timezone
from urllib.parse import quote, unquote

import pytest

from wpexport.models.config import RunConfig
from wpexport.services.reader import read_export
from wpexport.services.records import (
    collect_posts,
    get_categories,
    get_post_cover_image_id,
    get_post_date,
    get_post_slug,
    get_tags,
)
from wxr_builder import make_export, make_item


def _item(**kwargs):
    return read_export(make_export(make_item(**kwargs))).items[0]


class TestPostDate:
    def test_default_is_date_only(self):
        item = _item(pub_date="Wed, 01 Jan 2020 12:00:00 +0000")
        assert get_post_date(item, RunConfig()) == "2020-01-01"

    def test_include_time_with_date(self):
        item = _item(pub_date="Wed, 01 Jan 2020 12:00:00 +0000")
        config = RunConfig(include_time_with_date=True)
        assert get_post_date(item, config) == "2020-01-01T12:00:00.000Z"

    def test_custom_format_takes_precedence(self):
        item = _item(pub_date="Wed, 01 Jan 2020 12:00:00 +0000")
        config = RunConfig(custom_date_formatting="%d/%m/%Y", include_time_with_date=True)
        assert get_post_date(item, config) == "01/01/2020"

    def test_offset_is_converted_to_utc(self):
        item = _item(pub_date="Wed, 01 Jan 2020 23:30:00 -0500")
        assert get_post_date(item, RunConfig()) == "2020-01-02"

    def test_unreadable_date_renders_empty(self):
        item = _item(pub_date="not a date")
        assert get_post_date(item, RunConfig()) == ""


class TestPostSlug:
    def test_percent_escapes_are_decoded(self):
        assert get_post_slug(_item(name="caf%c3%a9-cr%c3%a8me")) == "café-crème"

    def test_plain_slug_unchanged(self):
        assert get_post_slug(_item(name="hello-world")) == "hello-world"

    @pytest.mark.parametrize("name", ["caf%c3%a9", "%e2%9c%93-done", "plain"])
    def test_decode_then_encode_is_idempotent(self, name):
        slug = get_post_slug(_item(name=name))
        assert slug == unquote(name)
        assert get_post_slug(_item(name=quote(slug))) == slug


class TestCoverImageId:
    def test_thumbnail_id_is_found(self):
        item = _item(postmeta=[("_edit_last", "1"), ("_thumbnail_id", "6")])
        assert get_post_cover_image_id(item) == "6"

    def test_no_postmeta_block(self):
        assert get_post_cover_image_id(_item()) is None

    def test_postmeta_without_thumbnail(self):
        assert get_post_cover_image_id(_item(postmeta=[("_edit_last", "1")])) is None


class TestCategoriesAndTags:
    _ENTRIES = [
        ("category", "news", "News"),
        ("category", "uncategorized", "Uncategorized"),
        ("category", "caf%c3%a9", "Café"),
        ("category", "news", "News"),
        ("post_tag", "tips", "Tips"),
        ("post_tag", "how-to", "How To"),
    ]

    def test_categories_filtered_by_domain_and_exclusions(self):
        item = _item(categories=self._ENTRIES)
        assert get_categories(item, RunConfig()) == ["news", "café"]

    def test_custom_category_exclusions(self):
        item = _item(categories=self._ENTRIES)
        config = RunConfig(filter_categories=["news"])
        assert get_categories(item, config) == ["uncategorized", "café"]

    def test_tags(self):
        assert get_tags(_item(categories=self._ENTRIES)) == ["tips", "how-to"]

    def test_no_category_entries(self):
        item = _item()
        assert get_categories(item, RunConfig()) == []
        assert get_tags(item) == []


class TestCollectPosts:
    def test_builds_record(self):
        export = read_export(
            make_export(
                make_item(
                    post_id="10",
                    title="Hello",
                    name="hello",
                    creator="jane",
                    content="<h2>Intro</h2>",
                    postmeta=[("_thumbnail_id", "6")],
                    categories=[("category", "news", "News")],
                )
            )
        )
        records, skipped = collect_posts(export, ["post"], RunConfig())

        assert skipped == []
        record = records[0]
        assert record.meta.id == "10"
        assert record.meta.slug == "hello"
        assert record.meta.cover_image_id == "6"
        assert record.meta.type == "post"
        assert record.meta.image_urls == []
        assert record.meta.published == datetime(2020, 1, 1, 12, tzinfo=timezone.utc)
        assert record.frontmatter.title == "Hello"
        assert record.frontmatter.date == "2020-01-01"
        assert record.frontmatter.categories == ["news"]
        assert record.frontmatter.wp_id == "10"
        assert record.frontmatter.wp_type == "post"
        assert record.frontmatter.wp_slug == "hello"
        assert record.frontmatter.creator == "jane"
        assert record.frontmatter.start_datetime is None
        assert "## Intro" in record.content

    def test_trash_and_draft_are_ignored(self):
        export = read_export(
            make_export(
                make_item(post_id="1", status="publish"),
                make_item(post_id="2", status="trash"),
                make_item(post_id="3", status="draft"),
                make_item(post_id="4", status="private"),
            )
        )
        records, _ = collect_posts(export, ["post"], RunConfig())
        assert [r.meta.id for r in records] == ["1", "4"]

    def test_malformed_record_is_skipped_and_reported(self):
        export = read_export(
            make_export(
                make_item(post_id="1"),
                make_item(post_id=None),
                make_item(post_id="3", creator=None),
                make_item(post_id="4"),
            )
        )
        records, skipped = collect_posts(export, ["post"], RunConfig())

        assert [r.meta.id for r in records] == ["1", "4"]
        assert [exc.field for exc in skipped] == ["post_id", "creator"]

    def test_records_grouped_by_type_in_type_order(self):
        export = read_export(
            make_export(
                make_item(post_id="1", post_type="post"),
                make_item(post_id="2", post_type="page"),
                make_item(post_id="3", post_type="post"),
            )
        )
        records, _ = collect_posts(export, ["page", "post"], RunConfig())
        assert [(r.meta.type, r.meta.id) for r in records] == [
            ("page", "2"),
            ("post", "1"),
            ("post", "3"),
        ]
