"""Selection of the post types a run will process."""

from typing import List

from wpexport.services.reader import Export

DEFAULT_POST_TYPE = "post"

# Built-in WordPress types that never become standalone documents
EXCLUDED_POST_TYPES = frozenset(
    {
        "attachment",
        "revision",
        "nav_menu_item",
        "custom_css",
        "customize_changeset",
    }
)


def get_post_types(export: Export, include_other_types: bool = False) -> List[str]:
    """Return the post types to process, in first-seen export order.

    Without *include_other_types* only plain ``post`` items are processed.
    Otherwise every type declared in the export is returned (pages and custom
    post types included) minus :data:`EXCLUDED_POST_TYPES`.
    """
    if not include_other_types:
        return [DEFAULT_POST_TYPE]

    types: List[str] = []
    for item in export.items:
        post_type = item.post_type
        if post_type and post_type not in EXCLUDED_POST_TYPES and post_type not in types:
            types.append(post_type)
    return types
