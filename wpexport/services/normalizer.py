"""Rendering records as Markdown files: frontmatter and output paths."""

from typing import List

from wpexport.models.config import RunConfig
from wpexport.models.record import Record
from wpexport.services.images import get_filename_from_url


def make_frontmatter(record: Record) -> str:
    """Return a YAML frontmatter block for use in Markdown files.

    Unset fields and empty lists are left out.
    """
    lines = ["---"]
    for key, value in record.frontmatter.model_dump(by_alias=True, exclude_none=True).items():
        if isinstance(value, list):
            if value:
                lines.append(f"{key}:")
                lines.extend(f'  - "{_escape_yaml(str(item))}"' for item in value)
        else:
            lines.append(f'{key}: "{_escape_yaml(str(value))}"')
    lines.append("---")
    return "\n".join(lines)


def render_markdown(record: Record) -> str:
    frontmatter = make_frontmatter(record)
    return f"{frontmatter}\n\n{record.content}\n" if record.content else f"{frontmatter}\n"


def _post_basename(record: Record, config: RunConfig) -> str:
    slug = record.meta.slug or record.meta.id
    if config.prefix_date and record.meta.published is not None:
        return f"{record.meta.published:%Y-%m-%d}-{slug}"
    return slug


def record_path(record: Record, config: RunConfig) -> str:
    """Relative path of the Markdown file for *record*, grouped by post type."""
    basename = _post_basename(record, config)
    if config.post_folders:
        return f"{record.meta.type}/{basename}/index.md"
    return f"{record.meta.type}/{basename}.md"


def image_paths(record: Record, config: RunConfig) -> List[str]:
    """Relative paths where the record's images are expected to be saved."""
    if config.post_folders:
        folder = f"{record.meta.type}/{_post_basename(record, config)}/images"
    else:
        folder = f"{record.meta.type}/images"
    return [f"{folder}/{get_filename_from_url(url)}" for url in record.meta.image_urls]


def _escape_yaml(value: str) -> str:
    """Escape characters that would break inline double-quoted YAML strings."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
