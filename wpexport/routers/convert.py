"""Conversion endpoint: turns an uploaded WordPress export into Markdown records."""

import io
import json
import logging
import zipfile
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from wpexport.exceptions import ExportParseError
from wpexport.models.config import RunConfig
from wpexport.models.convert_request import ConvertRequest
from wpexport.models.result import ConversionResult
from wpexport.services.events import EventSource, StaticEventSource
from wpexport.services.normalizer import image_paths, record_path, render_markdown
from wpexport.services.pipeline import parse_export

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.post(
    "/convert",
    response_model=ConversionResult,
    summary="Convert a WordPress export to Markdown records",
    description=(
        "Parses a WXR export, builds one Markdown record per post, enriches "
        "event posts and attaches every discovered image to its post.\n\n"
        "Pass `?format=zip` to download a compressed archive containing one "
        "Markdown file per post plus a JSON index of the images to fetch."
    ),
)
@limiter.limit("5/minute")
async def convert_export(
    request: Request,
    body: ConvertRequest,
    format: str = Query(default="json", description="Output format: 'json' or 'zip'."),
) -> ConversionResult | StreamingResponse:
    """Convert the export in *body* using the run options it carries."""
    config = body.options
    logger.info(
        "Convert request received",
        extra={
            "export_bytes": len(body.export_xml),
            "include_other_types": config.include_other_types,
            "offline_events": body.events is not None,
        },
    )

    event_source: Optional[EventSource] = None
    if body.events is not None:
        event_source = StaticEventSource(body.events)

    try:
        result = await parse_export(body.export_xml, config, event_source=event_source)
    except ExportParseError as exc:
        logger.warning("Rejected unreadable export: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))

    if format == "zip":
        return _build_zip_response(result, config)

    return result


def _build_zip_response(result: ConversionResult, config: RunConfig) -> StreamingResponse:
    """Return a :class:`StreamingResponse` containing a ZIP archive.

    The archive holds:
    - ``index.json`` – one entry per post with its file path and images.
    - ``<type>/<slug>/index.md`` – one Markdown file per post.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        index = {
            "post_types": result.post_types,
            "posts_by_type": result.posts_by_type,
            "posts": [
                {
                    "id": record.meta.id,
                    "type": record.meta.type,
                    "path": record_path(record, config),
                    "images": [
                        {"url": url, "path": path}
                        for url, path in zip(record.meta.image_urls, image_paths(record, config))
                    ],
                }
                for record in result.records
            ],
        }
        zf.writestr("index.json", json.dumps(index, ensure_ascii=False, indent=2))

        for record in result.records:
            zf.writestr(record_path(record, config), render_markdown(record))

    buffer.seek(0)
    return StreamingResponse(
        buffer,
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="wordpress-export.zip"'},
    )
