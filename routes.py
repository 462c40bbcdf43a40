"""FastAPI routes for the thumbnail server."""
import logging
from typing import Optional

from fastapi import Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, HTMLResponse
from starlette.datastructures import UploadFile

from errors import MalformedRequest

logger = logging.getLogger(__name__)

UPLOAD_PARTS = {"tags", "image"}
REDIRECT_DELAY_SECONDS = 1


def render(request: Request, name: str, **ctx) -> HTMLResponse:
    """Render template with context."""
    template = request.app.state.jinja.get_template(name)
    ctx.setdefault("title", "Thumbnail Server")
    return HTMLResponse(template.render(**ctx))


def index(request: Request):
    """Landing page with the upload and search forms."""
    return render(request, "index.html")


async def upload(request: Request):
    """Store an uploaded image and queue its thumbnail."""
    async with request.form() as form:
        names = [name for name, _ in form.multi_items()]
        unexpected = sorted(set(names) - UPLOAD_PARTS)
        if unexpected:
            raise MalformedRequest(f"Unexpected form parts: {', '.join(unexpected)}")
        missing = sorted(UPLOAD_PARTS - set(names))
        if missing:
            raise MalformedRequest(f"Missing form parts: {', '.join(missing)}")
        if len(names) != len(UPLOAD_PARTS):
            raise MalformedRequest("Each form part must be sent exactly once")

        tags = form["tags"]
        image_part = form["image"]
        if not isinstance(tags, str):
            raise MalformedRequest("'tags' must be a text field")
        if not isinstance(image_part, UploadFile):
            raise MalformedRequest("'image' must be a file")
        data = await image_part.read()

    state = request.app.state
    image_id = await run_in_threadpool(state.records.insert, tags)
    await run_in_threadpool(state.images.write_original, image_id, data)
    state.thumbnails.submit(image_id)
    logger.info("Stored image %s (%d bytes, tags=%r)", image_id, len(data), tags)

    return render(
        request,
        "uploaded.html",
        title="Uploaded",
        image_id=image_id,
        url="/",
        delay=REDIRECT_DELAY_SECONDS,
    )


def image(request: Request, image_id: int):
    """Serve original image."""
    path = request.app.state.images.original_path(image_id)
    return FileResponse(path, media_type="image/jpeg", filename=f"{image_id}.jpg")


def thumbnail(request: Request, image_id: int):
    """Serve thumbnail; 404 until its generation has finished."""
    path = request.app.state.images.thumbnail_path(image_id)
    return FileResponse(path, media_type="image/jpeg", filename=f"{image_id}_thumb.jpg")


def thumbnail_status(request: Request, image_id: int):
    """Whether the thumbnail is pending, ready, failed or missing."""
    state = request.app.state
    state.records.get(image_id)
    return {"id": image_id, "status": state.thumbnails.status(image_id)}


def list_images(request: Request):
    """All records as JSON, ordered by id."""
    records = request.app.state.records.list_all()
    return [{"id": r.id, "tags": r.tags} for r in records]


def search(request: Request, tags: Optional[str] = Form(None)):
    """HTML fragment linking every record whose tags contain the query."""
    query = tags or ""
    records = request.app.state.records.search(query)
    return render(request, "search.html", records=records, query=query)
