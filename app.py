"""
Thumbnail Server – image upload and thumbnail service (FastAPI + SQLModel)

Quick start
-----------
1) python -m venv .venv && source .venv/bin/activate  # or .venv\\Scripts\\activate on Windows
2) pip install -e .
3) echo "DATABASE_URL=sqlite:///./thumbnails.db" > .env
4) python app.py  # auto-writes templates/static and DB, then backfills thumbnails
5) Open http://localhost:8000 → upload an image → search by tag

Notes
-----
• Originals and thumbnails live under ./images as {id}.jpg and {id}_thumb.jpg.
• Thumbnails are generated on worker threads after the upload returns, so
  /thumb/{id} may answer 404 for a moment; /thumb/{id}/status tells you when it's ready.
• Every missing thumbnail is regenerated at startup before requests are served.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from jinja2 import Environment, FileSystemLoader, select_autoescape

from backfill import backfill
from config import Settings, configure_logging
from database import RecordStore, init_db, make_engine
from errors import register_error_handlers
from routes import (
    image,
    index,
    list_images,
    search,
    thumbnail,
    thumbnail_status,
    upload,
)
from storage import ImageStore
from templates_static import ensure_assets
from thumbnails import ThumbnailGenerator, ThumbnailQueue

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the stores together, backfill thumbnails, then serve."""
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    engine = make_engine(settings.database_url)
    try:
        init_db(engine)
        records = RecordStore(engine)
        images = ImageStore(settings.image_dir)
        generator = ThumbnailGenerator(images, settings.thumb_size)

        # Runs before the first request; a failure here aborts startup.
        backfill(records, images, generator)

        queue = ThumbnailQueue(generator)
        app.state.records = records
        app.state.images = images
        app.state.thumbnails = queue
        logger.info("Serving images from %s", settings.image_dir)
        try:
            yield
        finally:
            queue.shutdown(wait=True)
    finally:
        engine.dispose()
    logger.info("Shut down cleanly")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Nothing touches the database until startup."""
    settings = settings or Settings()

    app = FastAPI(title="Thumbnail Server", lifespan=lifespan)
    app.state.settings = settings

    # Ensure templates and static files exist
    ensure_assets(settings.templates_dir, settings.static_dir)
    app.state.jinja = Environment(
        loader=FileSystemLoader(str(settings.templates_dir)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")
    register_error_handlers(app)

    # Routes
    app.get("/", response_class=HTMLResponse)(index)
    app.post("/upload", response_class=HTMLResponse)(upload)
    app.get("/image/{image_id}")(image)
    app.get("/thumb/{image_id}/status")(thumbnail_status)
    app.get("/thumb/{image_id}")(thumbnail)
    app.get("/images")(list_images)
    app.post("/search", response_class=HTMLResponse)(search)
    return app


app = create_app()


if __name__ == "__main__":
    # Allow `python app.py 8000`
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8000
    print(f"→ Open http://localhost:{port}")
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=port, log_config=None)
