"""Startup reconciliation between the records table and the thumbnails on disk."""
import logging

from database import RecordStore
from storage import ImageStore
from thumbnails import ThumbnailGenerator

logger = logging.getLogger(__name__)


def backfill(records: RecordStore, images: ImageStore, generator: ThumbnailGenerator) -> int:
    """Generate every missing thumbnail, one at a time. Returns how many were made.

    The first failure propagates: the server must not start with records
    that have no thumbnail.
    """
    generated = 0
    ids = records.all_ids()
    for image_id in ids:
        if images.thumbnail_exists(image_id):
            continue
        logger.info("Backfilling thumbnail for id %s", image_id)
        generator.generate(image_id)
        generated += 1
    logger.info("Backfill done: %d of %d records needed a thumbnail", generated, len(ids))
    return generated
