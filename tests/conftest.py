import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage

from app import create_app
from config import Settings
from database import RecordStore, init_db, make_engine
from storage import ImageStore


def make_image_bytes(width=400, height=200, color=(200, 30, 30), fmt="JPEG") -> bytes:
    buf = io.BytesIO()
    PILImage.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def jpeg():
    return make_image_bytes()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        image_dir=tmp_path / "images",
        templates_dir=tmp_path / "templates",
        static_dir=tmp_path / "static",
    )


@pytest.fixture
def engine(settings):
    engine = make_engine(settings.database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def records(engine):
    return RecordStore(engine)


@pytest.fixture
def images(settings):
    return ImageStore(settings.image_dir)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def upload(client):
    """Upload bytes and return the new id (the last one listed)."""

    def _upload(tags, data):
        resp = client.post(
            "/upload",
            data={"tags": tags},
            files={"image": ("upload.jpg", data, "image/jpeg")},
        )
        assert resp.status_code == 200, resp.text
        return client.get("/images").json()[-1]["id"]

    return _upload
