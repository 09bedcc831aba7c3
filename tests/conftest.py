"""Shared fixtures: in-memory database, temp storage, fake Google clients."""

from __future__ import annotations

import io
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from google.cloud import vision
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from picplate.clients import get_genai_client, get_vision_client
from picplate.db import Base, get_db
from picplate.main import app
from picplate.settings import settings


def make_image(size=(100, 100), color=(200, 120, 40), fmt="PNG", mode="RGB") -> bytes:
    img = Image.new(mode, size, color)
    # a gradient so untouched pixels are distinguishable
    px = img.load()
    if mode == "RGB":
        for x in range(size[0]):
            px[x, 0] = (x % 256, 10, 10)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def face_annotation(x0, y0, x1, y1, joy=vision.Likelihood.VERY_UNLIKELY) -> vision.FaceAnnotation:
    return vision.FaceAnnotation(
        bounding_poly=vision.BoundingPoly(vertices=[
            vision.Vertex(x=x0, y=y0), vision.Vertex(x=x1, y=y0),
            vision.Vertex(x=x1, y=y1), vision.Vertex(x=x0, y=y1),
        ]),
        joy_likelihood=joy,
    )


class FakeVisionClient:
    def __init__(self, response: vision.AnnotateImageResponse | None = None, faces=None, error: Exception | None = None):
        self.response = response or vision.AnnotateImageResponse()
        self.faces = faces or []
        self.error = error
        self.annotate_requests = []
        self.face_requests = []

    def annotate_image(self, request):
        self.annotate_requests.append(request)
        if self.error:
            raise self.error
        return self.response

    def face_detection(self, image, **kwargs):
        self.face_requests.append(image)
        if self.error:
            raise self.error
        return vision.AnnotateImageResponse(face_annotations=self.faces)


class FakeModels:
    def __init__(self, text="A recipe", images=None, error: Exception | None = None):
        self.text = text
        self.images = images if images is not None else []
        self.error = error
        self.content_calls = []
        self.image_calls = []

    async def generate_content(self, **kwargs):
        self.content_calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)

    async def generate_images(self, **kwargs):
        self.image_calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(generated_images=[
            SimpleNamespace(image=SimpleNamespace(image_bytes=data, mime_type=mime)) for data, mime in self.images
        ])


class FakeGenAIClient:
    def __init__(self, **kwargs):
        self.models = FakeModels(**kwargs)
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture
def sample_png() -> bytes:
    return make_image()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def client(session_factory, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "FACE_DETECTOR", "vision")

    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_vision_client] = lambda: None
    app.dependency_overrides[get_genai_client] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_clients():
    """Install fake Google clients for the duration of a test."""

    def _install(vision_client=None, genai_client=None):
        app.dependency_overrides[get_vision_client] = lambda: vision_client
        app.dependency_overrides[get_genai_client] = lambda: genai_client

    return _install
