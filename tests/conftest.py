import base64
import io
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from brandboost.main import app, get_asset_generator, get_session_store
from brandboost.services.asset_generator import AssetGenerator
from brandboost.services.data_uri import encode_data_uri
from brandboost.services.form_session import SessionStore


def make_png(size=(8, 8), color=(255, 0, 0, 0)) -> bytes:
    image = Image.new("RGBA", size, color)
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class FakeResponses:
    """Stands in for ``client.responses``; records every call."""

    def __init__(self, image_b64=None, text="", error=None):
        self.image_b64 = image_b64
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        output = [SimpleNamespace(type="message", content=[])]
        if self.image_b64:
            output.append(SimpleNamespace(type="image_generation_call", result=self.image_b64))
        return SimpleNamespace(output=output, output_text=self.text)


class FakeClient:
    def __init__(self, **kwargs):
        self.responses = FakeResponses(**kwargs)


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_data_uri(png_bytes):
    return encode_data_uri(png_bytes, "image/png")


@pytest.fixture
def generated_b64():
    return base64.b64encode(make_png(color=(0, 128, 255, 128))).decode("utf-8")


@pytest.fixture
def fake_client(generated_b64):
    return FakeClient(image_b64=generated_b64, text="Here is your asset.")


@pytest.fixture
def api(fake_client):
    clock = SimpleNamespace(now=1000.0)
    store = SessionStore(ttl=600, clock=lambda: clock.now)
    generator = AssetGenerator(client=fake_client)
    app.dependency_overrides[get_asset_generator] = lambda: generator
    app.dependency_overrides[get_session_store] = lambda: store
    with TestClient(app) as client:
        client.fake = fake_client
        client.store = store
        client.clock = clock
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def valid_request(png_data_uri):
    return {
        "logo": png_data_uri,
        "business_name": "Creative Inc.",
        "asset_type": "Flyer",
        "image_description": "Grand opening, 50% off sale",
    }
