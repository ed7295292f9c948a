import io
from collections.abc import Callable
from datetime import date

import pytest
from PIL import Image

from receiptvault.domain.models import ReceiptImage
from receiptvault.extraction.clock import Clock


class FakeClock(Clock):
    """Deterministic clock: time only moves when something sleeps."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _encode(width: int, height: int, image_format: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buf, format=image_format)
    return buf.getvalue()


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def image_bytes() -> Callable[..., bytes]:
    """Factory for encoded blank pages: image_bytes(width, height, format)."""

    def factory(width: int = 40, height: int = 60, image_format: str = "PNG") -> bytes:
        return _encode(width, height, image_format)

    return factory


@pytest.fixture()
def png_bytes() -> bytes:
    return _encode(40, 60, "PNG")


@pytest.fixture()
def receipt_image(png_bytes: bytes) -> ReceiptImage:
    return ReceiptImage(data=png_bytes, width=40, height=60, content_type="image/png")


@pytest.fixture()
def fixed_today() -> date:
    return date(2024, 3, 15)
