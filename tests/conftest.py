"""
Pytest configuration and fixtures for fontica tests.
"""

import io
import threading
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from fontica.core.exceptions import FontParseError
from fontica.core.models import FontCategory, FontRecord

SCENARIO_FILES = ["Roboto-Regular.ttf", "Merriweather-Regular.ttf", "Pacifico-Regular.ttf"]


def build_font_bytes(chars: str, advance: int = 1000, family: str = "Probe") -> bytes:
    """Build a minimal TrueType font covering ``chars`` with a fixed advance width."""
    unique_chars = sorted(set(chars))
    glyph_names = [f"uni{ord(char):04X}" for char in unique_chars]
    glyph_order = [".notdef", *glyph_names]

    glyphs = {}
    for name in glyph_order:
        pen = TTGlyphPen(None)
        pen.moveTo((100, 0))
        pen.lineTo((100, 700))
        pen.lineTo((advance - 100, 700))
        pen.lineTo((advance - 100, 0))
        pen.closePath()
        glyphs[name] = pen.glyph()

    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    builder.setupCharacterMap(
        {ord(char): name for char, name in zip(unique_chars, glyph_names, strict=True)}
    )
    builder.setupGlyf(glyphs)
    builder.setupHorizontalMetrics({name: (advance, 100) for name in glyph_order})
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    builder.setupNameTable({"familyName": family, "styleName": "Regular"})
    builder.setupPost()

    buffer = io.BytesIO()
    builder.save(buffer)
    return buffer.getvalue()


class FakeRuntime:
    """Rendering runtime with per-family coverage and fixed advance widths."""

    GENERIC_FAMILIES = frozenset({"sans-serif", "serif", "monospace"})

    def __init__(self, fallback_advance: float = 10.0):
        self.fallback_advance = fallback_advance
        self.coverage: dict[str, set[str]] = {}
        self.advances: dict[str, float] = {}
        self.registered: list[str] = []
        self._lock = threading.Lock()

    def define(self, family: str, chars: str, advance: float) -> None:
        self.coverage[family] = set(chars)
        self.advances[family] = advance

    def register(self, family: str, data: bytes) -> None:
        if data == b"corrupt":
            raise FontParseError(family, "not a font")
        with self._lock:
            if family not in self.registered:
                self.registered.append(family)

    def is_registered(self, family: str) -> bool:
        return family in self.registered

    def measure_text(self, text, families, size_px) -> float:
        width = 0.0
        for char in text:
            advance = self.fallback_advance
            for family in families:
                if family in self.GENERIC_FAMILIES:
                    break
                if family in self.registered and char in self.coverage.get(family, set()):
                    advance = self.advances[family]
                    break
            width += advance
        return width


class FakeFetcher:
    """Fetcher returning canned bytes, optionally blocking until released."""

    def __init__(self, responses: dict | None = None, gate: threading.Event | None = None):
        self.responses = responses or {}
        self.gate = gate
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> bytes:
        with self._lock:
            self.calls.append(url)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        response = self.responses.get(url, b"font-data")
        if isinstance(response, Exception):
            raise response
        return response


def make_record(font_id: str, category: FontCategory = FontCategory.SANS_SERIF) -> FontRecord:
    return FontRecord(
        id=font_id,
        display_name=font_id,
        resource_url=f"/fonts/{font_id}-Regular.ttf",
        category=category,
    )


@pytest.fixture
def fonts_dir(tmp_path) -> Path:
    """Directory holding the three scenario fonts plus a non-font file."""
    directory = tmp_path / "fonts"
    directory.mkdir()
    for name in SCENARIO_FILES:
        (directory / name).write_bytes(b"\x00\x01\x00\x00")
    (directory / "README.txt").write_text("not a font")
    return directory


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()
