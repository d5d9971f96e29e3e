"""
Rendering Runtime
=================

Pillow-backed stand-in for a browser's font machinery: an append-only
registry of font families, text measurement with per-character fallback
across a family stack, and sample rendering.

Pillow does not fall back between fonts on its own, so each character is
assigned to the first family in the stack whose cmap covers it. Generic
families (``sans-serif`` and friends) resolve to a single fallback face that
takes every character left over.
"""

import io
import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from fontTools.ttLib import TTFont
from PIL import Image, ImageDraw, ImageFont

from ..core.exceptions import FontParseError
from ..core.models import PreviewRequest, TextDirection

logger = logging.getLogger(__name__)


@dataclass
class RegisteredFont:
    """A font family registered with the runtime."""

    family: str
    data: bytes
    codepoints: frozenset[int]
    faces: dict[int, ImageFont.FreeTypeFont] = field(default_factory=dict)

    def covers(self, char: str) -> bool:
        return ord(char) in self.codepoints


class PillowRenderingRuntime:
    """Measures and renders text with registered fonts and a generic fallback."""

    GENERIC_FAMILIES: ClassVar[frozenset[str]] = frozenset(
        {"sans-serif", "serif", "monospace", "cursive", "fantasy", "system-ui"}
    )

    def __init__(self, fallback_font_path: Path | None = None):
        self.fallback_font_path = fallback_font_path
        self._fonts: dict[str, RegisteredFont] = {}
        self._fallback_faces: dict[int, ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}
        self._lock = threading.RLock()

    @property
    def families(self) -> list[str]:
        with self._lock:
            return list(self._fonts)

    def is_registered(self, family: str) -> bool:
        with self._lock:
            return family in self._fonts

    def register(self, family: str, data: bytes) -> None:
        """
        Parse font data and register it under ``family``.

        Registration is append-only: a family that is already registered is
        left untouched.

        Raises:
            FontParseError: The data is not a font Pillow and fontTools can read
        """
        with self._lock:
            if family in self._fonts:
                logger.debug(f"Font family already registered: {family}")
                return

        try:
            cmap = TTFont(io.BytesIO(data), fontNumber=0, lazy=True).getBestCmap() or {}
            # Make sure FreeType accepts it too before exposing it
            face = ImageFont.truetype(io.BytesIO(data), 16)
        except Exception as e:
            raise FontParseError(family, e) from e

        font = RegisteredFont(family=family, data=data, codepoints=frozenset(cmap))
        font.faces[16] = face

        with self._lock:
            self._fonts.setdefault(family, font)
        logger.debug(f"Registered font family {family} ({len(font.codepoints)} codepoints)")

    def _face(self, family: str, size_px: int) -> ImageFont.FreeTypeFont:
        with self._lock:
            font = self._fonts[family]
            face = font.faces.get(size_px)
            if face is None:
                face = ImageFont.truetype(io.BytesIO(font.data), size_px)
                font.faces[size_px] = face
            return face

    def _fallback_face(self, size_px: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        with self._lock:
            face = self._fallback_faces.get(size_px)
            if face is None:
                if self.fallback_font_path is not None:
                    face = ImageFont.truetype(str(self.fallback_font_path), size_px)
                else:
                    face = ImageFont.load_default(size=size_px)
                self._fallback_faces[size_px] = face
            return face

    def _resolve(self, char: str, families: Sequence[str]) -> str | None:
        """Return the family that renders ``char``, or None for the fallback face."""
        with self._lock:
            for family in families:
                if family in self.GENERIC_FAMILIES:
                    return None
                font = self._fonts.get(family)
                if font is not None and font.covers(char):
                    return family
        return None

    def _runs(self, text: str, families: Sequence[str]) -> list[tuple[str | None, str]]:
        runs: list[tuple[str | None, str]] = []
        for char in text:
            family = self._resolve(char, families)
            if runs and runs[-1][0] == family:
                runs[-1] = (family, runs[-1][1] + char)
            else:
                runs.append((family, char))
        return runs

    def _face_for(self, family: str | None, size_px: int):
        if family is None:
            return self._fallback_face(size_px)
        return self._face(family, size_px)

    def measure_text(self, text: str, families: Sequence[str], size_px: int) -> float:
        """
        Measure the advance width of ``text`` rendered with a family stack.

        Args:
            text: Text to measure
            families: Family stack, most preferred first
            size_px: Font size in pixels

        Returns:
            Total advance width in pixels
        """
        # FreeType faces are shared between threads
        with self._lock:
            return sum(
                self._face_for(family, size_px).getlength(run)
                for family, run in self._runs(text, families)
            )

    def render_sample(
        self,
        family: str,
        request: PreviewRequest,
        fallback_family: str = "sans-serif",
        padding: int = 20,
    ) -> Image.Image:
        """
        Render the preview text with ``family`` onto a white image.

        Right-to-left requests are right-aligned; glyph shaping is left to
        Pillow's basic layout.
        """
        families = [family, fallback_family]
        runs = self._runs(request.text, families)
        width = self.measure_text(request.text, families, request.size_px)

        image_width = int(width) + 2 * padding
        image_height = int(request.size_px * 1.5) + 2 * padding
        image = Image.new("RGB", (max(image_width, 1), image_height), color="white")
        draw = ImageDraw.Draw(image)

        x = float(padding)
        if request.text_direction == TextDirection.RTL:
            x = image_width - padding - width

        for run_family, run in runs:
            face = self._face_for(run_family, request.size_px)
            draw.text((x, padding), run, font=face, fill=request.color)
            x += face.getlength(run)

        return image
