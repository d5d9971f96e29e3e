"""
Glyph Coverage Prober
=====================

Decides whether a loaded font supplies glyphs for a preview text by
comparing rendered widths: once with the font in front of the generic
fallback, once with the fallback alone. If the font contributed any glyph
the widths differ.

This is a heuristic. A font whose glyphs happen to match the fallback's
advance widths exactly is reported as unsupported.
"""

import logging

from ..core.exceptions import ProberPrecondition
from ..core.models import CoverageVerdict, LoadState
from .registry import FontRegistryClient
from .runtime import PillowRenderingRuntime

logger = logging.getLogger(__name__)


class GlyphCoverageProber:
    def __init__(
        self,
        registry: FontRegistryClient,
        runtime: PillowRenderingRuntime,
        reference_size_px: int = 16,
        fallback_family: str = "sans-serif",
    ):
        self.registry = registry
        self.runtime = runtime
        self.reference_size_px = reference_size_px
        self.fallback_family = fallback_family

    def supports(self, font_id: str, text: str) -> bool:
        """
        Check whether ``font_id`` visibly renders ``text``.

        Empty text is never supported.

        Raises:
            ProberPrecondition: The font is not in the Loaded state
        """
        state = self.registry.get_state(font_id)
        if state is not LoadState.LOADED:
            raise ProberPrecondition(font_id, state.value)

        if not text:
            return False

        with_font = self.runtime.measure_text(
            text, [font_id, self.fallback_family], self.reference_size_px
        )
        fallback_only = self.runtime.measure_text(
            text, [self.fallback_family], self.reference_size_px
        )
        logger.debug(f"Probe {font_id}: {with_font} vs fallback {fallback_only}")
        return with_font != fallback_only

    def verdict(self, font_id: str, text: str) -> CoverageVerdict:
        """Coverage verdict for a font in any load state."""
        if self.registry.get_state(font_id) is not LoadState.LOADED:
            return CoverageVerdict.UNKNOWN
        if self.supports(font_id, text):
            return CoverageVerdict.SUPPORTED
        return CoverageVerdict.UNSUPPORTED
