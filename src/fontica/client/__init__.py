"""Font Preview Client
===================

Client-side font loading, glyph-coverage probing and preview session state.
"""

from .fetchers import FontResourceFetcher
from .prober import GlyphCoverageProber
from .registry import FontRegistryClient
from .runtime import PillowRenderingRuntime
from .session import PreviewSession, PreviewView, compute_view

__all__ = [
    "FontRegistryClient",
    "FontResourceFetcher",
    "GlyphCoverageProber",
    "PillowRenderingRuntime",
    "PreviewSession",
    "PreviewView",
    "compute_view",
]
