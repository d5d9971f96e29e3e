"""
Font Naming
===========

Derives catalog identity from font file names: the stable id, the display
name, the style variant, and the category from an ordered keyword rule table.

File names are the only metadata the catalog relies on. The rule table stands
in for the family/style information a font binary would carry.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from ..core.models import FontCategory

DEFAULT_VARIANT = "regular"

# Google Fonts style axis tags, e.g. "Inconsolata[wdth,wght]"
_AXES_RE = re.compile(r"\[[^\]]*\]$")

_VARIABLE_RE = re.compile(r"[-_ ]+variablefont(?:_[a-z0-9,]+)?$", re.IGNORECASE)

_STYLE_RE = re.compile(
    r"[-_ ]+(?P<style>"
    r"(?:extra|ultra|semi|demi)?(?:thin|light|regular|book|normal|medium|bold|black|heavy)"
    r"(?:italic|oblique)?"
    r"|italic|oblique"
    r")$",
    re.IGNORECASE,
)

_SEPARATORS_RE = re.compile(r"[-_\s]+")

# "RobotoMono" -> "Roboto Mono", "PTSerif" -> "PT Serif"
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@dataclass(frozen=True)
class ParsedFontName:
    """Identity derived from a single font file name."""

    font_id: str
    display_name: str
    variant: str


@dataclass(frozen=True)
class CategoryRule:
    """One entry of the category rule table."""

    category: FontCategory
    keywords: tuple[str, ...]
    excludes: tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        """Match keywords at word starts only, so "lora" does not match "flora"."""
        if any(_starts_word(word, name) for word in self.excludes):
            return False
        return any(_starts_word(keyword, name) for keyword in self.keywords)


def _starts_word(keyword: str, name: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}", name) is not None


# Evaluated top to bottom, first match wins.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        FontCategory.SERIF,
        keywords=(
            "serif",
            "merriweather",
            "lora",
            "playfair",
            "baskerville",
            "garamond",
            "georgia",
            "times",
            "bodoni",
            "crimson",
            "slab",
        ),
        excludes=("sans",),
    ),
    CategoryRule(
        FontCategory.HANDWRITING,
        keywords=(
            "script",
            "hand",
            "pacifico",
            "indie flower",
            "caveat",
            "satisfy",
            "cursive",
            "brush",
            "callig",
            "marker",
        ),
    ),
    CategoryRule(
        FontCategory.DISPLAY,
        keywords=(
            "display",
            "bebas",
            "anton",
            "lobster",
            "abril",
            "bangers",
            "poster",
            "stencil",
            "decorat",
            "ornament",
        ),
    ),
    CategoryRule(
        FontCategory.MONOSPACE,
        keywords=("mono", "code", "courier", "inconsolata", "consol", "terminal"),
    ),
)

DEFAULT_CATEGORY = FontCategory.SANS_SERIF


def classify_font(display_name: str) -> FontCategory:
    """Assign a category from the display name, split into lower-cased words."""
    name = _SEPARATORS_RE.sub(" ", _CAMEL_RE.sub(" ", display_name)).lower()
    for rule in CATEGORY_RULES:
        if rule.matches(name):
            return rule.category
    return DEFAULT_CATEGORY


def parse_font_file_name(file_name: str) -> ParsedFontName:
    """
    Split a font file name into id, display name and variant.

    Args:
        file_name: File name or path, e.g. ``Roboto-Regular.ttf``

    Returns:
        ParsedFontName with the extension, axis tags, variable-font marker
        and trailing style token removed from the id
    """
    stem = PurePosixPath(file_name).stem.strip()
    base = _AXES_RE.sub("", stem).strip()

    match = _VARIABLE_RE.search(base)
    if match:
        base = base[: match.start()]

    variant = DEFAULT_VARIANT
    match = _STYLE_RE.search(base)
    if match:
        variant = match.group("style").lower()
        base = base[: match.start()]

    if variant in ("normal", "book"):
        variant = DEFAULT_VARIANT

    font_id = base.strip(" -_") or stem
    display_name = _SEPARATORS_RE.sub(" ", font_id).strip()

    return ParsedFontName(font_id=font_id, display_name=display_name, variant=variant)
