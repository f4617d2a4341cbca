"""Document style configuration and presets.

Manages style presets (default, academic, business, minimal) that map
semantic style names (body, heading levels, code, code_block) to concrete
font and paragraph specifications consumed by the style sheet generator
and the converter.  Spacing and indents are in twips, sizes in points.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Optional


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class StyleSpec:
    """Font and paragraph settings for one semantic style."""

    font: str = "Times New Roman"
    size: float = 10.5
    bold: bool = False
    italic: bool = False
    color: str = ""
    line_height: int = 0        # 240 = single, 360 = 1.5 lines
    space_before: int = 0
    space_after: int = 0
    first_line_indent: int = 0

    def derive(self, **overrides) -> StyleSpec:
        """Return a copy with selected fields overridden."""
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone


@dataclass
class TableSpec:
    font: str = ""
    size: float = 0.0
    borders: bool = True
    header_bold: bool = True


@dataclass
class ImageSpec:
    max_width: int = 600  # pixels


@dataclass
class DocumentConfig:
    """Complete style configuration for one document."""

    body: StyleSpec = field(default_factory=StyleSpec)
    headings: dict[int, StyleSpec] = field(default_factory=dict)
    code: StyleSpec = field(default_factory=lambda: StyleSpec(font="Consolas", size=10.5))
    code_block: StyleSpec = field(default_factory=lambda: StyleSpec(font="Consolas", size=9.5))
    table: TableSpec = field(default_factory=TableSpec)
    images: ImageSpec = field(default_factory=ImageSpec)

    def get_heading_style(self, level: int) -> StyleSpec:
        """Return the style for heading *level*, falling back to the body style."""
        style = self.headings.get(level)
        if style is None:
            return self.body
        return style


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

def _headings(
    base: StyleSpec, sizes: dict[int, float]
) -> dict[int, StyleSpec]:
    return {
        level: base.derive(size=size, bold=True)
        for level, size in sizes.items()
    }


def _build_default_config() -> DocumentConfig:
    """Build the **default** preset."""
    body = StyleSpec(
        font="Times New Roman",
        size=10.5,
        line_height=360,
        space_before=0,
        space_after=120,
        first_line_indent=0,
    )
    # H7-H9 are left unset and fall back to the body style
    sizes = {1: 22.0, 2: 18.0, 3: 15.0, 4: 14.0, 5: 12.0, 6: 10.5}
    return DocumentConfig(
        body=body,
        headings=_headings(StyleSpec(font=body.font), sizes),
        code=StyleSpec(font="Consolas", size=10.5, color="#C7254E"),
        code_block=StyleSpec(font="Consolas", size=9.5, line_height=276),
        table=TableSpec(font=body.font, size=10.5, borders=True, header_bold=True),
        images=ImageSpec(max_width=600),
    )


def _build_academic_config() -> DocumentConfig:
    """Build the **academic** preset -- serif, first-line indents, double spacing."""
    base = _build_default_config()
    body = StyleSpec(
        font="Times New Roman",
        size=12.0,
        line_height=480,
        space_after=0,
        first_line_indent=420,
    )
    base.body = body
    base.headings = _headings(
        StyleSpec(font="Times New Roman"),
        {1: 16.0, 2: 14.0, 3: 13.0, 4: 12.0, 5: 12.0, 6: 12.0, 7: 12.0, 8: 12.0, 9: 12.0},
    )
    base.code_block = StyleSpec(font="Courier New", size=10.0, line_height=240)
    base.code = StyleSpec(font="Courier New", size=11.0)
    base.table = TableSpec(font="Times New Roman", size=11.0, borders=True, header_bold=True)
    return base


def _build_business_config() -> DocumentConfig:
    """Build the **business** preset -- sans-serif, compact."""
    base = _build_default_config()
    body = StyleSpec(font="Arial", size=10.0, line_height=276, space_after=80)
    base.body = body
    base.headings = _headings(
        StyleSpec(font="Arial", color="#1F3864"),
        {1: 20.0, 2: 16.0, 3: 13.0, 4: 11.0, 5: 10.5, 6: 10.0},
    )
    base.code = StyleSpec(font="Consolas", size=9.0, color="#333333")
    base.code_block = StyleSpec(font="Consolas", size=9.0, line_height=252)
    base.table = TableSpec(font="Arial", size=9.0, borders=True, header_bold=True)
    base.images = ImageSpec(max_width=560)
    return base


def _build_minimal_config() -> DocumentConfig:
    """Build the **minimal** preset -- clean, tight spacing, borderless tables."""
    base = _build_default_config()
    body = StyleSpec(font="Helvetica Neue", size=10.0, line_height=264, space_after=60)
    base.body = body
    base.headings = _headings(
        StyleSpec(font="Helvetica Neue"),
        {1: 18.0, 2: 15.0, 3: 12.5},
    )
    base.code = StyleSpec(font="Menlo", size=9.0)
    base.code_block = StyleSpec(font="Menlo", size=9.0, line_height=240)
    base.table = TableSpec(font="Helvetica Neue", size=9.0, borders=False, header_bold=True)
    return base


# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

_PRESET_BUILDERS = {
    "default": _build_default_config,
    "academic": _build_academic_config,
    "business": _build_business_config,
    "minimal": _build_minimal_config,
}


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Selects a style preset and exposes its :class:`DocumentConfig`.

    Usage::

        sm = StyleManager("academic")
        body = sm.get_body_style()
        h2 = sm.get_heading_style(2)
    """

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(
        self,
        preset: str = "default",
        config: Optional[DocumentConfig] = None,
    ) -> None:
        if preset not in _PRESET_BUILDERS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
            )
        self.preset = preset
        self.config: DocumentConfig = config or _PRESET_BUILDERS[preset]()

    # -- public API ---------------------------------------------------------

    def get_heading_style(self, level: int) -> StyleSpec:
        """Return the :class:`StyleSpec` for heading level *1--9*."""
        level = max(1, min(9, level))
        return self.config.get_heading_style(level)

    def get_body_style(self) -> StyleSpec:
        return self.config.body

    def get_code_style(self) -> StyleSpec:
        return self.config.code

    def get_code_block_style(self) -> StyleSpec:
        return self.config.code_block
