"""Syntax highlighting for fenced code blocks.

A highlighter turns ``(source, language)`` into lines of :class:`CodeToken`
or returns ``None`` when it does not know the language.  The converter turns
each token into one coloured run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)


@dataclass
class CodeToken:
    text: str
    color: str = ""  # RRGGBB
    bold: bool = False
    italic: bool = False


CodeLines = list[list[CodeToken]]
CodeHighlighter = Callable[[str, str], Optional[CodeLines]]


class PygmentsHighlighter:
    """Highlight code with a Pygments lexer and colour scheme.

    Parameters
    ----------
    style : str
        Name of a Pygments style, e.g. ``"default"`` or ``"friendly"``

    """

    def __init__(self, style: str = "default") -> None:
        try:
            self.style = get_style_by_name(style)
        except ClassNotFound as exc:
            raise ValueError(f"Unknown Pygments style {style!r}") from exc

    def __call__(self, source: str, language: str) -> Optional[CodeLines]:
        if not language:
            return None
        try:
            lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
        except ClassNotFound:
            logger.debug("No lexer for %r, leaving code unhighlighted", language)
            return None

        lines: CodeLines = [[]]
        for ttype, value in lexer.get_tokens(source):
            spec = self.style.style_for_token(ttype)
            for i, piece in enumerate(value.split("\n")):
                if i:
                    lines.append([])
                if piece:
                    lines[-1].append(CodeToken(
                        text=piece,
                        color=spec["color"] or "",
                        bold=bool(spec["bold"]),
                        italic=bool(spec["italic"]),
                    ))
        return lines
