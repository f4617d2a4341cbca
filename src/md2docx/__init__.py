"""md2docx - build WordprocessingML (.docx) packages from Markdown."""

from md2docx.converter import Converter
from md2docx.document import Document, ImageData, Relationship
from md2docx.highlight import PygmentsHighlighter
from md2docx.paragraph import Hyperlink, Paragraph, Run
from md2docx.style_manager import DocumentConfig, StyleManager
from md2docx.table import Table, TableCell, TableRow

__version__ = "0.1.0"

__all__ = [
    "Converter",
    "Document",
    "DocumentConfig",
    "Hyperlink",
    "ImageData",
    "Paragraph",
    "PygmentsHighlighter",
    "Relationship",
    "Run",
    "StyleManager",
    "Table",
    "TableCell",
    "TableRow",
    "__version__",
]
