"""Output generation for analysis results (text, PDF)."""

from shiftcalc.output.pdf_generator import PDFGenerator
from shiftcalc.output.text_report import TextReportGenerator

__all__ = [
    "PDFGenerator",
    "TextReportGenerator",
]
