"""PDF to image conversion using PyMuPDF, for scanned notebooks."""

from pathlib import Path

import fitz  # PyMuPDF


def pdf_to_images(pdf_path: Path, dpi: int = 150) -> list[bytes]:
    """Render each page of a PDF to a PNG byte string.

    150 DPI is plenty for handwriting; raise it for small, dense script.
    """
    doc = fitz.open(str(pdf_path))
    results = []
    matrix = fitz.Matrix(dpi / 72, dpi / 72)  # PDF user space is 72 points per inch

    try:
        for page in doc:
            pixmap = page.get_pixmap(matrix=matrix, colorspace=fitz.csRGB)
            results.append(pixmap.tobytes("png"))
    finally:
        doc.close()
    return results
