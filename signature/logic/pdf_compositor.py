from __future__ import annotations
import logging
import math
from io import BytesIO

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from PIL import Image, UnidentifiedImageError
from reportlab.pdfgen import canvas
from reportlab.lib.utils import ImageReader

from core.exceptions.errors import ImageDecodeError, SourceDocumentError, ValidationError
from ..models.annotation_placement import PdfRect
from ..models.signature_enums import ImageKind

logger = logging.getLogger(__name__)


class PdfCompositor:
    """
    Stamps a raster image onto one page of a PDF and returns a new document.

    The source bytes are never modified. Coordinates are already in PDF points
    (origin bottom-left); no transform happens here. Output naming and storage
    belong to the caller.
    """

    @staticmethod
    def decode_image(image_bytes: bytes, kind: ImageKind) -> Image.Image:
        """Decode strictly as the declared kind (a PNG body labelled jpeg is rejected)."""
        if not image_bytes:
            raise ImageDecodeError("Signature image is empty")
        try:
            img = Image.open(BytesIO(image_bytes), formats=[kind.pil_format])
            img.load()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            raise ImageDecodeError(f"Signature image is not a valid {kind.value.upper()}: {exc}") from exc
        if img.width <= 0 or img.height <= 0:
            raise ImageDecodeError("Signature image has no pixels")
        if kind is ImageKind.PNG:
            return img.convert("RGBA")
        return img.convert("RGB")

    @staticmethod
    def _check_rect(rect: PdfRect) -> None:
        values = (rect.x, rect.y, rect.width, rect.height)
        if not all(math.isfinite(float(v)) for v in values):
            raise ValidationError("Placement coordinates must be finite numbers", code="invalid_rect")
        if rect.width <= 0 or rect.height <= 0:
            raise ValidationError("Placement width and height must be > 0", code="invalid_rect")

    @staticmethod
    def _make_overlay(page_w: float, page_h: float, image: Image.Image, rect: PdfRect) -> bytes:
        """Single overlay page holding the image at *rect*; invariant output for equal input."""
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(page_w, page_h), invariant=1)
        mask = "auto" if image.mode == "RGBA" else None
        c.drawImage(
            ImageReader(image),
            float(rect.x),
            float(rect.y),
            width=float(rect.width),
            height=float(rect.height),
            mask=mask,
        )
        c.showPage()
        c.save()
        return buf.getvalue()

    @staticmethod
    def _open_source(source_bytes: bytes) -> PdfReader:
        if not source_bytes:
            raise SourceDocumentError("Source PDF is empty")
        try:
            reader = PdfReader(BytesIO(source_bytes))
            if reader.is_encrypted:
                raise SourceDocumentError("Encrypted source PDFs are not supported")
            page_count = len(reader.pages)
        except (PyPdfError, ValueError) as exc:
            raise SourceDocumentError(f"Source PDF could not be parsed: {exc}") from exc
        if page_count == 0:
            raise SourceDocumentError("Source PDF has no pages")
        return reader

    @staticmethod
    def target_page(page_index: int, page_count: int) -> int:
        """Out-of-range indexes fall back to the first page."""
        return page_index if 0 <= page_index < page_count else 0

    def compose(
        self,
        *,
        source_bytes: bytes,
        page_index: int,
        rect: PdfRect,
        image_bytes: bytes,
        image_kind: ImageKind,
    ) -> bytes:
        self._check_rect(rect)
        image = self.decode_image(image_bytes, image_kind)
        reader = self._open_source(source_bytes)

        page_count = len(reader.pages)
        target = self.target_page(page_index, page_count)
        if target != page_index:
            logger.info("Page index %s out of range (%s pages); stamping page 0", page_index, page_count)

        writer = PdfWriter(clone_from=reader)
        page = writer.pages[target]
        box = page.mediabox
        overlay_pdf = self._make_overlay(float(box.right), float(box.top), image, rect)
        overlay_reader = PdfReader(BytesIO(overlay_pdf))
        page.merge_page(overlay_reader.pages[0])

        out = BytesIO()
        writer.write(out)
        return out.getvalue()
