"""Payment evidence validation.

Evidence is the screenshot or receipt a traveler uploads after paying by bank
transfer. It arrives as a data URL and is stored inline on the booking:

    data:image/png;base64,iVBORw0KGgo...
"""

import base64
import binascii
import re
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.core.exceptions import ValidationError

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


class EvidenceService:
    """Validates uploaded payment evidence."""

    ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
    ALLOWED_DOCUMENT_TYPES = {"application/pdf"}

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes or settings.max_evidence_bytes

    def decode(self, data_url: str) -> tuple[str, bytes]:
        """Split a data URL into its MIME type and decoded bytes.

        Raises:
            ValidationError: If the data URL is malformed
        """
        match = DATA_URL_PATTERN.match(data_url.strip())
        if not match:
            raise ValidationError("Payment screenshot must be a base64 data URL")

        mime = match.group("mime").lower()
        try:
            content = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Payment screenshot is not valid base64")
        return mime, content

    def validate(self, data_url: str | None) -> str | None:
        """Validate evidence and return it normalized for storage.

        Args:
            data_url: Uploaded evidence, or None when nothing was uploaded

        Returns:
            str | None: The stripped data URL

        Raises:
            ValidationError: If the type, size or content is unacceptable
        """
        if data_url is None or not data_url.strip():
            return None

        mime, content = self.decode(data_url)

        if mime not in self.ALLOWED_IMAGE_TYPES | self.ALLOWED_DOCUMENT_TYPES:
            raise ValidationError(f"Unsupported payment screenshot type: {mime}")
        if not content:
            raise ValidationError("Payment screenshot is empty")
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"File size exceeds {self.max_bytes // 1024 // 1024}MB. Please upload a smaller file."
            )

        if mime in self.ALLOWED_DOCUMENT_TYPES:
            if not content.startswith(b"%PDF"):
                raise ValidationError("Payment receipt is not a valid PDF document")
        else:
            self._verify_image(content)

        return data_url.strip()

    def _verify_image(self, content: bytes) -> None:
        try:
            with Image.open(BytesIO(content)) as image:
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
            raise ValidationError("Payment screenshot is not a readable image")


evidence_service = EvidenceService()
