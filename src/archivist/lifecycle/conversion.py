"""PDF/A conversion advice.

The engine never converts anything; it only reports which attachments of
the current version should be converted before long-term custody.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from archivist.lifecycle.models import Attachment, Document
from archivist.lifecycle.types import DURABLE_MEDIA_KINDS

DEFAULT_TARGET_FORMAT = "PDF/A-2b"


class ConversionSummary(BaseModel):
    """Advisory summary of attachments needing durable-format conversion.

    Attributes:
        count: Attachments that need conversion
        total: Attachments in the current version
        attachment_ids: IDs of the attachments that need conversion
        target_format: Format the conversion service should produce
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=0)
    total: int = Field(ge=0)
    attachment_ids: tuple[UUID, ...] = ()
    target_format: str = DEFAULT_TARGET_FORMAT

    @property
    def requires_conversion(self) -> bool:
        return self.count > 0


class PdfaConversionAdvisor:
    """Flags attachments that are not in a durable format."""

    def __init__(self, target_format: str = DEFAULT_TARGET_FORMAT):
        self.target_format = target_format

    def needs_conversion(self, attachment: Attachment) -> bool:
        """True unless the attachment is already PDF or PDF/A."""
        return attachment.media_kind not in DURABLE_MEDIA_KINDS

    def conversion_summary(self, document: Document) -> ConversionSummary:
        """Summarise conversion needs for the document's current version."""
        attachments = document.attachments
        pending = [a.attachment_id for a in attachments if self.needs_conversion(a)]
        return ConversionSummary(
            count=len(pending),
            total=len(attachments),
            attachment_ids=tuple(pending),
            target_format=self.target_format,
        )
