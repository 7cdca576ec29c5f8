"""Destruction certificates.

A certificate is issued whenever a document enters destruction. It
carries a verification hash over its own fields so that a stored copy can
later be checked for tampering.
"""

import hashlib
import json
import secrets
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from archivist.lifecycle.models import Document


class DestructionCertificate(BaseModel):
    """Proof that a document was destroyed under an authorised decision."""

    model_config = ConfigDict(frozen=True)

    certificate_number: str
    document_id: UUID
    title: str
    classification: str
    document_hash: str | None
    version_number: int | None
    destruction_reason: str
    authorized_by: str
    issued_at: datetime
    verification_hash: str = ""


def _certificate_digest(certificate: DestructionCertificate) -> str:
    data = certificate.model_dump(mode="json", exclude={"verification_hash"})
    return hashlib.sha256(json.dumps(data, sort_keys=True).encode()).hexdigest()


def issue_certificate(
    document: Document,
    reason: str,
    authorized_by: str,
    issued_at: datetime,
) -> DestructionCertificate:
    """Issue a certificate for a document entering destruction.

    Args:
        document: The document being destroyed (current version already locked)
        reason: Justification recorded with the transition
        authorized_by: Actor who requested the destruction
        issued_at: Transition timestamp

    Returns:
        Signed DestructionCertificate
    """
    current = document.current_version
    unsigned = DestructionCertificate(
        certificate_number=f"DC-{issued_at:%Y%m%d}-{secrets.token_hex(4).upper()}",
        document_id=document.document_id,
        title=document.title,
        classification=document.classification,
        document_hash=current.content_hash if current else None,
        version_number=current.version_number if current else None,
        destruction_reason=reason,
        authorized_by=authorized_by,
        issued_at=issued_at,
    )
    return unsigned.model_copy(update={"verification_hash": _certificate_digest(unsigned)})


def verify_certificate(certificate: DestructionCertificate) -> bool:
    """Check a certificate's verification hash against its fields."""
    return certificate.verification_hash == _certificate_digest(certificate)
