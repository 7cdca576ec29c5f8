"""Unit tests for the version ledger."""

import pytest

from archivist.core.exceptions import (
    PermissionDeniedError,
    TerminalStateError,
    VersionLockedError,
    VersionNotFoundError,
)
from archivist.lifecycle.ledger import VersionLedger, compute_content_hash
from archivist.lifecycle.models import Attachment, Document
from archivist.lifecycle.types import ArchivalStatus, ChangeType, MediaKind


@pytest.fixture
def ledger(clock) -> VersionLedger:
    return VersionLedger(clock)


@pytest.fixture
def document(ledger, word_attachment) -> Document:
    document = Document(title="Contrat de bail", classification="contrat")
    ledger.create_initial_version(document, "alice", [word_attachment])
    return document


def _current_versions(document: Document) -> list[int]:
    return [v.version_number for v in document.versions if v.is_current]


class TestContentHash:
    """Tests for compute_content_hash."""

    def test_deterministic(self, word_attachment):
        a = compute_content_hash(1, "desc", ChangeType.MAJOR, [word_attachment])
        b = compute_content_hash(1, "desc", ChangeType.MAJOR, [word_attachment])
        assert a == b
        assert len(a) == 64

    def test_sensitive_to_every_input(self, word_attachment, pdf_attachment):
        base = compute_content_hash(1, "desc", ChangeType.MAJOR, [word_attachment])
        assert base != compute_content_hash(2, "desc", ChangeType.MAJOR, [word_attachment])
        assert base != compute_content_hash(1, "other", ChangeType.MAJOR, [word_attachment])
        assert base != compute_content_hash(1, "desc", ChangeType.MINOR, [word_attachment])
        assert base != compute_content_hash(1, "desc", ChangeType.MAJOR, [pdf_attachment])


class TestInitialVersion:
    """Tests for create_initial_version."""

    def test_version_one_is_current_and_unlocked(self, document, now):
        version = document.current_version
        assert version.version_number == 1
        assert version.label == "v1"
        assert version.is_current
        assert not version.is_locked
        assert version.created_at == now

    def test_cannot_create_twice(self, ledger, document):
        with pytest.raises(ValueError):
            ledger.create_initial_version(document, "bob")


class TestAppendVersion:
    """Tests for append_version."""

    def test_numbers_are_gapless(self, ledger, document):
        """Test each append takes max + 1."""
        ledger.append_version(document, ChangeType.MINOR, "clause 4", "bob")
        ledger.append_version(document, ChangeType.PATCH, "typo", "bob")
        assert [v.version_number for v in document.versions] == [1, 2, 3]

    def test_exactly_one_current(self, ledger, document):
        """Test the new version is the only current one."""
        version = ledger.append_version(document, ChangeType.MINOR, "clause 4", "bob")
        assert _current_versions(document) == [2]
        assert document.current_version is version
        assert not version.is_locked

    def test_snapshot_is_by_value(self, ledger, document, word_attachment, pdf_attachment):
        """Test replacing attachments never changes history."""
        ledger.append_version(
            document, ChangeType.MAJOR, "signed copy", "bob", attachments=[pdf_attachment]
        )
        assert document.get_version(1).attachment_snapshot == (word_attachment,)
        assert document.attachments == [pdf_attachment]

    def test_snapshot_defaults_to_live_set(self, ledger, document, word_attachment):
        version = ledger.append_version(document, ChangeType.PATCH, "metadata", "bob")
        assert version.attachment_snapshot == (word_attachment,)

    def test_custom_label(self, ledger, document):
        version = ledger.append_version(
            document, ChangeType.MAJOR, "signed", "bob", label="signed-2026"
        )
        assert version.label == "signed-2026"

    def test_denied_when_archived(self, ledger, document):
        """Test add-version is gated by the permission table."""
        document.status = ArchivalStatus.ARCHIVED
        with pytest.raises(PermissionDeniedError) as exc_info:
            ledger.append_version(document, ChangeType.MINOR, "late edit", "bob")
        assert exc_info.value.document_id == document.document_id
        assert len(document.versions) == 1

    def test_terminal_document_rejected(self, ledger, document):
        document.status = ArchivalStatus.DESTRUCTION
        with pytest.raises(TerminalStateError):
            ledger.append_version(document, ChangeType.MINOR, "late edit", "bob")

    def test_append_after_lock(self, ledger, document):
        """Test a locked version does not block new versions."""
        ledger.lock_current_version(document)
        version = ledger.append_version(document, ChangeType.MINOR, "amendment", "bob")
        assert version.is_current and not version.is_locked
        assert document.get_version(1).is_locked
        assert not document.get_version(1).is_current


class TestLocking:
    """Tests for lock_current_version and lock immutability."""

    def test_lock_is_idempotent(self, ledger, document):
        ledger.lock_current_version(document)
        version = ledger.lock_current_version(document)
        assert version.is_locked

    def test_lock_empty_ledger(self, ledger):
        assert ledger.lock_current_version(Document(title="t", classification="other")) is None

    @pytest.mark.parametrize(
        "field_name,value",
        [
            ("change_description", "rewritten"),
            ("content_hash", "0" * 64),
            ("attachment_snapshot", ()),
            ("author", "mallory"),
            ("label", "renamed"),
            ("version_number", 9),
        ],
    )
    def test_locked_fields_refuse_assignment(self, ledger, document, field_name, value):
        """Test a locked version cannot be edited directly."""
        ledger.lock_current_version(document)
        version = document.current_version
        with pytest.raises(VersionLockedError) as exc_info:
            setattr(version, field_name, value)
        assert exc_info.value.field_name == field_name

    def test_lock_cannot_be_reset(self, ledger, document):
        ledger.lock_current_version(document)
        with pytest.raises(VersionLockedError):
            document.current_version.is_locked = False

    def test_locked_version_survives_serialisation(self, ledger, document):
        """Test a reloaded locked version is still protected."""
        ledger.lock_current_version(document)
        copy = document.copy()
        with pytest.raises(VersionLockedError):
            copy.current_version.change_description = "rewritten"


class TestVerifyIntegrity:
    """Tests for verify_integrity."""

    def test_untouched_locked_version_verifies(self, ledger, document):
        document.status = ArchivalStatus.ARCHIVED
        ledger.lock_current_version(document)
        assert ledger.verify_integrity(document) is True
        assert ledger.verify_integrity(document, 1) is True

    def test_tampered_version_fails(self, ledger, document):
        """Test bypassing the ledger is detected."""
        document.status = ArchivalStatus.SEMI_ACTIVE
        version = document.current_version
        object.__setattr__(version, "change_description", "tampered")
        assert ledger.verify_integrity(document) is False

    def test_tampered_snapshot_fails(self, ledger, document):
        document.status = ArchivalStatus.INACTIVE
        swapped = Attachment(name="forged.pdf", media_kind=MediaKind.PDF)
        object.__setattr__(document.current_version, "attachment_snapshot", (swapped,))
        assert ledger.verify_integrity(document) is False

    def test_denied_while_active(self, ledger, document):
        """Test verify-integrity is gated by status."""
        with pytest.raises(PermissionDeniedError):
            ledger.verify_integrity(document)

    def test_unknown_version(self, ledger, document):
        document.status = ArchivalStatus.ARCHIVED
        with pytest.raises(VersionNotFoundError):
            ledger.verify_integrity(document, 7)

    def test_survives_serialisation(self, ledger, document):
        document.status = ArchivalStatus.ARCHIVED
        assert ledger.verify_integrity(document.copy()) is True


class TestRelabelVersion:
    """Tests for relabel_version."""

    def test_relabel_unlocked(self, ledger, document):
        version = ledger.relabel_version(document, 1, "draft")
        assert version.label == "draft"

    def test_relabel_does_not_change_hash(self, ledger, document):
        before = document.current_version.content_hash
        ledger.relabel_version(document, 1, "draft")
        assert document.current_version.content_hash == before

    def test_relabel_locked_rejected(self, ledger, document):
        ledger.lock_current_version(document)
        with pytest.raises(VersionLockedError) as exc_info:
            ledger.relabel_version(document, 1, "draft")
        assert exc_info.value.document_id == document.document_id

    def test_relabel_requires_edit(self, ledger, document):
        document.status = ArchivalStatus.INACTIVE
        with pytest.raises(PermissionDeniedError):
            ledger.relabel_version(document, 1, "draft")
