"""Permission guard: which actions each archival status allows.

Later custody phases progressively withdraw mutating actions (edit, delete)
and enable compliance actions (certified copies, integrity checks), while
consultation stays available throughout.
"""

from collections.abc import Mapping

from archivist.lifecycle.types import ArchivalStatus, DocumentAction

A = DocumentAction

PERMISSION_TABLE: Mapping[ArchivalStatus, frozenset[DocumentAction]] = {
    ArchivalStatus.ACTIVE: frozenset(
        {
            A.EDIT,
            A.DELETE,
            A.SHARE,
            A.PRINT,
            A.VIEW,
            A.DOWNLOAD,
            A.CHANGE_STATUS,
            A.ADD_VERSION,
            A.ANNOTATE,
        }
    ),
    ArchivalStatus.SEMI_ACTIVE: frozenset(
        {
            A.EDIT,
            A.SHARE,
            A.PRINT,
            A.VIEW,
            A.DOWNLOAD,
            A.VERIFY_INTEGRITY,
            A.CHANGE_STATUS,
            A.ADD_VERSION,
            A.ANNOTATE,
        }
    ),
    ArchivalStatus.INACTIVE: frozenset(
        {
            A.PRINT,
            A.VIEW,
            A.DOWNLOAD,
            A.CERTIFIED_COPY,
            A.VERIFY_INTEGRITY,
            A.TRANSFER,
            A.CHANGE_STATUS,
            A.ADD_VERSION,
            A.ANNOTATE,
        }
    ),
    ArchivalStatus.ARCHIVED: frozenset(
        {
            A.PRINT,
            A.VIEW,
            A.DOWNLOAD,
            A.CERTIFIED_COPY,
            A.VERIFY_INTEGRITY,
            A.TRANSFER,
            A.CHANGE_STATUS,
        }
    ),
    ArchivalStatus.DESTRUCTION: frozenset(
        {
            A.VIEW,
            A.DOWNLOAD,
            A.CERTIFIED_COPY,
            A.VERIFY_INTEGRITY,
            A.DESTROY,
        }
    ),
}


def is_action_allowed(status: ArchivalStatus, action: DocumentAction) -> bool:
    """Check whether an action is permitted in a status.

    Unknown status/action pairs are denied.
    """
    return action in PERMISSION_TABLE.get(status, frozenset())


def allowed_actions(status: ArchivalStatus) -> frozenset[DocumentAction]:
    """Get every action permitted in a status."""
    return PERMISSION_TABLE.get(status, frozenset())
