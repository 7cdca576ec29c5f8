"""Default transition graph and retention table.

The retention periods follow the statutory obligations of the commercial,
labour and civil codes:
- Commercial and tax documents (invoices, contracts): 10 years
- Employment records and quotes: 5 years
- Civil-law obligations: up to 30 years

These rules are loaded by TransitionGraph.with_default_rules() and
RetentionRuleSet.with_default_rules().
"""

from archivist.lifecycle.rules import RetentionRule, TransitionRule
from archivist.lifecycle.types import PERMANENT, ArchivalStatus, Role

S = ArchivalStatus

CODE_COMMERCE = "Code de Commerce, conservation des livres et pièces comptables (10 ans)"
CODE_CIVIL = "Code Civil, prescription des obligations contractuelles"
CODE_TRAVAIL = "Code du Travail, conservation des documents sociaux (5 ans)"
INTERNAL_POLICY = "Politique interne d'archivage"


def get_default_transition_rules() -> list[TransitionRule]:
    """Get the default legal transition graph.

    Direct moves from active to inactive or to destruction are deliberately
    absent: a record passes through at least one intermediate custody phase
    before it can be destroyed.

    Returns:
        List of default transition rules
    """
    return [
        TransitionRule(
            from_status=S.ACTIVE,
            to_status=S.SEMI_ACTIVE,
            business_rule="Document no longer in daily use",
        ),
        TransitionRule(
            from_status=S.ACTIVE,
            to_status=S.ARCHIVED,
            requires_approval=True,
            approver_role=Role.ARCHIVIST,
            business_rule="Closed matter transferred straight to long-term custody",
        ),
        TransitionRule(
            from_status=S.SEMI_ACTIVE,
            to_status=S.INACTIVE,
            business_rule="Consultation period elapsed",
        ),
        TransitionRule(
            from_status=S.SEMI_ACTIVE,
            to_status=S.ARCHIVED,
            requires_approval=True,
            approver_role=Role.ARCHIVIST,
            business_rule="Historical or legal value confirmed by the archivist",
        ),
        TransitionRule(
            from_status=S.INACTIVE,
            to_status=S.ARCHIVED,
            requires_approval=True,
            approver_role=Role.ARCHIVIST,
            business_rule="Selected for permanent or long-term custody",
        ),
        TransitionRule(
            from_status=S.INACTIVE,
            to_status=S.DESTRUCTION,
            requires_approval=True,
            approver_role=Role.ORG_ADMIN,
            business_rule="No residual value once the legal retention has lapsed",
        ),
        TransitionRule(
            from_status=S.ARCHIVED,
            to_status=S.DESTRUCTION,
            requires_approval=True,
            approver_role=Role.ORG_ADMIN,
            business_rule="Archival retention lapsed and destruction authorised",
        ),
    ]


def get_default_retention_rules() -> list[RetentionRule]:
    """Get the default retention table for every shipped classification.

    Returns:
        List of default retention rules
    """
    rules: list[RetentionRule] = []
    rules.extend(_contrat_rules())
    rules.extend(_facture_rules())
    rules.extend(_devis_rules())
    rules.extend(_rapport_rules())
    rules.extend(_projet_rules())
    rules.extend(_other_rules())
    return rules


def _destruction_rule(classification: str) -> RetentionRule:
    return RetentionRule(
        classification=classification,
        status=S.DESTRUCTION,
        retention_years=0,
        legal_basis=INTERNAL_POLICY,
        description="Destroyed; certificate of destruction retained",
    )


def _contrat_rules() -> list[RetentionRule]:
    """Contracts: civil-law prescription, reviewed before disposal."""
    return [
        RetentionRule(
            classification="contrat",
            status=S.ACTIVE,
            retention_years=5,
            legal_basis=CODE_CIVIL,
            description="Contract in force",
            auto_transition_to=S.SEMI_ACTIVE,
        ),
        RetentionRule(
            classification="contrat",
            status=S.SEMI_ACTIVE,
            retention_years=5,
            legal_basis=CODE_CIVIL,
            description="Contract expired, claims still possible",
            auto_transition_to=S.INACTIVE,
        ),
        RetentionRule(
            classification="contrat",
            status=S.INACTIVE,
            retention_years=2,
            legal_basis=CODE_CIVIL,
            description="Awaiting archival selection",
            auto_transition_to=S.ARCHIVED,
        ),
        RetentionRule(
            classification="contrat",
            status=S.ARCHIVED,
            retention_years=10,
            legal_basis=CODE_COMMERCE,
            description="Long-term custody; reviewed before disposal",
        ),
        _destruction_rule("contrat"),
    ]


def _facture_rules() -> list[RetentionRule]:
    """Invoices: fiscal retention, destroyed once it lapses."""
    return [
        RetentionRule(
            classification="facture",
            status=S.ACTIVE,
            retention_years=1,
            legal_basis=CODE_COMMERCE,
            description="Current fiscal year",
            auto_transition_to=S.SEMI_ACTIVE,
        ),
        RetentionRule(
            classification="facture",
            status=S.SEMI_ACTIVE,
            retention_years=4,
            legal_basis=CODE_COMMERCE,
            description="Open to tax audit",
            auto_transition_to=S.INACTIVE,
        ),
        RetentionRule(
            classification="facture",
            status=S.INACTIVE,
            retention_years=5,
            legal_basis=CODE_COMMERCE,
            description="Statutory bookkeeping retention",
            auto_transition_to=S.ARCHIVED,
        ),
        RetentionRule(
            classification="facture",
            status=S.ARCHIVED,
            retention_years=10,
            legal_basis=CODE_COMMERCE,
            description="Accounting archive",
            auto_transition_to=S.DESTRUCTION,
        ),
        _destruction_rule("facture"),
    ]


def _devis_rules() -> list[RetentionRule]:
    """Quotes: short-lived, destroyed without archival."""
    return [
        RetentionRule(
            classification="devis",
            status=S.ACTIVE,
            retention_years=1,
            legal_basis=INTERNAL_POLICY,
            description="Quote open for acceptance",
        ),
        RetentionRule(
            classification="devis",
            status=S.SEMI_ACTIVE,
            retention_years=2,
            legal_basis=INTERNAL_POLICY,
            description="Quote expired",
        ),
        RetentionRule(
            classification="devis",
            status=S.INACTIVE,
            retention_years=2,
            legal_basis=CODE_TRAVAIL,
            description="Kept for dispute resolution",
            auto_transition_to=S.DESTRUCTION,
        ),
        RetentionRule(
            classification="devis",
            status=S.ARCHIVED,
            retention_years=5,
            legal_basis=INTERNAL_POLICY,
            description="Archived on request",
        ),
        _destruction_rule("devis"),
    ]


def _rapport_rules() -> list[RetentionRule]:
    """Reports: historical value, kept permanently once archived."""
    return [
        RetentionRule(
            classification="rapport",
            status=S.ACTIVE,
            retention_years=2,
            legal_basis=INTERNAL_POLICY,
            description="Report under discussion",
        ),
        RetentionRule(
            classification="rapport",
            status=S.SEMI_ACTIVE,
            retention_years=3,
            legal_basis=INTERNAL_POLICY,
            description="Reference material",
        ),
        RetentionRule(
            classification="rapport",
            status=S.INACTIVE,
            retention_years=5,
            legal_basis=INTERNAL_POLICY,
            description="Awaiting historical archiving",
            auto_transition_to=S.ARCHIVED,
        ),
        RetentionRule(
            classification="rapport",
            status=S.ARCHIVED,
            retention_years=PERMANENT,
            legal_basis=CODE_CIVIL,
            description="Historical archive",
        ),
        _destruction_rule("rapport"),
    ]


def _projet_rules() -> list[RetentionRule]:
    """Project files: transitions are decided manually."""
    return [
        RetentionRule(
            classification="projet",
            status=S.ACTIVE,
            retention_years=3,
            legal_basis=INTERNAL_POLICY,
            description="Project in progress",
        ),
        RetentionRule(
            classification="projet",
            status=S.SEMI_ACTIVE,
            retention_years=5,
            legal_basis=INTERNAL_POLICY,
            description="Project closed",
        ),
        RetentionRule(
            classification="projet",
            status=S.INACTIVE,
            retention_years=5,
            legal_basis=CODE_CIVIL,
            description="Warranty and liability period",
        ),
        RetentionRule(
            classification="projet",
            status=S.ARCHIVED,
            retention_years=PERMANENT,
            legal_basis=INTERNAL_POLICY,
            description="Project history",
        ),
        _destruction_rule("projet"),
    ]


def _other_rules() -> list[RetentionRule]:
    """Fallback rules for unclassified documents."""
    return [
        RetentionRule(
            classification="other",
            status=S.ACTIVE,
            retention_years=2,
            legal_basis=INTERNAL_POLICY,
            description="Unclassified document in use",
            auto_transition_to=S.SEMI_ACTIVE,
        ),
        RetentionRule(
            classification="other",
            status=S.SEMI_ACTIVE,
            retention_years=3,
            legal_basis=INTERNAL_POLICY,
            description="Unclassified document, occasional use",
            auto_transition_to=S.INACTIVE,
        ),
        RetentionRule(
            classification="other",
            status=S.INACTIVE,
            retention_years=5,
            legal_basis=INTERNAL_POLICY,
            description="Unclassified document awaiting review",
        ),
        RetentionRule(
            classification="other",
            status=S.ARCHIVED,
            retention_years=10,
            legal_basis=INTERNAL_POLICY,
            description="Unclassified archive; reviewed before disposal",
        ),
        _destruction_rule("other"),
    ]
