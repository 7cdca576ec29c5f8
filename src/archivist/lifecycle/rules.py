"""Transition and retention rule models and their repositories.

This module provides the static configuration the engine is driven by:
- TransitionRule / TransitionGraph: the explicit legal transition graph
- RetentionRule / RetentionRuleSet: retention policy per classification and status

Both repositories validate their tables at load time so that a bad
configuration fails at startup instead of during a transition.
"""

from collections.abc import Iterable, Sequence
from typing import Self

from pydantic import BaseModel, ConfigDict, model_validator

from archivist.lifecycle.types import PERMANENT, ArchivalStatus, RetentionYears, Role
from archivist.utils.exceptions import ConfigurationError


class TransitionRule(BaseModel):
    """A legal edge of the custody graph.

    Attributes:
        from_status: Status the document must currently be in
        to_status: Status the document moves to
        requires_approval: Whether a non-blank justification is mandatory
        approver_role: Role the caller is expected to have verified
        business_rule: Human-readable condition justifying the edge
    """

    model_config = ConfigDict(frozen=True)

    from_status: ArchivalStatus
    to_status: ArchivalStatus
    requires_approval: bool = False
    approver_role: Role | None = None
    business_rule: str = ""

    @model_validator(mode="after")
    def validate_forward(self) -> Self:
        """Reject edges that do not move strictly forward."""
        if self.to_status.order <= self.from_status.order:
            raise ValueError(
                f"Transition {self.from_status.value} -> {self.to_status.value} "
                "must move to a strictly later status"
            )
        return self

    @property
    def key(self) -> tuple[ArchivalStatus, ArchivalStatus]:
        """Lookup key of this rule."""
        return (self.from_status, self.to_status)


class RetentionRule(BaseModel):
    """Retention policy for one classification in one status.

    Attributes:
        classification: Document type the rule applies to
        status: Custody phase the rule applies to
        retention_years: Years to keep the document in this phase, or "permanent"
        legal_basis: Statute or policy the period derives from
        description: Human-readable description of the phase
        auto_transition_to: Status the sweep moves the document to once retention lapses
    """

    model_config = ConfigDict(frozen=True)

    classification: str
    status: ArchivalStatus
    retention_years: RetentionYears
    legal_basis: str | None = None
    description: str = ""
    auto_transition_to: ArchivalStatus | None = None

    @model_validator(mode="after")
    def validate_retention(self) -> Self:
        """Validate the period and the automatic successor."""
        if self.retention_years != PERMANENT and self.retention_years < 0:
            raise ValueError("retention_years must be non-negative")
        if self.auto_transition_to is not None:
            # A zero or permanent period would make the sweep re-fire or never fire.
            if self.is_permanent or self.retention_years == 0:
                raise ValueError(
                    "auto_transition_to requires a finite, positive retention period"
                )
            if self.auto_transition_to.order <= self.status.order:
                raise ValueError("auto_transition_to must be a later status")
        return self

    @property
    def is_permanent(self) -> bool:
        """Whether the document is kept indefinitely in this phase."""
        return self.retention_years == PERMANENT

    @property
    def key(self) -> tuple[str, ArchivalStatus]:
        """Lookup key of this rule."""
        return (self.classification, self.status)


class TransitionGraph:
    """Repository of the configured transition rules.

    The graph is the single source of truth for legal edges; nothing is
    inferred from status ordering.
    """

    def __init__(self, rules: Sequence[TransitionRule] | None = None):
        """Initialize the graph.

        Args:
            rules: Transition rules to load

        Raises:
            ConfigurationError: If two rules share the same edge
        """
        self._rules: dict[tuple[ArchivalStatus, ArchivalStatus], TransitionRule] = {}
        if rules:
            self.load_rules(rules)

    @classmethod
    def with_default_rules(cls) -> "TransitionGraph":
        """Create a graph loaded with the default transition rules."""
        from archivist.lifecycle.default_rules import get_default_transition_rules

        return cls(get_default_transition_rules())

    def load_rules(self, rules: Iterable[TransitionRule]) -> None:
        """Load rules into the graph."""
        for rule in rules:
            if rule.key in self._rules:
                raise ConfigurationError(
                    f"Duplicate transition rule {rule.from_status.value} -> {rule.to_status.value}"
                )
            self._rules[rule.key] = rule

    def get_rule(
        self,
        from_status: ArchivalStatus,
        to_status: ArchivalStatus,
    ) -> TransitionRule | None:
        """Get the rule for an edge, or None if the edge is not legal."""
        return self._rules.get((from_status, to_status))

    def rules_from(self, status: ArchivalStatus) -> list[TransitionRule]:
        """Get every rule leaving a status, ordered by target status."""
        rules = [r for r in self._rules.values() if r.from_status == status]
        return sorted(rules, key=lambda r: r.to_status.order)

    def has_edge(self, from_status: ArchivalStatus, to_status: ArchivalStatus) -> bool:
        """Check whether an edge is configured."""
        return (from_status, to_status) in self._rules

    def __len__(self) -> int:
        return len(self._rules)


class RetentionRuleSet:
    """Repository of retention rules indexed by classification and status."""

    def __init__(
        self,
        rules: Sequence[RetentionRule] | None = None,
        default_classification: str = "other",
    ):
        """Initialize the rule set.

        Args:
            rules: Retention rules to load
            default_classification: Classification used for fallback lookups
        """
        self.default_classification = default_classification
        self._rules: dict[tuple[str, ArchivalStatus], RetentionRule] = {}
        self._classifications: set[str] = set()
        if rules:
            self.load_rules(rules)

    @classmethod
    def with_default_rules(cls, default_classification: str = "other") -> "RetentionRuleSet":
        """Create a rule set loaded with the default retention table."""
        from archivist.lifecycle.default_rules import get_default_retention_rules

        return cls(get_default_retention_rules(), default_classification=default_classification)

    def load_rules(self, rules: Iterable[RetentionRule]) -> None:
        """Load rules into the set."""
        for rule in rules:
            if rule.key in self._rules:
                raise ConfigurationError(
                    f"Duplicate retention rule for {rule.classification}/{rule.status.value}"
                )
            self._rules[rule.key] = rule
            self._classifications.add(rule.classification)

    def get_rule(self, classification: str, status: ArchivalStatus) -> RetentionRule | None:
        """Get the rule for a classification and status, without fallback."""
        return self._rules.get((classification, status))

    def has_classification(self, classification: str) -> bool:
        """Check whether any rule is configured for a classification."""
        return classification in self._classifications

    @property
    def classifications(self) -> frozenset[str]:
        """All configured classifications."""
        return frozenset(self._classifications)

    def validate(self, graph: TransitionGraph) -> None:
        """Check the table is complete and consistent with a transition graph.

        The default classification must cover every status, and every
        automatic successor must be a configured edge.

        Raises:
            ConfigurationError: If the table is incomplete or inconsistent
        """
        missing = [
            status.value
            for status in ArchivalStatus
            if (self.default_classification, status) not in self._rules
        ]
        if missing:
            raise ConfigurationError(
                f"Default classification '{self.default_classification}' "
                f"has no rule for: {', '.join(missing)}"
            )

        for rule in self._rules.values():
            if rule.auto_transition_to is None:
                continue
            if not graph.has_edge(rule.status, rule.auto_transition_to):
                raise ConfigurationError(
                    f"Retention rule {rule.classification}/{rule.status.value} "
                    f"auto-transitions to {rule.auto_transition_to.value}, "
                    "which is not a configured transition"
                )

    def __len__(self) -> int:
        return len(self._rules)
