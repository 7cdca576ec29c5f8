"""Retention policy resolution.

Resolves the retention rule for a document, computes retention end dates
and classifies how urgently a document approaches the end of its period.
"""

import math
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from archivist.core.exceptions import UnknownClassificationError
from archivist.core.logging import get_logger
from archivist.lifecycle.rules import RetentionRule, RetentionRuleSet
from archivist.lifecycle.types import ArchivalStatus, FinalDisposition, Urgency

logger = get_logger(__name__)

CRITICAL_DAYS = 30
WARNING_DAYS = 90


def compute_retention_end_date(
    rule: RetentionRule,
    effective_date: datetime,
) -> datetime | None:
    """Compute when a retention period ends.

    Years are calendar years, so Feb 29 plus one year lands on Feb 28.

    Args:
        rule: Rule whose period applies
        effective_date: Start of the period

    Returns:
        End of the period, or None for permanent retention
    """
    if rule.is_permanent:
        return None
    return effective_date + relativedelta(years=rule.retention_years)


def days_remaining(end_date: datetime | None, now: datetime) -> int | None:
    """Whole days until end_date, rounded up; negative once overdue."""
    if end_date is None:
        return None
    return math.ceil((end_date - now) / timedelta(days=1))


def urgency(days: int | None) -> Urgency:
    """Classify the days remaining before retention ends.

    Permanent retention (None) is never urgent.
    """
    if days is None:
        return Urgency.NORMAL
    if days <= 0:
        return Urgency.EXPIRED
    if days <= CRITICAL_DAYS:
        return Urgency.CRITICAL
    if days <= WARNING_DAYS:
        return Urgency.WARNING
    return Urgency.NORMAL


def resolve_disposition(rule: RetentionRule, status: ArchivalStatus) -> FinalDisposition:
    """Determine the final fate of a document entering status under rule."""
    if status == ArchivalStatus.DESTRUCTION:
        return FinalDisposition.DESTROY
    if status == ArchivalStatus.ARCHIVED:
        if rule.is_permanent:
            return FinalDisposition.RETAIN_PERMANENTLY
        if rule.auto_transition_to == ArchivalStatus.DESTRUCTION:
            return FinalDisposition.DESTROY
    return FinalDisposition.SELECTIVE_REVIEW


class RetentionPolicyResolver:
    """Looks up retention rules with fallback to a default classification.

    Usage:
        resolver = RetentionPolicyResolver(RetentionRuleSet.with_default_rules())
        rule = resolver.resolve_rule("facture", ArchivalStatus.ARCHIVED)
        end = resolver.compute_retention_end_date(rule, now)
    """

    def __init__(self, rule_set: RetentionRuleSet, strict: bool = False):
        """Initialize the resolver.

        Args:
            rule_set: Retention table to resolve against
            strict: Raise UnknownClassificationError instead of falling back
        """
        self.rule_set = rule_set
        self.strict = strict

    @property
    def default_classification(self) -> str:
        return self.rule_set.default_classification

    def resolve_rule(self, classification: str, status: ArchivalStatus) -> RetentionRule:
        """Resolve the rule for a classification and status.

        Unknown classifications use the default classification's rules and
        are logged as a warning. A known classification without a rule for
        this status also uses the default row.

        Raises:
            UnknownClassificationError: If strict and the classification is unknown
        """
        if not self.rule_set.has_classification(classification):
            error = UnknownClassificationError(classification, self.default_classification)
            if self.strict:
                raise error
            logger.warning(
                "unknown_classification",
                classification=classification,
                fallback=self.default_classification,
                status=status.value,
            )
            classification = self.default_classification

        rule = self.rule_set.get_rule(classification, status)
        if rule is None:
            rule = self.rule_set.get_rule(self.default_classification, status)
        if rule is None:
            # RetentionRuleSet.validate() guarantees the default row is complete
            raise UnknownClassificationError(classification, self.default_classification)
        return rule

    def compute_retention_end_date(
        self,
        rule: RetentionRule,
        effective_date: datetime,
    ) -> datetime | None:
        return compute_retention_end_date(rule, effective_date)

    def days_remaining(self, end_date: datetime | None, now: datetime) -> int | None:
        return days_remaining(end_date, now)

    def urgency(self, days: int | None) -> Urgency:
        return urgency(days)

    def resolve_disposition(
        self,
        rule: RetentionRule,
        status: ArchivalStatus,
    ) -> FinalDisposition:
        return resolve_disposition(rule, status)
