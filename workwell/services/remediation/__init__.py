"""Remediation - risk, measures and notifications for actionable surveys.

Turns a HIGH or MEDIUM survey analysis into one risk register entry, a
rule-driven set of follow-up measures, and notifications to the
occupational health and safety role groups.
"""
from .measure_rules import (
    DEFAULT_MEASURE_RULES,
    MeasureDraft,
    MeasureRule,
    RemediationContext,
    draft_measures,
)
from .notifier import (
    KinesisNotificationPublisher,
    Notification,
    NotificationDispatcher,
    NotificationSink,
)
from .synthesizer import (
    PartialPersistenceError,
    RemediationSynthesizer,
    SynthesisResult,
    calculate_likelihood,
)

__all__ = [
    "DEFAULT_MEASURE_RULES",
    "MeasureDraft",
    "MeasureRule",
    "RemediationContext",
    "draft_measures",
    "KinesisNotificationPublisher",
    "Notification",
    "NotificationDispatcher",
    "NotificationSink",
    "PartialPersistenceError",
    "RemediationSynthesizer",
    "SynthesisResult",
    "calculate_likelihood",
]
