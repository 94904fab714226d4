"""
Reliability layer: error classification and failover.
"""

from .advisories import AdvisoryNotifier, LoggingNotifier
from .error_classifier import ErrorCategory, ErrorClassification, ErrorClassifier
from .failover import FailoverOrchestrator, reset_quota_warning

__all__ = [
    "AdvisoryNotifier",
    "LoggingNotifier",
    "ErrorCategory",
    "ErrorClassification",
    "ErrorClassifier",
    "FailoverOrchestrator",
    "reset_quota_warning",
]
