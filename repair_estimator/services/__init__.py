from repair_estimator.services.appraisal_calculator import AppraisalCalculator, AppraisalPricingResult
from repair_estimator.services.notifier import LoggingNotifier, Notification, Notifier, WebhookNotifier
from repair_estimator.services.pricing_engine import PricingBreakdown, PricingEngine, PricingResult
from repair_estimator.services.quote_ids import QuoteIDGenerator, QuoteIDStatistics
from repair_estimator.services.workflow import WorkflowService

__all__ = [
    "AppraisalCalculator",
    "AppraisalPricingResult",
    "LoggingNotifier",
    "Notification",
    "Notifier",
    "PricingBreakdown",
    "PricingEngine",
    "PricingResult",
    "QuoteIDGenerator",
    "QuoteIDStatistics",
    "WebhookNotifier",
    "WorkflowService",
]
