from repair_estimator.config.sections.appraisal import Appraisal
from repair_estimator.config.sections.notifications import Notifications
from repair_estimator.config.sections.pricing import Pricing
from repair_estimator.config.sections.quote_ids import QuoteIds

__all__ = ["Appraisal", "Notifications", "Pricing", "QuoteIds"]
