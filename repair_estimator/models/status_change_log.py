from dataclasses import dataclass, field
from datetime import datetime

from repair_estimator.base.model import BaseModel
from repair_estimator.models.enums import QuoteStatus


@dataclass(kw_only=True)
class StatusChangeLog(BaseModel):
    """Append-only audit entry written once per successful status transition."""

    record_type = "StatusChangeLog"

    quote_id: str
    previous_status: QuoteStatus
    new_status: QuoteStatus
    changed_by: str
    changed_at: datetime = field(default_factory=datetime.now)
    notes: str | None = None
