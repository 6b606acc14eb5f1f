from repair_estimator.config.serializable import Serializable


class QuoteIds(Serializable):
    title = "Quote IDs"

    max_allocation_attempts: int = 5

    def check(self) -> list[str]:
        if self.max_allocation_attempts < 1:
            return ["max_allocation_attempts must be at least 1"]
        return []
