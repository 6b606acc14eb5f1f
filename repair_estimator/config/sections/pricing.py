from repair_estimator.config.serializable import Serializable


class Pricing(Serializable):
    title = "Pricing"

    same_day_cutoff_hour: int = 14
    fallback_labor_rate_per_hour: float = 75.0
    stale_rate_days: int = 7

    def check(self) -> list[str]:
        problems = []
        if not 0 <= self.same_day_cutoff_hour <= 23:
            problems.append(f"same_day_cutoff_hour must be between 0 and 23, got {self.same_day_cutoff_hour}")
        if self.fallback_labor_rate_per_hour <= 0:
            problems.append("fallback_labor_rate_per_hour must be positive")
        if self.stale_rate_days < 0:
            problems.append("stale_rate_days cannot be negative")
        return problems
