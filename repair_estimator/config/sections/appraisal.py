from repair_estimator.config.serializable import Serializable


class Appraisal(Serializable):
    title = "Appraisal"

    expedite_multiplier: float = 1.5
    update_window_years: int = 10
    update_discount_factor: float = 0.5

    def check(self) -> list[str]:
        problems = []
        if self.expedite_multiplier < 1:
            problems.append("expedite_multiplier below 1 would discount expedited work")
        if self.update_window_years < 0:
            problems.append("update_window_years cannot be negative")
        if not 0 <= self.update_discount_factor <= 1:
            problems.append("update_discount_factor must be between 0 and 1")
        return problems
