from .plan_rate import PlanRateSource

__all__ = ["PlanRateSource"]
