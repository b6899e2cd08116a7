from .shipping_plan_controller import shipping_plan_router

__all__ = ["shipping_plan_router"]
