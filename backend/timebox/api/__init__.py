"""API routers."""

from timebox.api import day_plans, slots, weekly_plans

__all__ = ["day_plans", "weekly_plans", "slots"]
