"""Timebox planner backend."""
