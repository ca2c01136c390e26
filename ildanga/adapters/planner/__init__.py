"""Gemini plan-text generation adapter."""

from ildanga.adapters.planner.real import configuration_failure, generate_plan_from_brief, generate_plan_text

__all__ = ["configuration_failure", "generate_plan_text", "generate_plan_from_brief"]
