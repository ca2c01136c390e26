"""Prompt text for external AI assistants."""

from ildanga.nlg.prompt_builder import build_generation_prompt, style_label, synthesize_prompt

__all__ = ["build_generation_prompt", "style_label", "synthesize_prompt"]
