"""Exam question explainer: structured answers recovered from LLM output."""

__version__ = "0.1.0"
