"""Refresh orchestration and the score cache."""
