"""Deterministic NEO risk scoring."""
from neo_watch.risk.scoring import level_for, score

__all__ = ["level_for", "score"]
