# src/sphere_stage/services/__init__.py
"""Business logic services for the Sphere application."""

from .moderation import BanDuration, ModerationGate
from .ranking_sweep import RankingSweepWorker
from .score_aggregator import ScoreAggregator
from .vote_ledger import VoteLedger

__all__ = [
    "BanDuration",
    "ModerationGate",
    "RankingSweepWorker",
    "ScoreAggregator",
    "VoteLedger",
]
