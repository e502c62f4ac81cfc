"""
Progression module - a run of matches.

Provides:
- New game / continue
- Next battle after a win, retry after a loss
- Abandoning a run (progress reset)
- Session win/loss tally
"""

from duelkit.progression.campaign import (
    Campaign,
    CampaignError,
    MatchInProgressError,
)

__all__ = [
    "Campaign",
    "CampaignError",
    "MatchInProgressError",
]
