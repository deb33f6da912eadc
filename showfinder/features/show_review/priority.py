"""
Scraping-source reinforcement.

Approvals nudge a source's priority up and rejections nudge it down so the
scraper visits productive sources first.
"""

MIN_PRIORITY = 0
MAX_PRIORITY = 100

APPROVE_DELTA = 2
REJECT_DELTA = -3


def adjust_priority(score: int, delta: int) -> int:
    """clamp(score + delta, 0, 100)"""
    return max(MIN_PRIORITY, min(MAX_PRIORITY, score + delta))
