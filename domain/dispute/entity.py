"""
争议生命周期的两个维度：阶段与状态
"""
from __future__ import annotations

from enum import Enum


class DisputeStage(str, Enum):
    PRE_DISPUTE = "pre_dispute"
    DISPUTE = "dispute"
    PRE_ARBITRATION = "pre_arbitration"


class DisputeStatus(str, Enum):
    OPENED = "dispute_opened"
    EXPIRED = "dispute_expired"
    ACCEPTED = "dispute_accepted"
    CANCELLED = "dispute_cancelled"
    CHALLENGED = "dispute_challenged"
    WON = "dispute_won"
    LOST = "dispute_lost"
