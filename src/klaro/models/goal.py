"""Savings goals and sinking funds."""

from __future__ import annotations

from enum import Enum

from sqlmodel import Field, SQLModel


class GoalType(str, Enum):
    GOAL = "goal"
    SINKING_FUND = "sinking_fund"


class Goal(SQLModel):
    """A savings target fed by SAVING transactions.

    ``current_amount`` is derived by the ledger and never set by callers.
    """

    id: str = Field(default="")
    name: str = Field(max_length=80)
    target_amount: float = Field(gt=0)
    current_amount: float = Field(default=0.0)
    type: GoalType = Field(default=GoalType.GOAL)
