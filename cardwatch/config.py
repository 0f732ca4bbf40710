"""
Run configuration
Defaults from constants, overridable from environment and CLI
"""
import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    BURST_WINDOW_SEC,
    BURST_COUNT_THRESHOLD,
    DEFAULT_SCHEDULE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_EXECUTOR,
    EXECUTOR_KINDS,
)


class ScheduleKind(Enum):
    """How blocks are handed out to workers"""
    STATIC = "static"
    DYNAMIC = "dynamic"
    GUIDED = "guided"

    @classmethod
    def from_string(cls, kind: str) -> 'ScheduleKind':
        for schedule in cls:
            if schedule.value == kind.lower():
                return schedule
        raise ValueError(f"Unknown schedule: {kind}. Available: {[s.value for s in cls]}")


def default_workers() -> int:
    """All available hardware threads"""
    return os.cpu_count() or 1


class RunConfig(BaseModel):
    """
    Parameters for one detection run

    window_sec / threshold change the reported statistics; workers,
    schedule, chunk_size and executor only change how fast they are computed.
    """
    model_config = ConfigDict(frozen=True)

    window_sec: int = Field(default=BURST_WINDOW_SEC, ge=0)
    threshold: int = Field(default=BURST_COUNT_THRESHOLD, ge=1)
    workers: int = Field(default_factory=default_workers, ge=1)
    schedule: ScheduleKind = ScheduleKind(DEFAULT_SCHEDULE)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=0)
    executor: str = DEFAULT_EXECUTOR

    @field_validator("schedule", mode="before")
    @classmethod
    def _parse_schedule(cls, value):
        if isinstance(value, str):
            return ScheduleKind.from_string(value)
        return value

    @field_validator("executor")
    @classmethod
    def _check_executor(cls, value: str) -> str:
        value = value.lower()
        if value not in EXECUTOR_KINDS:
            raise ValueError(f"Unknown executor: {value}. Available: {EXECUTOR_KINDS}")
        return value

    @classmethod
    def from_env(cls, **overrides) -> 'RunConfig':
        """
        Build config from CARDWATCH_* environment variables

        Args:
            overrides: explicit values (e.g. from CLI flags); None means unset

        Returns:
            Validated RunConfig
        """
        env = {
            "window_sec": os.getenv("CARDWATCH_BURST_WINDOW_SEC"),
            "threshold": os.getenv("CARDWATCH_BURST_THRESHOLD"),
            "workers": os.getenv("CARDWATCH_WORKERS"),
            "schedule": os.getenv("CARDWATCH_SCHEDULE"),
            "chunk_size": os.getenv("CARDWATCH_CHUNK_SIZE"),
            "executor": os.getenv("CARDWATCH_EXECUTOR"),
        }
        values = {key: value for key, value in env.items() if value is not None}
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def describe(self, worker_count: Optional[int] = None) -> str:
        workers = worker_count if worker_count is not None else self.workers
        return (
            f"executor={self.executor}, workers={workers}, "
            f"schedule={self.schedule.value}, chunk={self.chunk_size}, "
            f"W={self.window_sec}s, T={self.threshold}"
        )
