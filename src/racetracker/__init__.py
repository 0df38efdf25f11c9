"""
racetracker: a cancellable, resumable progress runner.

A participant advances its progress by a fixed increment after every
delay until it reaches its maximum. Cancelling the task that runs it
pauses the participant; running it again resumes from where it stopped.
"""

from .config import ConfigManager, InvalidConfiguration, RunnerConfig
from .participant import (
    ParticipantState,
    RaceParticipant,
    RunnerStatus,
    cancel_and_join,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "InvalidConfiguration",
    "RunnerConfig",
    "ParticipantState",
    "RaceParticipant",
    "RunnerStatus",
    "cancel_and_join",
]
