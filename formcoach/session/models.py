"""Exercise definitions, plans and finalized session results."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from formcoach.core.errors import ConfigurationError


class Category(str, Enum):
    STRENGTH = "Strength"
    CARDIO = "Cardio"
    FLEXIBILITY = "Flexibility"
    HIIT = "HIIT"
    WARMUP = "Warm Up"
    COOLDOWN = "Cool Down"


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class MuscleGroup(str, Enum):
    CHEST = "Chest"
    BACK = "Back"
    SHOULDERS = "Shoulders"
    BICEPS = "Biceps"
    TRICEPS = "Triceps"
    CORE = "Core"
    GLUTES = "Glutes"
    QUADRICEPS = "Quadriceps"
    HAMSTRINGS = "Hamstrings"
    CALVES = "Calves"
    FULL_BODY = "Full Body"


@dataclass(frozen=True)
class Exercise:
    """Static exercise definition. ``duration_seconds == 0`` means rep-driven only."""

    name: str
    duration_seconds: int = 30
    reps: Optional[int] = None
    sets: Optional[int] = None
    rest_between_sets_seconds: int = 30
    instructions: Tuple[str, ...] = ()
    description: str = ""
    category: Category = Category.STRENGTH
    difficulty: Difficulty = Difficulty.BEGINNER
    muscle_groups: Tuple[MuscleGroup, ...] = ()

    @property
    def total_sets(self) -> int:
        return self.sets or 1

    def validate(self) -> "Exercise":
        if self.duration_seconds < 0 or self.rest_between_sets_seconds < 0:
            raise ConfigurationError(f"{self.name}: negative duration or rest")
        if self.reps is not None and self.reps < 0:
            raise ConfigurationError(f"{self.name}: negative reps")
        if self.sets is not None and self.sets < 0:
            raise ConfigurationError(f"{self.name}: negative sets")
        if self.duration_seconds == 0 and not self.reps:
            raise ConfigurationError(f"{self.name}: untimed exercise needs a rep target")
        return self

    def to_dict(self) -> dict:
        data = asdict(self)
        data["instructions"] = list(self.instructions)
        data["category"] = self.category.value
        data["difficulty"] = self.difficulty.value
        data["muscle_groups"] = [m.value for m in self.muscle_groups]
        return data


@dataclass(frozen=True)
class ExercisePlan:
    """Ordered exercises executed back to back."""

    name: str
    exercises: Tuple[Exercise, ...]
    description: str = ""
    category: Category = Category.STRENGTH
    difficulty: Difficulty = Difficulty.BEGINNER
    estimated_duration_minutes: int = 30

    def __len__(self) -> int:
        return len(self.exercises)

    def validate(self) -> "ExercisePlan":
        if not self.exercises:
            raise ConfigurationError(f"plan {self.name!r} has no exercises")
        for ex in self.exercises:
            ex.validate()
        return self

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "estimated_duration_minutes": self.estimated_duration_minutes,
            "exercises": [ex.name for ex in self.exercises],
        }


@dataclass(frozen=True)
class SessionResult:
    started_at: datetime
    ended_at: datetime
    total_duration_seconds: int
    exercises_completed: int
    exercises_planned: int
    average_form_score: float = 0.0
    calories_burned: int = 0
    total_reps: int = 0
    plan_name: Optional[str] = None
    exercise_name: Optional[str] = None
    form_scores: Tuple[float, ...] = field(default=(), repr=False)

    @property
    def minutes(self) -> int:
        return self.total_duration_seconds // 60

    def to_dict(self) -> dict:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["ended_at"] = self.ended_at.isoformat()
        data.pop("form_scores")
        return data
