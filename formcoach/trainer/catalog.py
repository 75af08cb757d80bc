"""Built-in exercise catalog.

Provides the default exercises and plans offered on first launch, and
name-based lookup used by the session endpoints.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from loguru import logger

from formcoach.core.errors import ConfigurationError
from formcoach.session.models import (
    Category,
    Difficulty,
    Exercise,
    ExercisePlan,
    MuscleGroup,
)

SQUATS = Exercise(
    name="Squats",
    description="A compound lower body workout targeting quads, glutes, and core.",
    category=Category.STRENGTH,
    difficulty=Difficulty.BEGINNER,
    muscle_groups=(MuscleGroup.QUADRICEPS, MuscleGroup.GLUTES, MuscleGroup.CORE),
    duration_seconds=45,
    reps=12,
    sets=3,
    instructions=(
        "Stand with feet shoulder-width apart",
        "Lower your body as if sitting back into a chair",
        "Keep your chest up and core engaged",
        "Push through your heels to stand",
    ),
)

PUSH_UPS = Exercise(
    name="Push-ups",
    description="Classic upper body workout for chest, shoulders, and triceps.",
    category=Category.STRENGTH,
    difficulty=Difficulty.BEGINNER,
    muscle_groups=(MuscleGroup.CHEST, MuscleGroup.SHOULDERS, MuscleGroup.TRICEPS),
    duration_seconds=45,
    reps=10,
    sets=3,
    instructions=(
        "Start in a plank position",
        "Lower your chest to the ground",
        "Keep your core tight",
        "Push back up to starting position",
    ),
)

JUMPING_JACKS = Exercise(
    name="Jumping Jacks",
    description="Full body cardio workout to elevate heart rate.",
    category=Category.CARDIO,
    difficulty=Difficulty.BEGINNER,
    muscle_groups=(MuscleGroup.FULL_BODY,),
    duration_seconds=60,
    instructions=(
        "Start standing with arms at sides",
        "Jump while spreading legs and raising arms",
        "Return to starting position",
        "Repeat at a steady pace",
    ),
)

LUNGES = Exercise(
    name="Lunges",
    description="Unilateral leg workout for balance and strength.",
    category=Category.STRENGTH,
    difficulty=Difficulty.INTERMEDIATE,
    muscle_groups=(MuscleGroup.QUADRICEPS, MuscleGroup.GLUTES, MuscleGroup.HAMSTRINGS),
    duration_seconds=60,
    reps=10,
    sets=3,
    instructions=(
        "Step forward with one leg",
        "Lower until both knees are at 90 degrees",
        "Push back to starting position",
        "Alternate legs",
    ),
)

PLANK = Exercise(
    name="Plank",
    description="Isometric core workout for stability and strength.",
    category=Category.STRENGTH,
    difficulty=Difficulty.BEGINNER,
    muscle_groups=(MuscleGroup.CORE, MuscleGroup.SHOULDERS),
    duration_seconds=30,
    instructions=(
        "Start in a forearm plank position",
        "Keep your body in a straight line",
        "Engage your core",
        "Hold the position",
    ),
)

BURPEES = Exercise(
    name="Burpees",
    description="High-intensity full body workout.",
    category=Category.HIIT,
    difficulty=Difficulty.ADVANCED,
    muscle_groups=(MuscleGroup.FULL_BODY,),
    duration_seconds=45,
    reps=10,
    sets=3,
    instructions=(
        "Start standing",
        "Drop into a squat and place hands on floor",
        "Jump feet back to plank",
        "Do a push-up, jump feet forward, then jump up",
    ),
)

EXERCISES = (SQUATS, PUSH_UPS, JUMPING_JACKS, LUNGES, PLANK, BURPEES)

PLANS = (
    ExercisePlan(
        name="Quick Morning Stretch",
        description="Start your day right with this energizing routine.",
        category=Category.WARMUP,
        difficulty=Difficulty.BEGINNER,
        exercises=EXERCISES[:3],
        estimated_duration_minutes=15,
    ),
    ExercisePlan(
        name="Full Body Burn",
        description="A complete plan hitting all major muscle groups.",
        category=Category.STRENGTH,
        difficulty=Difficulty.INTERMEDIATE,
        exercises=EXERCISES,
        estimated_duration_minutes=30,
    ),
    ExercisePlan(
        name="HIIT Blast",
        description="High intensity intervals for maximum calorie burn.",
        category=Category.HIIT,
        difficulty=Difficulty.ADVANCED,
        exercises=EXERCISES[-3:],
        estimated_duration_minutes=20,
    ),
)


def _key(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


def _matches(
    item: Union[Exercise, ExercisePlan],
    category: Optional[Category],
    difficulty: Optional[Difficulty],
    search: Optional[str],
) -> bool:
    """All given filters must hold; search is a case-insensitive name substring."""
    if category is not None and item.category != category:
        return False
    if difficulty is not None and item.difficulty != difficulty:
        return False
    text = (search or "").strip().casefold()
    return not text or text in item.name.casefold()


class Catalog:
    """Name-indexed exercises and plans."""

    def __init__(self) -> None:
        self._exercises: Dict[str, Exercise] = {}
        self._plans: Dict[str, ExercisePlan] = {}

    @classmethod
    def default(cls) -> "Catalog":
        catalog = cls()
        for ex in EXERCISES:
            catalog.add_exercise(ex)
        for plan in PLANS:
            catalog.add_plan(plan)
        logger.info("Catalog seeded exercises={} plans={}", len(EXERCISES), len(PLANS))
        return catalog

    def add_exercise(self, exercise: Exercise) -> None:
        self._exercises[_key(exercise.name)] = exercise.validate()

    def add_plan(self, plan: ExercisePlan) -> None:
        self._plans[_key(plan.name)] = plan.validate()

    def exercises(
        self,
        category: Optional[Category] = None,
        difficulty: Optional[Difficulty] = None,
        search: Optional[str] = None,
    ) -> List[Exercise]:
        items = sorted(self._exercises.values(), key=lambda e: e.name)
        return [e for e in items if _matches(e, category, difficulty, search)]

    def plans(
        self,
        category: Optional[Category] = None,
        difficulty: Optional[Difficulty] = None,
        search: Optional[str] = None,
    ) -> List[ExercisePlan]:
        items = sorted(self._plans.values(), key=lambda p: p.name)
        return [p for p in items if _matches(p, category, difficulty, search)]

    def exercise(self, name: str) -> Exercise:
        try:
            return self._exercises[_key(name)]
        except KeyError:
            raise ConfigurationError(f"unknown exercise: {name!r}") from None

    def plan(self, name: str) -> ExercisePlan:
        try:
            return self._plans[_key(name)]
        except KeyError:
            raise ConfigurationError(f"unknown plan: {name!r}") from None
