from __future__ import annotations

import pytest

from formcoach.core.errors import ConfigurationError
from formcoach.session.models import Category, Difficulty, Exercise
from formcoach.trainer.catalog import Catalog


def test_default_catalog_contents():
    catalog = Catalog.default()
    assert len(catalog.exercises()) == 6
    assert [p.name for p in catalog.plans()] == ["Full Body Burn", "HIIT Blast", "Quick Morning Stretch"]
    assert len(catalog.plan("Full Body Burn")) == 6
    assert catalog.plan("quick morning stretch").category is Category.WARMUP


def test_lookup_ignores_case_and_punctuation():
    catalog = Catalog.default()
    assert catalog.exercise("pushups").name == "Push-ups"
    assert catalog.exercise("JUMPING_JACKS").name == "Jumping Jacks"
    lunges = catalog.exercise("lunges")
    assert lunges.difficulty is Difficulty.INTERMEDIATE
    assert lunges.total_sets == 3


def test_unknown_names_raise():
    catalog = Catalog.default()
    with pytest.raises(ConfigurationError):
        catalog.exercise("cartwheels")
    with pytest.raises(ConfigurationError):
        catalog.plan("couch")


def test_invalid_exercise_is_not_added():
    catalog = Catalog()
    with pytest.raises(ConfigurationError):
        catalog.add_exercise(Exercise("Broken", duration_seconds=0))
    assert catalog.exercises() == []


def test_category_filter():
    catalog = Catalog.default()
    assert [e.name for e in catalog.exercises(Category.CARDIO)] == ["Jumping Jacks"]


def test_difficulty_filter():
    catalog = Catalog.default()
    assert [e.name for e in catalog.exercises(difficulty=Difficulty.ADVANCED)] == ["Burpees"]
    assert [p.name for p in catalog.plans(difficulty=Difficulty.BEGINNER)] == ["Quick Morning Stretch"]
    strength = catalog.exercises(Category.STRENGTH, Difficulty.BEGINNER)
    assert [e.name for e in strength] == ["Plank", "Push-ups", "Squats"]


def test_search_matches_name_substring_ignoring_case():
    catalog = Catalog.default()
    assert [e.name for e in catalog.exercises(search="PU")] == ["Push-ups"]
    assert [p.name for p in catalog.plans(search="b")] == ["Full Body Burn", "HIIT Blast"]
    # blank search text applies no filter
    assert len(catalog.exercises(search="  ")) == 6
    # descriptions are not searched
    assert catalog.exercises(search="chair") == []
    assert catalog.plans(Category.HIIT, search="morning") == []
