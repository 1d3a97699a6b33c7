# tests/conftest.py
"""
Fixtures et factories partagées sur l'ensemble de la suite de tests.

Deux couches :
    1. Engine  : fonctions pures, aucun mock nécessaire (factories de dataclasses)
    2. Service : mocks AsyncSession + repo via pytest-mock (factories SimpleNamespace
                 qui imitent les lignes ORM)
"""
from types import SimpleNamespace
from datetime import datetime
from typing import List, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.ext.asyncio import AsyncSession

from app.engine.quiz.model import (
    Answer,
    Dimension,
    GradingCriterion,
    Option,
    Question,
    QuizDefinition,
    SimpleRange,
    ThresholdPredicate,
    ThresholdSet,
)
from app.shared.enums import QuizStatus, QuizType


# ── Engine : dataclasses ──────────────────────────────────────────────────────

def make_quiz_question(id: int, order: int, dimension_id=None, values: Sequence[float] = (0, 1, 2, 3)) -> Question:
    """Options d'id {question_id * 100 + index}, valeurs dans l'ordre donné."""
    return Question(
        id=id,
        order=order,
        dimension_id=dimension_id,
        options=[Option(id=id * 100 + i, value=v, order=i) for i, v in enumerate(values)],
        text=f"Question {id}",
    )


def answer_for(question: Question, value: float) -> Answer:
    """Réponse qui sélectionne l'option de valeur `value`."""
    option = next(o for o in question.options if o.value == value)
    return Answer(question_id=question.id, option_id=option.id)


def make_dimension(**kwargs) -> Dimension:
    defaults = {
        "id": 1,
        "name": "Extraversion/Introversion",
        "short_name": "E/I",
        "order": 0,
        "min_score": 0,
        "max_score": 30,
        "threshold": 15,
        "low_label": "I",
        "high_label": "E",
    }
    defaults.update(kwargs)
    return Dimension(**defaults)


def make_threshold_criterion(name: str, predicates: List[Tuple], label: str = None, **kwargs) -> GradingCriterion:
    """predicates : [(short_name, "low"|"high", seuil), ...]"""
    return GradingCriterion(
        id=kwargs.pop("id", None),
        name=name,
        label=label or name,
        logic=ThresholdSet([ThresholdPredicate(d, v, t) for d, v, t in predicates]),
        **kwargs,
    )


def make_range_criterion(name: str, min_score: float, max_score: float, label: str = None, **kwargs) -> GradingCriterion:
    return GradingCriterion(
        id=kwargs.pop("id", None),
        name=name,
        label=label or name,
        logic=SimpleRange(min_score, max_score),
        **kwargs,
    )


def mbti_dimensions() -> List[Dimension]:
    """4 dimensions, seuils [15, 20, 5, 5], labels I/E, N/S, F/T, P/J."""
    return [
        make_dimension(id=1, name="Extraversion/Introversion", short_name="E/I", order=0,
                       threshold=15, low_label="I", high_label="E"),
        make_dimension(id=2, name="Sensing/Intuition", short_name="S/N", order=1,
                       threshold=20, low_label="N", high_label="S"),
        make_dimension(id=3, name="Thinking/Feeling", short_name="T/F", order=2,
                       threshold=5, low_label="F", high_label="T"),
        make_dimension(id=4, name="Judging/Perceiving", short_name="J/P", order=3,
                       threshold=5, low_label="P", high_label="J"),
    ]


def mbti_criteria() -> List[GradingCriterion]:
    return [
        make_threshold_criterion("ISTJ", [
            ("E/I", "low", 15), ("S/N", "high", 20), ("T/F", "high", 5), ("J/P", "high", 5),
        ], label="The Inspector", id=1),
        make_threshold_criterion("ENFP", [
            ("E/I", "high", 15), ("S/N", "low", 20), ("T/F", "low", 5), ("J/P", "low", 5),
        ], label="The Campaigner", id=2),
    ]


def mbti_quiz(**kwargs) -> QuizDefinition:
    """
    Quiz COMPLEX : 4 dimensions, 8 questions (2 par dimension, ordre 0..7),
    options de valeurs (0, 5, 10, 15).
    """
    questions = [
        make_quiz_question(id=i + 1, order=i, dimension_id=i // 2 + 1, values=(0, 5, 10, 15))
        for i in range(8)
    ]
    defaults = {
        "id": 1,
        "quiz_type": QuizType.COMPLEX,
        "dimensions": mbti_dimensions(),
        "questions": questions,
        "criteria": mbti_criteria(),
        "title": "Personality Type",
    }
    defaults.update(kwargs)
    return QuizDefinition(**defaults)


def default_quiz(**kwargs) -> QuizDefinition:
    """Quiz DEFAULT : 5 questions (valeurs 0..4), 4 critères sur le pourcentage."""
    questions = [make_quiz_question(id=i + 1, order=i, values=(0, 1, 2, 3, 4)) for i in range(5)]
    defaults = {
        "id": 2,
        "quiz_type": QuizType.DEFAULT,
        "questions": questions,
        "criteria": [
            make_range_criterion("Master", 80, 100, label="Wellness Master", id=1,
                                 description="Top of the class.", recommendations=["Keep going"]),
            make_range_criterion("Builder", 60, 79, label="Habit Builder", id=2),
            make_range_criterion("Learner", 40, 59, label="Active Learner", id=3),
            make_range_criterion("Starter", 0, 39, label="Getting Started", id=4),
        ],
        "title": "Wellness Check",
    }
    defaults.update(kwargs)
    return QuizDefinition(**defaults)


class RecordingWriter:
    """Writer de réparation en mémoire : enregistre chaque appel dans l'ordre."""

    def __init__(self):
        self.calls: list = []

    def set_question_dimension(self, question_id, dimension_id) -> None:
        self.calls.append(("question", question_id, dimension_id))

    def set_dimension_range(self, dimension_id, min_score, max_score) -> None:
        self.calls.append(("range", dimension_id, min_score, max_score))


# ── Service : lignes ORM simulées ─────────────────────────────────────────────

def make_option_row(**kwargs) -> SimpleNamespace:
    defaults = {"id": 101, "question_id": 1, "text": "Often", "value": 1, "order": 0}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_question_row(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "quiz_id": 1,
        "dimension_id": 1,
        "text": "I enjoy meeting new people.",
        "order": 0,
        "options": [
            make_option_row(id=101, value=0, order=0),
            make_option_row(id=102, value=5, order=1),
        ],
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_dimension_row(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "quiz_id": 1,
        "name": "Extraversion/Introversion",
        "short_name": "E/I",
        "order": 0,
        "min_score": 0,
        "max_score": 10,
        "threshold": 3,
        "low_label": "I",
        "high_label": "E",
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_criteria_row(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "quiz_id": 1,
        "name": "Excellent",
        "label": "Wellness Master",
        "min_score": 80,
        "max_score": 100,
        "color": "#22c55e",
        "description": None,
        "recommendations": ["Keep going"],
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_complex_criteria_row(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "quiz_id": 1,
        "name": "Extravert",
        "label": "The Extravert",
        "color": None,
        "description": None,
        "recommendations": [],
        "scoring_logic": {
            "type": "threshold",
            "dimensions": [{"name": "E/I", "value": "high", "threshold": 3}],
        },
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_quiz_row(**kwargs) -> SimpleNamespace:
    """Quiz COMPLEX minimal : 1 dimension, 2 questions, 1 critère."""
    defaults = {
        "id": 1,
        "title": "Social Energy",
        "quiz_type": QuizType.COMPLEX.value,
        "status": QuizStatus.ACTIVE.value,
        "is_public": True,
        "is_available": True,
        "total_attempts": 0,
        "completed_attempts": 0,
        "average_score": 0,
        "average_completion_time": 0,
        "dimensions": [make_dimension_row()],
        "questions": [
            make_question_row(id=1, order=0, options=[
                make_option_row(id=101, question_id=1, value=0),
                make_option_row(id=102, question_id=1, value=5, order=1),
            ]),
            make_question_row(id=2, order=1, options=[
                make_option_row(id=201, question_id=2, value=0),
                make_option_row(id=202, question_id=2, value=5, order=1),
            ]),
        ],
        "grading_criteria": [],
        "complex_criteria": [make_complex_criteria_row()],
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def make_quiz_result(**kwargs) -> SimpleNamespace:
    defaults = {
        "id": 1,
        "quiz_id": 1,
        "user_id": "user-1",
        "score": 10,
        "max_score": 10,
        "percentage": 100,
        "dimension_scores": {"E/I": 10},
        "classification": "The Extravert",
        "is_fallback": False,
        "level": None,
        "feedback": "",
        "recommendations": [],
        "answers": [
            {"question_id": 1, "option_id": 102},
            {"question_id": 2, "option_id": 202},
        ],
        "time_spent": 8,
        "completed_at": datetime(2026, 1, 15, 10, 0, 0),
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


# ── DB mock factory ───────────────────────────────────────────────────────────

def make_async_db() -> AsyncMock:
    """
    AsyncMock simulant une AsyncSession SQLAlchemy.
    Fournit une side_effect sur refresh() pour simuler le SET d'ID par le DB.
    """
    db = AsyncMock(spec=AsyncSession)
    added_objects: list = []

    def capture_add(obj):
        added_objects.append(obj)

    db.add = MagicMock(side_effect=capture_add)

    async def refresh_side_effect(obj):
        if not getattr(obj, "id", None):
            obj.id = 1

    db.refresh = AsyncMock(side_effect=refresh_side_effect)
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.added_objects = added_objects

    return db
