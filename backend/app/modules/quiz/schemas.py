# app/modules/quiz/schemas.py
"""
Schemas d'entrée du moteur de quiz.

Deux sources hydratent les mêmes schemas :
    - lignes ORM (from_attributes)          → service, repair, audit
    - JSON brut camelCase (exports, debug)  → scripts/quiz_maintenance.py

to_engine() produit les dataclasses de engine/quiz/model.py ; l'engine ne
voit jamais ni l'ORM ni pydantic.
"""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional, Tuple, Union

from app.engine.quiz.model import (
    Answer,
    Dimension,
    GradingCriterion,
    Option,
    Question,
    QuizDefinition,
    ScoringLogic,
    SimpleRange,
    ThresholdPredicate,
    ThresholdSet,
)
from app.shared.enums import QuizType, ScoringLogicType

EntityId = Union[int, str]


def _alias(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


class _EngineInput(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# ── Structure ──────────────────────────────────────────────

class QuizOptionIn(_EngineInput):
    id: EntityId
    value: float = 0
    text: Optional[str] = ""
    order: int = 0

    def to_engine(self) -> Option:
        return Option(id=self.id, value=self.value, text=self.text or "", order=self.order)


class QuizDimensionIn(_EngineInput):
    id: EntityId
    name: str = ""
    short_name: str = Field(..., validation_alias=_alias("short_name", "shortName"))
    order: int = 0
    min_score: Optional[float] = Field(None, validation_alias=_alias("min_score", "minScore"))
    max_score: Optional[float] = Field(None, validation_alias=_alias("max_score", "maxScore"))
    threshold: Optional[float] = None
    low_label: Optional[str] = Field(None, validation_alias=_alias("low_label", "lowLabel"))
    high_label: Optional[str] = Field(None, validation_alias=_alias("high_label", "highLabel"))

    def to_engine(self) -> Dimension:
        return Dimension(
            id=self.id,
            name=self.name,
            short_name=self.short_name,
            order=self.order,
            min_score=self.min_score,
            max_score=self.max_score,
            threshold=self.threshold,
            low_label=self.low_label,
            high_label=self.high_label,
        )


class QuizQuestionIn(_EngineInput):
    id: EntityId
    order: int = 0
    dimension_id: Optional[EntityId] = Field(None, validation_alias=_alias("dimension_id", "dimensionId"))
    text: Optional[str] = ""
    options: List[QuizOptionIn] = []

    def to_engine(self) -> Question:
        return Question(
            id=self.id,
            order=self.order,
            dimension_id=self.dimension_id,
            options=[o.to_engine() for o in self.options],
            text=self.text or "",
        )


# ── Critères ───────────────────────────────────────────────

class _CriterionIn(_EngineInput):
    id: Optional[EntityId] = None
    name: str
    label: str = ""
    description: Optional[str] = None
    color: Optional[str] = None
    recommendations: List[str] = []

    @field_validator("recommendations", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v if v is not None else []


class GradingCriteriaIn(_CriterionIn):
    """Critère simple (quiz DEFAULT) : plage sur le pourcentage."""
    min_score: float = Field(..., validation_alias=_alias("min_score", "minScore"))
    max_score: float = Field(..., validation_alias=_alias("max_score", "maxScore"))

    def to_engine(self) -> GradingCriterion:
        return GradingCriterion(
            id=self.id,
            name=self.name,
            label=self.label,
            logic=SimpleRange(self.min_score, self.max_score),
            description=self.description,
            recommendations=list(self.recommendations),
            color=self.color,
            raw_logic_type=ScoringLogicType.RANGE.value,
        )


class ComplexGradingCriteriaIn(_CriterionIn):
    """Critère à seuils (quiz COMPLEX) : scoring_logic JSON non typé."""
    scoring_logic: Optional[Any] = Field(None, validation_alias=_alias("scoring_logic", "scoringLogic"))

    def to_engine(self) -> GradingCriterion:
        logic, raw_type = parse_scoring_logic(self.scoring_logic)
        return GradingCriterion(
            id=self.id,
            name=self.name,
            label=self.label,
            logic=logic,
            description=self.description,
            recommendations=list(self.recommendations),
            color=self.color,
            raw_logic_type=raw_type,
        )


def parse_scoring_logic(payload: Optional[Dict[str, Any]]) -> Tuple[Optional[ScoringLogic], Optional[str]]:
    """
    Payload JSON → ThresholdSet.

    Type absent ou non supporté ("highest", "topN"...), prédicat sans nom
    de dimension : logic=None, le type brut est conservé pour le rapport
    du checker. Ne lève jamais.
    """
    if not isinstance(payload, dict):
        return None, None

    raw_type = payload.get("type")
    if raw_type != ScoringLogicType.THRESHOLD.value:
        return None, raw_type

    entries = payload.get("dimensions")
    if not isinstance(entries, list):
        return None, raw_type

    predicates = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            return None, raw_type
        threshold = entry.get("threshold")
        if threshold is not None:
            try:
                threshold = float(threshold)
            except (TypeError, ValueError):
                return None, raw_type
        predicates.append(ThresholdPredicate(
            dimension=entry["name"],
            value=str(entry.get("value") or ""),
            threshold=threshold,
        ))
    return ThresholdSet(predicates), raw_type


# ── Quiz complet ───────────────────────────────────────────

class QuizDefinitionIn(_EngineInput):
    id: EntityId
    title: str = ""
    quiz_type: QuizType = Field(QuizType.DEFAULT, validation_alias=_alias("quiz_type", "quizType"))
    dimensions: List[QuizDimensionIn] = []
    questions: List[QuizQuestionIn] = []
    grading_criteria: List[GradingCriteriaIn] = Field(
        [], validation_alias=_alias("grading_criteria", "gradingCriteria"),
    )
    complex_criteria: List[ComplexGradingCriteriaIn] = Field(
        [], validation_alias=_alias("complex_criteria", "complexGradingCriteria"),
    )

    def to_engine(self) -> QuizDefinition:
        # Quiz COMPLEX : seuls les critères à seuils sont évalués
        source = self.complex_criteria if self.quiz_type == QuizType.COMPLEX else self.grading_criteria
        return QuizDefinition(
            id=self.id,
            quiz_type=self.quiz_type,
            dimensions=[d.to_engine() for d in self.dimensions],
            questions=[q.to_engine() for q in self.questions],
            criteria=[c.to_engine() for c in source],
            title=self.title,
        )


# ── Soumission ─────────────────────────────────────────────

class AnswerIn(_EngineInput):
    question_id: EntityId = Field(..., validation_alias=_alias("question_id", "questionId"))
    option_id: EntityId = Field(..., validation_alias=_alias("option_id", "optionId"))

    def to_engine(self) -> Answer:
        return Answer(question_id=self.question_id, option_id=self.option_id)


class QuizSubmissionIn(BaseModel):
    answers: List[AnswerIn] = Field(..., min_length=1)
    time_spent: int = Field(0, ge=0, validation_alias=_alias("time_spent", "timeSpent"))


class ScoringDebugIn(BaseModel):
    """
    Fixture du script debug : {"quiz": {...}, "answers": [...]}.
    "questions" optionnel au premier niveau : remplace quiz.questions
    (format des exports où les questions sont listées à part).
    """
    quiz: QuizDefinitionIn
    answers: List[AnswerIn] = []
    questions: Optional[List[QuizQuestionIn]] = None

    def to_engine(self) -> Tuple[QuizDefinition, List[Answer]]:
        quiz = self.quiz.to_engine()
        if self.questions is not None:
            quiz.questions = [q.to_engine() for q in self.questions]
        return quiz, [a.to_engine() for a in self.answers]
