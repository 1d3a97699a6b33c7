# engine/quiz/model.py
"""
Modèle en mémoire d'un quiz : snapshot figé consommé par l'engine.

L'engine ne lit jamais la DB : le service hydrate ces dataclasses
(via modules/quiz/schemas.py) puis les passe aux fonctions pures.

QuizDefinition
    ├── dimensions : [Dimension]          (quiz COMPLEX uniquement)
    ├── questions  : [Question → Option]
    └── criteria   : [GradingCriterion]
                         logic = SimpleRange   (quiz DEFAULT)
                               | ThresholdSet  (quiz COMPLEX)
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

from app.shared.enums import QuizType

EntityId = Union[int, str]


class PredicateValue(str, Enum):
    LOW  = "low"    # score <= seuil
    HIGH = "high"   # score >  seuil


@dataclass
class Option:
    id:    EntityId
    value: float
    text:  str = ""
    order: int = 0


@dataclass
class Question:
    id:           EntityId
    order:        int
    dimension_id: Optional[EntityId] = None
    options:      List[Option] = field(default_factory=list)
    text:         str = ""

    def find_option(self, option_id: EntityId) -> Optional[Option]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def max_option_value(self) -> float:
        return max((o.value for o in self.options), default=0)


@dataclass
class Dimension:
    """
    Axe de scoring d'un quiz COMPLEX.

    min_score / max_score : plage atteignable supposée (validation, défauts),
                            jamais appliquée pendant l'agrégation.
    threshold             : sépare "low" (<=) de "high" (>).
    low_label / high_label: caractères du descripteur de repli (ex: "I" / "E").
    """
    id:         EntityId
    name:       str
    short_name: str
    order:      int = 0
    min_score:  Optional[float] = None
    max_score:  Optional[float] = None
    threshold:  Optional[float] = None
    low_label:  Optional[str] = None
    high_label: Optional[str] = None


# ── Logique de scoring (union taguée à deux variantes) ───────────────────────

@dataclass
class SimpleRange:
    min_score: float
    max_score: float

    def contains(self, score: float) -> bool:
        return self.min_score <= score <= self.max_score


@dataclass
class ThresholdPredicate:
    """
    dimension : short_name de la dimension visée
    value     : "low" | "high" (chaîne brute conservée pour le diagnostic)
    threshold : None → seuil porté par la dimension
    """
    dimension: str
    value:     str
    threshold: Optional[float] = None


@dataclass
class ThresholdSet:
    predicates: List[ThresholdPredicate] = field(default_factory=list)


ScoringLogic = Union[SimpleRange, ThresholdSet]


@dataclass
class GradingCriterion:
    """
    Critère de classement. logic=None quand le payload stocké est inexploitable
    (le critère ne peut alors jamais matcher et le checker le signale).
    """
    id:              Optional[EntityId]
    name:            str
    label:           str
    logic:           Optional[ScoringLogic] = None
    description:     Optional[str] = None
    recommendations: List[str] = field(default_factory=list)
    color:           Optional[str] = None
    raw_logic_type:  Optional[str] = None

    @property
    def is_simple(self) -> bool:
        return isinstance(self.logic, SimpleRange)

    @property
    def is_threshold(self) -> bool:
        return isinstance(self.logic, ThresholdSet)


@dataclass
class QuizDefinition:
    id:         EntityId
    quiz_type:  QuizType
    dimensions: List[Dimension] = field(default_factory=list)
    questions:  List[Question] = field(default_factory=list)
    criteria:   List[GradingCriterion] = field(default_factory=list)
    title:      str = ""

    @property
    def is_complex(self) -> bool:
        return self.quiz_type == QuizType.COMPLEX

    def ordered_dimensions(self) -> List[Dimension]:
        # sorted() est stable : à ordre égal, l'ordre de déclaration prime
        return sorted(self.dimensions, key=lambda d: d.order)

    def ordered_questions(self) -> List[Question]:
        return sorted(self.questions, key=lambda q: q.order)

    def simple_criteria(self) -> List[GradingCriterion]:
        return [c for c in self.criteria if c.is_simple]

    def threshold_criteria(self) -> List[GradingCriterion]:
        return [c for c in self.criteria if not c.is_simple]

    def find_question(self, question_id: EntityId) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


@dataclass
class Answer:
    question_id: EntityId
    option_id:   EntityId

    @classmethod
    def from_raw(cls, raw: Any) -> "Answer":
        """Accepte un dict {questionId, optionId} ou un objet à attributs."""
        if isinstance(raw, Answer):
            return raw
        if isinstance(raw, dict):
            return cls(
                question_id=raw.get("question_id", raw.get("questionId")),
                option_id=raw.get("option_id", raw.get("optionId")),
            )
        return cls(question_id=raw.question_id, option_id=raw.option_id)
