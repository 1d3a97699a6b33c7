# engine/quiz/aggregation.py
"""
Agrégation des réponses : ZÉRO accès DB.

Deux agrégats :
    - compute_dimension_scores() : score par dimension (quiz COMPLEX)
    - compute_total_score()      : score unique + pourcentage (quiz DEFAULT)

Tolérance volontaire : une réponse qui référence une question ou une option
absente du quiz est ignorée (soumission client obsolète), jamais levée.
Elle est remontée dans le résultat pour diagnostic.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from app.engine.quiz.model import Answer, EntityId, QuizDefinition

logger = logging.getLogger(__name__)

DimensionScoreMap = Dict[str, float]


@dataclass
class AggregationResult:
    """
    scores                 : {short_name: score} : toutes les dimensions déclarées
    skipped_answers        : question ou option inconnue du quiz
    unassigned_answers     : question sans dimension valide (orpheline)
    duplicate_question_ids : questions répondues plusieurs fois (cumulées)
    """
    scores:                 DimensionScoreMap
    skipped_answers:        List[Answer] = field(default_factory=list)
    unassigned_answers:     List[Answer] = field(default_factory=list)
    duplicate_question_ids: List[EntityId] = field(default_factory=list)


@dataclass
class TotalScore:
    score:      float
    max_score:  float
    percentage: int


def compute_dimension_scores(quiz: QuizDefinition, answers: Iterable) -> AggregationResult:
    """
    Somme des valeurs d'options choisies, par dimension.

    Chaque dimension déclarée démarre à 0 et reste à 0 si aucune réponse
    ne la touche (état terminal valide). Une question dont dimension_id est
    nul ou pointe hors du quiz ne contribue à aucune dimension.
    Les doublons de réponses sur une même question sont cumulés.
    """
    if quiz is None:
        raise ValueError("Quiz requis pour l'agrégation.")

    dimensions = quiz.ordered_dimensions()
    scores: DimensionScoreMap = {d.short_name: 0 for d in dimensions}
    short_name_by_dim_id = {d.id: d.short_name for d in dimensions}
    questions_by_id = {q.id: q for q in quiz.questions}

    result = AggregationResult(scores=scores)
    seen: set = set()

    for raw in answers or []:
        answer = Answer.from_raw(raw)
        question = questions_by_id.get(answer.question_id)
        option = question.find_option(answer.option_id) if question else None
        if option is None:
            logger.debug("Réponse ignorée (question/option inconnue) : %s", answer)
            result.skipped_answers.append(answer)
            continue

        if answer.question_id in seen and answer.question_id not in result.duplicate_question_ids:
            result.duplicate_question_ids.append(answer.question_id)
        seen.add(answer.question_id)

        short_name = short_name_by_dim_id.get(question.dimension_id)
        if short_name is None:
            logger.debug("Question %s sans dimension valide : réponse perdue", question.id)
            result.unassigned_answers.append(answer)
            continue

        scores[short_name] += option.value

    return result


def compute_total_score(quiz: QuizDefinition, answers: Iterable) -> TotalScore:
    """
    Score unique d'un quiz DEFAULT.

    max_score cumule la meilleure option de chaque question répondue
    (pas de toutes les questions du quiz) ; pourcentage arrondi au demi
    supérieur, 0 si max_score est nul.
    """
    if quiz is None:
        raise ValueError("Quiz requis pour l'agrégation.")

    questions_by_id = {q.id: q for q in quiz.questions}
    total = 0
    max_score = 0

    for raw in answers or []:
        answer = Answer.from_raw(raw)
        question = questions_by_id.get(answer.question_id)
        if question is None:
            continue
        option = question.find_option(answer.option_id)
        if option is not None:
            total += option.value
        max_score += question.max_option_value()

    return TotalScore(
        score=total,
        max_score=max_score,
        percentage=percentage_of(total, max_score),
    )


def percentage_of(score: float, max_score: float) -> int:
    if not max_score:
        return 0
    return round_half_up(score / max_score * 100)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
