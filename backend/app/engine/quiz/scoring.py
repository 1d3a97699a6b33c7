# engine/quiz/scoring.py
"""
Pipeline de scoring d'une soumission. ZÉRO accès DB.

Appelé par : modules/quiz/service.py, scripts/quiz_maintenance.py (debug)

    Quiz DEFAULT / ONBOARDING
        réponses → score total + pourcentage → critère SimpleRange (sur le %)

    Quiz COMPLEX
        réponses → map de scores par dimension → critère ThresholdSet
                 → sinon descripteur de repli (FALLBACK)

Le résultat embarque les diagnostics d'agrégation (réponses ignorées,
orphelines, doublons) et la trace complète de classement.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from app.engine.quiz.aggregation import (
    AggregationResult,
    DimensionScoreMap,
    TotalScore,
    compute_dimension_scores,
    compute_total_score,
)
from app.engine.quiz.criteria import (
    Classification,
    evaluate_simple_criteria,
    evaluate_threshold_criteria,
)
from app.engine.quiz.model import Answer, EntityId, QuizDefinition, QuizType

logger = logging.getLogger(__name__)


@dataclass
class QuizScore:
    quiz_id:          EntityId
    quiz_type:        QuizType
    classification:   Classification
    total:            TotalScore
    dimension_scores: Optional[DimensionScoreMap] = None
    skipped_answers:        List[Answer] = field(default_factory=list)
    unassigned_answers:     List[Answer] = field(default_factory=list)
    duplicate_question_ids: List[EntityId] = field(default_factory=list)

    @property
    def is_complex(self) -> bool:
        return self.quiz_type == QuizType.COMPLEX

    @property
    def classification_label(self) -> Optional[str]:
        """Label du critère matché, ou descripteur de repli, ou None."""
        if self.classification.criterion is not None:
            return self.classification.criterion.label
        if self.classification.fallback is not None:
            return self.classification.fallback.descriptor
        return None

    def to_dict(self) -> Dict:
        return {
            "quiz_id": self.quiz_id,
            "quiz_type": self.quiz_type.value,
            "score": self.total.score,
            "max_score": self.total.max_score,
            "percentage": self.total.percentage,
            "dimension_scores": self.dimension_scores,
            "classification": self.classification_label,
            "status": self.classification.status.value,
            "diagnostics": {
                "skipped_answers": len(self.skipped_answers),
                "unassigned_answers": len(self.unassigned_answers),
                "duplicate_question_ids": self.duplicate_question_ids,
            },
        }


def score_quiz(quiz: QuizDefinition, answers: Iterable) -> QuizScore:
    """
    Score complet d'une soumission : agrégation puis classement.
    Ne lève jamais sur une donnée malformée (quiz mal configuré → FALLBACK
    ou UNCLASSIFIED, diagnostics dans la trace).
    """
    if quiz is None:
        raise ValueError("Quiz requis pour le scoring.")

    answers = [Answer.from_raw(a) for a in (answers or [])]
    total = compute_total_score(quiz, answers)

    if not quiz.is_complex:
        classification = evaluate_simple_criteria(total.percentage, quiz.simple_criteria())
        logger.debug(
            "Quiz %s : %s/%s (%s%%) → %s",
            quiz.id, total.score, total.max_score, total.percentage, classification.status.value,
        )
        return QuizScore(
            quiz_id=quiz.id,
            quiz_type=quiz.quiz_type,
            classification=classification,
            total=total,
        )

    aggregation: AggregationResult = compute_dimension_scores(quiz, answers)
    classification = evaluate_threshold_criteria(
        aggregation.scores,
        quiz.threshold_criteria(),
        quiz.ordered_dimensions(),
    )
    logger.debug("Quiz %s : %s → %s", quiz.id, aggregation.scores, classification.status.value)

    return QuizScore(
        quiz_id=quiz.id,
        quiz_type=quiz.quiz_type,
        classification=classification,
        total=total,
        dimension_scores=aggregation.scores,
        skipped_answers=aggregation.skipped_answers,
        unassigned_answers=aggregation.unassigned_answers,
        duplicate_question_ids=aggregation.duplicate_question_ids,
    )
