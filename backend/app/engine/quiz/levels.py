# engine/quiz/levels.py
"""
Restitution d'un score : niveau + textes affichés à l'utilisateur.

Côté appelant du classement : l'évaluateur renvoie MATCHED / FALLBACK /
UNCLASSIFIED, ce module décide quoi afficher.

    DEFAULT matché     → textes du critère, niveau déduit de son nom
    DEFAULT non matché → barème par pourcentage (content/quiz_feedback.py)
    COMPLEX matché     → label du critère, pas de niveau
    COMPLEX non matché → descripteur de repli, is_fallback=True
"""
from dataclasses import dataclass, field
from typing import List, Optional

from app.content.quiz_feedback import (
    BAND_EXCELLENT,
    BAND_FAIR,
    BAND_GOOD,
    GRADING_BANDS,
    MATCHED_AREAS_OF_IMPROVEMENT,
    MATCHED_SUPPORT_NEEDED,
    default_criterion_feedback,
    fallback_feedback,
)
from app.engine.quiz.scoring import QuizScore
from app.shared.enums import QuizResultLevel

# Mots-clés du nom de critère → niveau (premier groupe trouvé gagne)
LEVEL_KEYWORDS = [
    (("excellent", "master"), QuizResultLevel.EXCELLENT),
    (("good", "builder"),     QuizResultLevel.GOOD),
    (("fair", "learner"),     QuizResultLevel.FAIR),
]


@dataclass
class ResultFeedback:
    classification:       Optional[str]
    level:                Optional[QuizResultLevel]
    feedback:             str
    recommendations:      List[str] = field(default_factory=list)
    areas_of_improvement: List[str] = field(default_factory=list)
    support_needed:       List[str] = field(default_factory=list)
    is_fallback:          bool = False


def level_from_criterion_name(name: Optional[str]) -> QuizResultLevel:
    name_lower = (name or "").lower()
    for keywords, level in LEVEL_KEYWORDS:
        if any(k in name_lower for k in keywords):
            return level
    return QuizResultLevel.NEEDS_IMPROVEMENT


def level_from_percentage(percentage: float) -> QuizResultLevel:
    if percentage >= BAND_EXCELLENT:
        return QuizResultLevel.EXCELLENT
    if percentage >= BAND_GOOD:
        return QuizResultLevel.GOOD
    if percentage >= BAND_FAIR:
        return QuizResultLevel.FAIR
    return QuizResultLevel.NEEDS_IMPROVEMENT


def build_result_feedback(quiz_score: QuizScore) -> ResultFeedback:
    classification = quiz_score.classification
    criterion = classification.criterion

    if quiz_score.is_complex:
        if criterion is not None:
            return ResultFeedback(
                classification=criterion.label or criterion.name,
                level=None,
                feedback=criterion.description or default_criterion_feedback(criterion.name),
                recommendations=list(criterion.recommendations),
            )
        if classification.fallback is not None:
            descriptor = classification.fallback.descriptor
            return ResultFeedback(
                classification=descriptor,
                level=None,
                feedback=fallback_feedback(descriptor),
                is_fallback=True,
            )
        return ResultFeedback(classification=None, level=None, feedback="")

    if criterion is not None:
        return ResultFeedback(
            classification=criterion.label,
            level=level_from_criterion_name(criterion.name),
            feedback=criterion.description or default_criterion_feedback(criterion.name),
            recommendations=list(criterion.recommendations),
            areas_of_improvement=list(MATCHED_AREAS_OF_IMPROVEMENT),
            support_needed=list(MATCHED_SUPPORT_NEEDED),
        )

    level = level_from_percentage(quiz_score.total.percentage)
    band = GRADING_BANDS[level]
    return ResultFeedback(
        classification=band["classification"],
        level=level,
        feedback=band["feedback"],
        recommendations=list(band["recommendations"]),
        areas_of_improvement=list(band["areas_of_improvement"]),
        support_needed=list(band["support_needed"]),
    )
