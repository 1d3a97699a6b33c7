# engine/quiz/criteria.py
"""
Évaluation des critères de classement. ZÉRO accès DB.

Deux familles de critères, évaluées dans l'ordre de déclaration :

    SimpleRange  (quiz DEFAULT) : min_score <= score <= max_score
    ThresholdSet (quiz COMPLEX) : ET logique de prédicats par dimension
        low  → score <= seuil   (seuil INCLUS)
        high → score >  seuil   (strictement supérieur)

Le premier critère qui matche gagne (chevauchements → premier déclaré).
Sans match sur un quiz COMPLEX, un descripteur de repli est construit
dimension par dimension (ex: "ISTJ"). Ce n'est jamais un match : il est
tagué FALLBACK pour l'appelant.

Chaque comparaison est tracée (CriterionTrace / PredicateTrace) pour le
débogage des quiz mal configurés, indépendamment des logs.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from app.engine.quiz.model import (
    Dimension,
    GradingCriterion,
    PredicateValue,
    SimpleRange,
    ThresholdPredicate,
    ThresholdSet,
)

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "?"   # Caractère du descripteur quand une dimension est incalculable


class ClassificationStatus(str, Enum):
    MATCHED      = "matched"
    FALLBACK     = "fallback"      # Descripteur par dimension, aucun critère stocké
    UNCLASSIFIED = "unclassified"


class TraceReason(str, Enum):
    UNKNOWN_DIMENSION = "unknown_dimension"   # Dimension absente de la map de scores
    MISSING_THRESHOLD = "missing_threshold"
    INVALID_VALUE     = "invalid_value"       # Ni "low" ni "high"
    INVALID_LOGIC     = "invalid_logic"       # Payload de scoring inexploitable
    NO_PREDICATES     = "no_predicates"


# ── Trace structurée ──────────────────────────────────────────────────────────

@dataclass
class PredicateTrace:
    dimension:  Optional[str]
    expected:   str
    threshold:  Optional[float]
    score:      Optional[float]
    comparison: str
    matched:    bool
    reason:     Optional[TraceReason] = None

    def to_dict(self) -> Dict:
        return {
            "dimension": self.dimension,
            "expected": self.expected,
            "threshold": self.threshold,
            "score": self.score,
            "comparison": self.comparison,
            "matched": self.matched,
            "reason": self.reason.value if self.reason else None,
        }


@dataclass
class CriterionTrace:
    criterion:  str
    matched:    bool
    predicates: List[PredicateTrace] = field(default_factory=list)
    reason:     Optional[TraceReason] = None

    def to_dict(self) -> Dict:
        return {
            "criterion": self.criterion,
            "matched": self.matched,
            "reason": self.reason.value if self.reason else None,
            "predicates": [p.to_dict() for p in self.predicates],
        }


@dataclass
class FallbackDescriptor:
    descriptor: str
    is_partial: bool   # True si au moins une dimension est incalculable ("?")


@dataclass
class Classification:
    status:    ClassificationStatus
    criterion: Optional[GradingCriterion] = None
    fallback:  Optional[FallbackDescriptor] = None
    trace:     List[CriterionTrace] = field(default_factory=list)

    @property
    def is_match(self) -> bool:
        return self.status == ClassificationStatus.MATCHED

    @property
    def is_fallback(self) -> bool:
        return self.status == ClassificationStatus.FALLBACK

    def to_dict(self) -> Dict:
        return {
            "status": self.status.value,
            "criterion": self.criterion.name if self.criterion else None,
            "label": self.criterion.label if self.criterion else None,
            "fallback": self.fallback.descriptor if self.fallback else None,
            "trace": [t.to_dict() for t in self.trace],
        }


# ── Quiz DEFAULT ──────────────────────────────────────────────────────────────

def evaluate_simple_criteria(
    score: float,
    criteria: Sequence[GradingCriterion],
) -> Classification:
    """Premier critère dont [min_score, max_score] contient le score agrégé."""
    trace: List[CriterionTrace] = []

    for criterion in criteria:
        if not isinstance(criterion.logic, SimpleRange):
            trace.append(CriterionTrace(criterion.name, False, reason=TraceReason.INVALID_LOGIC))
            continue

        rng = criterion.logic
        matched = rng.contains(score)
        trace.append(CriterionTrace(
            criterion=criterion.name,
            matched=matched,
            predicates=[PredicateTrace(
                dimension=None,
                expected="range",
                threshold=None,
                score=score,
                comparison=f"{rng.min_score} <= {score} <= {rng.max_score}",
                matched=matched,
            )],
        ))
        if matched:
            return Classification(ClassificationStatus.MATCHED, criterion=criterion, trace=trace)

    return Classification(ClassificationStatus.UNCLASSIFIED, trace=trace)


# ── Quiz COMPLEX ──────────────────────────────────────────────────────────────

def evaluate_threshold_criteria(
    scores: Dict[str, float],
    criteria: Sequence[GradingCriterion],
    dimensions: Optional[Sequence[Dimension]] = None,
) -> Classification:
    """
    Premier critère dont TOUS les prédicats tiennent.

    Tous les prédicats d'un critère sont évalués (pas de court-circuit) pour
    que la trace soit complète ; l'itération s'arrête au premier critère qui
    matche. Sans match : descripteur de repli si des dimensions sont fournies.
    """
    dimensions = list(dimensions or [])
    dims_by_short_name = {d.short_name: d for d in dimensions}
    trace: List[CriterionTrace] = []

    for criterion in criteria:
        criterion_trace = _evaluate_threshold_criterion(criterion, scores, dims_by_short_name)
        trace.append(criterion_trace)
        logger.debug("Critère %s → %s", criterion.name, criterion_trace.matched)
        if criterion_trace.matched:
            return Classification(ClassificationStatus.MATCHED, criterion=criterion, trace=trace)

    if not dimensions:
        return Classification(ClassificationStatus.UNCLASSIFIED, trace=trace)

    fallback = build_fallback_descriptor(dimensions, scores)
    return Classification(ClassificationStatus.FALLBACK, fallback=fallback, trace=trace)


def _evaluate_threshold_criterion(
    criterion: GradingCriterion,
    scores: Dict[str, float],
    dims_by_short_name: Dict[str, Dimension],
) -> CriterionTrace:
    if not isinstance(criterion.logic, ThresholdSet):
        return CriterionTrace(criterion.name, False, reason=TraceReason.INVALID_LOGIC)

    predicates = criterion.logic.predicates
    if not predicates:
        return CriterionTrace(criterion.name, False, reason=TraceReason.NO_PREDICATES)

    traces = [
        evaluate_predicate(p, scores, dims_by_short_name.get(p.dimension))
        for p in predicates
    ]
    return CriterionTrace(
        criterion=criterion.name,
        matched=all(t.matched for t in traces),
        predicates=traces,
    )


def evaluate_predicate(
    predicate: ThresholdPredicate,
    scores: Dict[str, float],
    dimension: Optional[Dimension] = None,
) -> PredicateTrace:
    """
    Compare un score de dimension au seuil du prédicat.
    Le seuil du prédicat prime ; à défaut, celui de la dimension.
    """
    threshold = predicate.threshold
    if threshold is None and dimension is not None:
        threshold = dimension.threshold

    score = scores.get(predicate.dimension)
    expected = str(predicate.value or "").strip().lower()

    def _fail(comparison: str, reason: TraceReason) -> PredicateTrace:
        return PredicateTrace(predicate.dimension, expected, threshold, score, comparison, False, reason)

    if score is None:
        return _fail(f"{predicate.dimension}: score indéfini", TraceReason.UNKNOWN_DIMENSION)
    if threshold is None:
        return _fail(f"{predicate.dimension}: seuil indéfini", TraceReason.MISSING_THRESHOLD)

    if expected == PredicateValue.LOW.value:
        matched = score <= threshold
        comparison = f"{score} <= {threshold}"
    elif expected == PredicateValue.HIGH.value:
        matched = score > threshold
        comparison = f"{score} > {threshold}"
    else:
        return _fail(f"{predicate.dimension}: valeur attendue '{predicate.value}' invalide", TraceReason.INVALID_VALUE)

    logger.debug("  %s: %s = %s (%s)", predicate.dimension, comparison, matched, expected)
    return PredicateTrace(predicate.dimension, expected, threshold, score, comparison, matched)


# ── Descripteur de repli ──────────────────────────────────────────────────────

def build_fallback_descriptor(
    dimensions: Sequence[Dimension],
    scores: Dict[str, float],
) -> FallbackDescriptor:
    """
    Un caractère par dimension, dans l'ordre des dimensions :
    low_label si score <= seuil, sinon high_label ; "?" si score, seuil ou
    label manquant.
    """
    chars: List[str] = []
    for dimension in sorted(dimensions, key=lambda d: d.order):
        score = scores.get(dimension.short_name)
        if score is None or dimension.threshold is None:
            chars.append(UNKNOWN_LABEL)
            continue
        label = dimension.low_label if score <= dimension.threshold else dimension.high_label
        chars.append(label or UNKNOWN_LABEL)

    descriptor = "".join(chars)
    return FallbackDescriptor(descriptor=descriptor, is_partial=UNKNOWN_LABEL in chars)
