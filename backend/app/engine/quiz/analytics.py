# engine/quiz/analytics.py
"""
Statistiques agrégées d'un quiz à partir de ses résultats stockés.
ZÉRO accès DB : le service charge les QuizResult et les passe ici.

Appelé par : modules/quiz/service.py (get_analytics, update_quiz_statistics)
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from app.shared.enums import QuizResultLevel

# --- TEMPS DE COMPLÉTION (unité de time_spent) ---
TIME_FAST_BELOW = 5
TIME_SLOW_ABOVE = 15


@dataclass
class ClassificationCount:
    classification: str
    count:          int
    percentage:     float


@dataclass
class DimensionStats:
    average: float
    min:     float
    max:     float


@dataclass
class QuizAnalytics:
    total_attempts:          int
    completed_attempts:      int
    completion_rate:         float
    average_score:           float = 0
    average_time_spent:      float = 0
    level_distribution:      Dict[str, int] = field(default_factory=dict)
    popular_classifications: List[ClassificationCount] = field(default_factory=list)
    time_distribution:       Dict[str, int] = field(default_factory=dict)
    dimension_distribution:  Dict[str, DimensionStats] = field(default_factory=dict)


def compute_quiz_analytics(results: Sequence[Any], total_attempts: Optional[int] = None) -> QuizAnalytics:
    """
    total_attempts : tentatives démarrées (None → nombre de résultats).
    Le taux de complétion vaut 0 sans tentative.
    """
    completed = len(results)
    attempts = completed if total_attempts is None else total_attempts
    completion_rate = (completed / attempts) * 100 if attempts > 0 else 0

    analytics = QuizAnalytics(
        total_attempts=attempts,
        completed_attempts=completed,
        completion_rate=completion_rate,
        level_distribution={level.value: 0 for level in QuizResultLevel},
        time_distribution={"fast": 0, "normal": 0, "slow": 0},
    )
    if completed == 0:
        return analytics

    analytics.average_score = sum(_get(r, "score") or 0 for r in results) / completed
    analytics.average_time_spent = sum(_get(r, "time_spent") or 0 for r in results) / completed

    for result in results:
        level = _get(result, "level")
        if level is not None:
            key = level.value if isinstance(level, QuizResultLevel) else str(level)
            analytics.level_distribution[key] = analytics.level_distribution.get(key, 0) + 1

        time_spent = _get(result, "time_spent") or 0
        if time_spent < TIME_FAST_BELOW:
            analytics.time_distribution["fast"] += 1
        elif time_spent > TIME_SLOW_ABOVE:
            analytics.time_distribution["slow"] += 1
        else:
            analytics.time_distribution["normal"] += 1

    analytics.popular_classifications = _popular_classifications(results, completed)
    analytics.dimension_distribution = _dimension_distribution(results)
    return analytics


def _popular_classifications(results: Sequence[Any], completed: int) -> List[ClassificationCount]:
    counts: Dict[str, int] = {}
    for result in results:
        classification = _get(result, "classification")
        if classification:
            counts[classification] = counts.get(classification, 0) + 1

    # sorted() stable : à égalité, ordre de première apparition
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        ClassificationCount(name, count, (count / completed) * 100)
        for name, count in ranked
    ]


def _dimension_distribution(results: Sequence[Any]) -> Dict[str, DimensionStats]:
    values: Dict[str, List[float]] = {}
    for result in results:
        for short_name, score in (_get(result, "dimension_scores") or {}).items():
            values.setdefault(short_name, []).append(score)

    return {
        short_name: DimensionStats(
            average=round(sum(scores) / len(scores), 2),
            min=min(scores),
            max=max(scores),
        )
        for short_name, scores in values.items()
    }


def _get(result: Any, key: str) -> Any:
    if isinstance(result, dict):
        return result.get(key)
    return getattr(result, key, None)
