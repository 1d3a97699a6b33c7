# app/shared/enums.py
"""
Toutes les énumérations du moteur de quiz.

Source unique de vérité pour les statuts, types et niveaux.
Importé par les modèles, schemas, services et engine.
"""

from enum import Enum

class QuizType(str, Enum):
    DEFAULT    = "DEFAULT"
    COMPLEX    = "COMPLEX"      # Multi-dimensionnel (ex: MBTI)
    ONBOARDING = "ONBOARDING"   # Score unique, traité comme DEFAULT


class QuizStatus(str, Enum):
    DRAFT    = "DRAFT"
    ACTIVE   = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class QuizResultLevel(str, Enum):
    EXCELLENT         = "EXCELLENT"
    GOOD              = "GOOD"
    FAIR              = "FAIR"
    NEEDS_IMPROVEMENT = "NEEDS_IMPROVEMENT"


class ScoringLogicType(str, Enum):
    RANGE     = "range"       # min_score / max_score (quiz DEFAULT)
    THRESHOLD = "threshold"   # Prédicats low/high par dimension (quiz COMPLEX)
