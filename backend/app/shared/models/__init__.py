# app/shared/models/__init__.py
"""
Point d'entrée unique pour tous les modèles SQLAlchemy.

TOUJOURS importer les modèles depuis ce fichier :
  from app.shared.models import Quiz, QuizDimension, QuizResult, ...

Jamais directement depuis app.shared.models.Quiz.
→ Garantit que tous les modèles sont enregistrés dans Base.metadata
  avant la création des tables (Alembic, create_all).
"""

from app.shared.models.Quiz import (
    Quiz,
    QuizDimension,
    QuizQuestion,
    QuizOption,
    GradingCriteria,
    ComplexGradingCriteria,
    QuizResult,
)

__all__ = [
    # Définition
    "Quiz",
    "QuizDimension",
    "QuizQuestion",
    "QuizOption",
    # Critères
    "GradingCriteria",
    "ComplexGradingCriteria",
    # Résultats
    "QuizResult",
]
