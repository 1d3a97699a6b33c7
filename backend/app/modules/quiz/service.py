# modules/quiz/service.py
"""
Orchestration du moteur de quiz.

Responsabilités :
1. Interroger la DB via repository (quiz complet, résultats)
2. Hydrater le snapshot engine (schemas.QuizDefinitionIn.to_engine)
3. Déléguer le calcul à engine/quiz/ (scoring, consistency, analytics)
4. Sauvegarder / commiter

Réparation : le quiz est chargé FOR UPDATE, les écritures passent par
OrmQuizWriter et sont commitées une fois. Tout échec → rollback, le quiz
reste dans son état d'origine.
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List, Optional, Sequence

from app.engine.quiz.analytics import QuizAnalytics, compute_quiz_analytics
from app.engine.quiz.consistency import (
    AuditReport,
    RepairReport,
    ValidationReport,
    audit_result,
    diagnose_scores,
    repair_quiz,
    validate_quiz,
)
from app.engine.quiz.levels import build_result_feedback
from app.engine.quiz.model import QuizDefinition
from app.engine.quiz.scoring import score_quiz
from app.modules.quiz.repository import OrmQuizWriter, QuizRepository
from app.modules.quiz.schemas import AnswerIn, QuizDefinitionIn, QuizSubmissionIn
from app.shared.enums import QuizType

logger = logging.getLogger(__name__)

repo = QuizRepository()


def to_definition(quiz) -> QuizDefinition:
    """Ligne ORM Quiz (relations chargées) → snapshot engine."""
    return QuizDefinitionIn.model_validate(quiz).to_engine()


class QuizService:

    # ─────────────────────────────────────────────
    # SOUMISSION
    # ─────────────────────────────────────────────

    async def submit_and_score(
        self,
        db: AsyncSession,
        quiz_id: int,
        answers: Sequence,
        user_id: Optional[str] = None,
        time_spent: int = 0,
    ):
        """
        Pipeline complet de soumission :
        1. Validation des données
        2. Calcul pur (engine)
        3. Sauvegarde résultat
        4. Mise à jour des statistiques du quiz
        """
        if not answers:
            raise ValueError("Aucune réponse fournie.")

        # ValidationError (sous-classe de ValueError) : temps négatif, réponse mal formée
        submission = QuizSubmissionIn.model_validate({
            "answers": [AnswerIn.model_validate(a) for a in answers],
            "timeSpent": time_spent,
        })
        answers = [a.to_engine() for a in submission.answers]
        time_spent = submission.time_spent

        quiz = await repo.get_quiz(db, quiz_id)
        if not quiz:
            raise ValueError("Quiz introuvable.")
        if not quiz.is_available:
            raise ValueError("Quiz indisponible.")

        definition = to_definition(quiz)

        quiz_score = score_quiz(definition, answers)
        feedback = build_result_feedback(quiz_score)

        if quiz_score.is_complex:
            for warning in diagnose_scores(definition, quiz_score.dimension_scores):
                logger.warning("Quiz %s : %s", quiz_id, warning)
        if quiz_score.skipped_answers:
            logger.info("Quiz %s : %d réponse(s) ignorée(s)", quiz_id, len(quiz_score.skipped_answers))

        saved = await repo.save_result(
            db,
            quiz_id=quiz_id,
            user_id=user_id,
            score=quiz_score.total.score,
            max_score=quiz_score.total.max_score,
            percentage=quiz_score.total.percentage,
            dimension_scores=quiz_score.dimension_scores,
            classification=feedback.classification,
            is_fallback=feedback.is_fallback,
            level=feedback.level.value if feedback.level else None,
            feedback=feedback.feedback,
            recommendations=feedback.recommendations,
            areas_of_improvement=feedback.areas_of_improvement,
            support_needed=feedback.support_needed,
            answers=[{"question_id": a.question_id, "option_id": a.option_id} for a in answers],
            time_spent=time_spent,
        )
        logger.info(
            "Quiz %s : résultat %s → %s (%s)",
            quiz_id, saved.id, feedback.classification, quiz_score.classification.status.value,
        )

        await self.update_quiz_statistics(db, quiz)
        return saved

    async def update_quiz_statistics(self, db: AsyncSession, quiz) -> QuizAnalytics:
        results = await repo.get_results_for_quiz(db, quiz.id)
        stats = compute_quiz_analytics(results)
        await repo.update_statistics(
            db,
            quiz,
            total_attempts=stats.total_attempts,
            completed_attempts=stats.completed_attempts,
            average_score=stats.average_score,
            average_completion_time=stats.average_time_spent,
        )
        return stats

    # ─────────────────────────────────────────────
    # CONTRÔLE D'INTÉGRITÉ
    # ─────────────────────────────────────────────

    async def validate_quiz(self, db: AsyncSession, quiz_id: int) -> ValidationReport:
        quiz = await repo.get_quiz(db, quiz_id)
        if not quiz:
            raise ValueError("Quiz introuvable.")
        return validate_quiz(to_definition(quiz))

    async def validate_all(
        self, db: AsyncSession, quiz_type: Optional[QuizType] = None
    ) -> Dict[int, ValidationReport]:
        reports = {}
        for quiz_id in await repo.list_quiz_ids(db, quiz_type):
            reports[quiz_id] = await self.validate_quiz(db, quiz_id)
        return reports

    async def repair_quiz(self, db: AsyncSession, quiz_id: int) -> RepairReport:
        quiz = await repo.get_quiz(db, quiz_id, for_update=True)
        if not quiz:
            await repo.rollback(db)
            raise ValueError("Quiz introuvable.")

        try:
            writer = OrmQuizWriter(quiz)
            report = repair_quiz(to_definition(quiz), writer)
            if writer.writes:
                await repo.commit(db)
            else:
                await repo.rollback(db)   # Libère le verrou
        except Exception:
            await repo.rollback(db)
            logger.exception("Quiz %s : réparation annulée", quiz_id)
            raise

        return report

    async def repair_all(self, db: AsyncSession) -> List[RepairReport]:
        """Répare tous les quiz COMPLEX, un verrou (et un commit) par quiz."""
        reports = []
        for quiz_id in await repo.list_quiz_ids(db, QuizType.COMPLEX):
            reports.append(await self.repair_quiz(db, quiz_id))
        return reports

    # ─────────────────────────────────────────────
    # AUDIT / ANALYTICS
    # ─────────────────────────────────────────────

    async def audit_result(self, db: AsyncSession, result_id: int) -> AuditReport:
        result = await repo.get_result(db, result_id)
        if not result:
            raise ValueError("Résultat introuvable.")
        quiz = await repo.get_quiz(db, result.quiz_id)
        if not quiz:
            raise ValueError("Quiz introuvable.")
        return audit_result(to_definition(quiz), result.answers or [], result.dimension_scores)

    async def get_analytics(self, db: AsyncSession, quiz_id: int) -> QuizAnalytics:
        quiz = await repo.get_quiz(db, quiz_id)
        if not quiz:
            raise ValueError("Quiz introuvable.")
        results = await repo.get_results_for_quiz(db, quiz_id)
        return compute_quiz_analytics(results, quiz.total_attempts)
