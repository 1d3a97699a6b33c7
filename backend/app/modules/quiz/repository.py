# modules/quiz/repository.py
"""
Accès DB pour le module quiz.
Toute la logique SQL est ici : les services n'écrivent jamais de queries directes.

OrmQuizWriter : writer de réparation branché sur les lignes ORM verrouillées
(SELECT ... FOR UPDATE sur le quiz). Les écritures sont seulement stagées,
le service commit une fois par passe de réparation.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import Dict, List, Optional, Union

from app.shared.models import Quiz, QuizQuestion, QuizResult
from app.shared.enums import QuizType

EntityId = Union[int, str]


class QuizRepository:

    # ─────────────────────────────────────────────
    # QUIZ
    # ─────────────────────────────────────────────

    async def get_quiz(
        self, db: AsyncSession, quiz_id: int, for_update: bool = False
    ) -> Optional[Quiz]:
        """
        Quiz complet (dimensions, questions + options, critères).
        for_update=True : verrou sur la ligne quiz jusqu'au commit/rollback,
        sérialise les réparations concurrentes d'un même quiz.
        """
        q = (
            select(Quiz)
            .where(Quiz.id == quiz_id)
            .options(
                selectinload(Quiz.dimensions),
                selectinload(Quiz.questions).selectinload(QuizQuestion.options),
                selectinload(Quiz.grading_criteria),
                selectinload(Quiz.complex_criteria),
            )
        )
        if for_update:
            q = q.with_for_update(of=Quiz).execution_options(populate_existing=True)
        r = await db.execute(q)
        return r.scalar_one_or_none()

    async def list_quiz_ids(
        self, db: AsyncSession, quiz_type: Optional[QuizType] = None
    ) -> List[int]:
        q = select(Quiz.id)
        if quiz_type:
            q = q.where(Quiz.quiz_type == quiz_type.value)
        r = await db.execute(q.order_by(Quiz.id.asc()))
        return list(r.scalars().all())

    async def update_statistics(
        self,
        db: AsyncSession,
        quiz: Quiz,
        total_attempts: int,
        completed_attempts: int,
        average_score: float,
        average_completion_time: float,
    ) -> None:
        quiz.total_attempts = total_attempts
        quiz.completed_attempts = completed_attempts
        quiz.average_score = average_score
        quiz.average_completion_time = average_completion_time
        await db.commit()

    # ─────────────────────────────────────────────
    # RÉSULTATS
    # ─────────────────────────────────────────────

    async def save_result(self, db: AsyncSession, **fields) -> QuizResult:
        db_obj = QuizResult(**fields)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def get_result(self, db: AsyncSession, result_id: int) -> Optional[QuizResult]:
        r = await db.execute(select(QuizResult).where(QuizResult.id == result_id))
        return r.scalar_one_or_none()

    async def get_results_for_quiz(self, db: AsyncSession, quiz_id: int) -> List[QuizResult]:
        r = await db.execute(
            select(QuizResult)
            .where(QuizResult.quiz_id == quiz_id)
            .order_by(QuizResult.completed_at.asc())
        )
        return list(r.scalars().all())

    # ─────────────────────────────────────────────
    # TRANSACTION (passe de réparation)
    # ─────────────────────────────────────────────

    async def commit(self, db: AsyncSession) -> None:
        await db.commit()

    async def rollback(self, db: AsyncSession) -> None:
        await db.rollback()


class OrmQuizWriter:
    """
    Implémente QuizRepairWriter (engine/quiz/consistency.py) sur un Quiz
    chargé avec for_update=True. Aucune requête : mutation des lignes
    chargées, flush au commit du service.
    """

    def __init__(self, quiz: Quiz):
        self.quiz = quiz
        self._questions: Dict[EntityId, object] = {q.id: q for q in quiz.questions}
        self._dimensions: Dict[EntityId, object] = {d.id: d for d in quiz.dimensions}
        self.writes = 0

    def set_question_dimension(self, question_id: EntityId, dimension_id: EntityId) -> None:
        question = self._questions.get(question_id)
        if question is None:
            raise ValueError(f"Question {question_id} absente du quiz {self.quiz.id}.")
        if dimension_id not in self._dimensions:
            raise ValueError(f"Dimension {dimension_id} absente du quiz {self.quiz.id}.")
        question.dimension_id = dimension_id
        self.writes += 1

    def set_dimension_range(self, dimension_id: EntityId, min_score: float, max_score: float) -> None:
        dimension = self._dimensions.get(dimension_id)
        if dimension is None:
            raise ValueError(f"Dimension {dimension_id} absente du quiz {self.quiz.id}.")
        dimension.min_score = min_score
        dimension.max_score = max_score
        self.writes += 1
