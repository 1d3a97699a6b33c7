# app/shared/models/Quiz.py
"""
Modèles du moteur de quiz.

Quiz ─┬─ QuizDimension           (quiz COMPLEX, short_name unique par quiz)
      ├─ QuizQuestion → QuizOption
      │        └── dimension_id  (nullable : question orpheline réparable)
      ├─ GradingCriteria         (quiz DEFAULT : plage min/max sur le %)
      ├─ ComplexGradingCriteria  (quiz COMPLEX : scoring_logic JSON)
      └─ QuizResult

ComplexGradingCriteria.scoring_logic (JSON)
    {
      "type": "threshold",
      "dimensions": [{"name": "E/I", "value": "low", "threshold": 15}, ...]
    }
Tout autre "type" est conservé tel quel mais jamais évalué.

QuizResult.dimension_scores (JSON) : {"E/I": 12, "S/N": 25, ...}
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.shared.enums import QuizStatus, QuizType


class Quiz(Base):
    __tablename__ = "quizzes"
    id                      = Column(Integer, primary_key=True, index=True)
    title                   = Column(String,  nullable=False)
    description             = Column(Text,    nullable=True)
    quiz_type               = Column(String,  nullable=False, default=QuizType.DEFAULT.value)
    status                  = Column(String,  nullable=False, default=QuizStatus.DRAFT.value)
    is_public               = Column(Boolean, default=False)
    total_attempts          = Column(Integer, default=0)
    completed_attempts      = Column(Integer, default=0)
    average_score           = Column(Float,   default=0)
    average_completion_time = Column(Float,   default=0)
    created_at              = Column(DateTime(timezone=True), server_default=func.now())
    updated_at              = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    dimensions       = relationship("QuizDimension",          back_populates="quiz", cascade="all, delete-orphan")
    questions        = relationship("QuizQuestion",           back_populates="quiz", cascade="all, delete-orphan")
    grading_criteria = relationship("GradingCriteria",        back_populates="quiz", cascade="all, delete-orphan")
    complex_criteria = relationship("ComplexGradingCriteria", back_populates="quiz", cascade="all, delete-orphan")
    results          = relationship("QuizResult",             back_populates="quiz")

    @property
    def is_available(self) -> bool:
        return bool(self.is_public) and self.status == QuizStatus.ACTIVE.value

    def __repr__(self):
        return f"<Quiz id={self.id} type={self.quiz_type} titre={self.title}>"


class QuizDimension(Base):
    __tablename__ = "quiz_dimensions"
    __table_args__ = (UniqueConstraint("quiz_id", "short_name", name="uq_quiz_dimension_short_name"),)
    id         = Column(Integer, primary_key=True, index=True)
    quiz_id    = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    name       = Column(String,  nullable=False)
    short_name = Column(String,  nullable=False)
    order      = Column(Integer, default=0)
    min_score  = Column(Float,   nullable=True)
    max_score  = Column(Float,   nullable=True)
    threshold  = Column(Float,   nullable=True)
    low_label  = Column(String,  nullable=True)
    high_label = Column(String,  nullable=True)

    quiz      = relationship("Quiz", back_populates="dimensions")
    questions = relationship("QuizQuestion", back_populates="dimension")

    def __repr__(self):
        return f"<QuizDimension id={self.id} short_name={self.short_name}>"


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    id           = Column(Integer, primary_key=True, index=True)
    quiz_id      = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    dimension_id = Column(Integer, ForeignKey("quiz_dimensions.id", ondelete="SET NULL"), nullable=True, index=True)
    text         = Column(Text,    nullable=False)
    order        = Column(Integer, default=0)

    quiz      = relationship("Quiz", back_populates="questions")
    dimension = relationship("QuizDimension", back_populates="questions")
    options   = relationship("QuizOption", back_populates="question", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<QuizQuestion id={self.id} order={self.order} dimension={self.dimension_id}>"


class QuizOption(Base):
    __tablename__ = "quiz_options"
    id          = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("quiz_questions.id", ondelete="CASCADE"), nullable=False, index=True)
    text        = Column(Text,    nullable=False)
    value       = Column(Integer, nullable=False, default=0)
    order       = Column(Integer, default=0)

    question = relationship("QuizQuestion", back_populates="options")

    def __repr__(self):
        return f"<QuizOption id={self.id} value={self.value}>"


class GradingCriteria(Base):
    __tablename__ = "grading_criteria"
    id              = Column(Integer, primary_key=True, index=True)
    quiz_id         = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    name            = Column(String,  nullable=False)
    label           = Column(String,  nullable=False)
    min_score       = Column(Float,   nullable=False)
    max_score       = Column(Float,   nullable=False)
    color           = Column(String,  nullable=True)
    description     = Column(Text,    nullable=True)
    recommendations = Column(JSON,    nullable=False, default=list)

    quiz = relationship("Quiz", back_populates="grading_criteria")

    def __repr__(self):
        return f"<GradingCriteria id={self.id} nom={self.name} [{self.min_score}, {self.max_score}]>"


class ComplexGradingCriteria(Base):
    __tablename__ = "complex_grading_criteria"
    id              = Column(Integer, primary_key=True, index=True)
    quiz_id         = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    name            = Column(String,  nullable=False)
    label           = Column(String,  nullable=False)
    color           = Column(String,  nullable=True)
    description     = Column(Text,    nullable=True)
    recommendations = Column(JSON,    nullable=False, default=list)
    scoring_logic   = Column(JSON,    nullable=True)   # {"type": "threshold", "dimensions": [...]}

    quiz = relationship("Quiz", back_populates="complex_criteria")

    def __repr__(self):
        return f"<ComplexGradingCriteria id={self.id} nom={self.name}>"


class QuizResult(Base):
    __tablename__ = "quiz_results"
    id               = Column(Integer, primary_key=True, index=True)
    quiz_id          = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id          = Column(String,  nullable=True, index=True)   # Identité gérée hors du moteur
    score            = Column(Float,   nullable=False, default=0)
    max_score        = Column(Float,   nullable=False, default=0)
    percentage       = Column(Integer, nullable=False, default=0)
    dimension_scores = Column(JSON,    nullable=True)   # COMPLEX uniquement
    classification   = Column(String,  nullable=True)
    is_fallback      = Column(Boolean, default=False)   # Descripteur de repli, aucun critère matché
    level            = Column(String,  nullable=True)
    feedback         = Column(Text,    nullable=True)
    recommendations      = Column(JSON, nullable=False, default=list)
    areas_of_improvement = Column(JSON, nullable=False, default=list)
    support_needed       = Column(JSON, nullable=False, default=list)
    answers          = Column(JSON,    nullable=False, default=list)   # [{"question_id", "option_id"}]
    time_spent       = Column(Integer, default=0)
    completed_at     = Column(DateTime(timezone=True), server_default=func.now())

    quiz = relationship("Quiz", back_populates="results")

    def __repr__(self):
        return f"<QuizResult id={self.id} quiz={self.quiz_id} classification={self.classification}>"
