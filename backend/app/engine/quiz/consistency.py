# engine/quiz/consistency.py
"""
Contrôle d'intégrité des quiz. Validation en lecture seule + réparation.

Appelé par : modules/quiz/service.py et scripts/quiz_maintenance.py

validate_quiz(quiz)          → ValidationReport (issues bloquantes + warnings)
repair_quiz(quiz, writer)    → RepairReport     (écritures via writer injecté)
diagnose_scores(quiz, map)   → warnings sur une map de scores suspecte
audit_result(quiz, answers, stored) → recalcul d'un résultat stocké

Contrôles, tous indépendants (pas d'arrêt au premier échec) :
    1. Questions présentes, chaque question a des options
    2. Quiz COMPLEX : dimensions présentes, critères à seuils présents,
       min_score/max_score renseignés (seuil manquant = warning)
    3. Chaque question pointe vers une dimension existante du quiz

Réparations, dans cet ordre et sans entrelacement :
    a. Questions orphelines réaffectées par POSITION : blocs contigus de
       ceil(n_questions / n_dimensions), bloc i → dimension i.
       Heuristique de compatibilité, pas une récupération sémantique.
    b. Plages manquantes : min_score = 0, max_score = somme des meilleures
       options des questions de la dimension (dépend de a.).

Le checker ne supprime rien et n'invente jamais de critère de classement.
La sérialisation des réparations concurrentes sur un même quiz est à la
charge du writer (verrou par quiz côté persistance).
"""
from __future__ import annotations
import copy
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from app.engine.quiz.aggregation import DimensionScoreMap, compute_dimension_scores
from app.engine.quiz.model import (
    Dimension,
    EntityId,
    Question,
    QuizDefinition,
    ThresholdSet,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 0
MIN_OPTIONS_PER_QUESTION = 2


class IssueCode(str, Enum):
    # Configuration
    NO_QUESTIONS               = "no_questions"
    QUESTION_WITHOUT_OPTIONS   = "question_without_options"
    SINGLE_OPTION_QUESTION     = "single_option_question"
    NO_DIMENSIONS              = "no_dimensions"
    NO_GRADING_CRITERIA        = "no_grading_criteria"
    INVALID_SCORING_LOGIC      = "invalid_scoring_logic"
    UNKNOWN_CRITERION_DIMENSION = "unknown_criterion_dimension"
    DUPLICATE_SHORT_NAME       = "duplicate_short_name"
    MISSING_SCORE_RANGE        = "missing_score_range"
    MISSING_THRESHOLD          = "missing_threshold"
    EMPTY_DIMENSION            = "empty_dimension"
    # Intégrité des données
    MISSING_DIMENSION_ID       = "missing_dimension_id"
    DANGLING_DIMENSION_ID      = "dangling_dimension_id"
    # Scores
    ZERO_DIMENSION_SCORE       = "zero_dimension_score"
    ALL_SCORES_ZERO            = "all_scores_zero"


class FixKind(str, Enum):
    REASSIGN_QUESTION   = "reassign_question"
    SET_DIMENSION_RANGE = "set_dimension_range"


@dataclass
class Issue:
    code:       IssueCode
    message:    str
    subject_id: Optional[EntityId] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict:
        return {"code": self.code.value, "message": self.message, "subject_id": self.subject_id}


@dataclass
class Fix:
    kind:       FixKind
    subject_id: EntityId
    message:    str

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationReport:
    quiz_id:  Optional[EntityId]
    issues:   List[Issue] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def has(self, code: IssueCode) -> bool:
        return any(i.code == code for i in self.issues + self.warnings)

    def to_dict(self) -> Dict:
        return {
            "isValid": self.is_valid,
            "issues": [str(i) for i in self.issues],
            "warnings": [str(w) for w in self.warnings],
        }


@dataclass
class RepairReport:
    """
    found   : problèmes détectés avant réparation
    fixed   : écritures effectuées (une par question / dimension)
    issues  : problèmes restants, à corriger à la main
    """
    quiz_id:  Optional[EntityId]
    success:  bool
    message:  str
    found:    List[Issue] = field(default_factory=list)
    fixed:    List[Fix] = field(default_factory=list)
    issues:   List[Issue] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)
    quiz:     Optional[QuizDefinition] = None

    def to_dict(self) -> Dict:
        return {
            "success": self.success,
            "message": self.message,
            "issues": [str(i) for i in self.issues],
            "fixed": [str(f) for f in self.fixed],
            "found": [str(i) for i in self.found],
        }


@dataclass
class AuditReport:
    matches:     bool
    recomputed:  DimensionScoreMap
    stored:      Optional[Dict[str, float]]
    differences: Dict[str, Tuple[Optional[float], Optional[float]]] = field(default_factory=dict)


class QuizRepairWriter(Protocol):
    """
    Écritures autoritatives de la réparation. Implémenté côté persistance
    (modules/quiz/repository.OrmQuizWriter) ou par un double de test.
    """

    def set_question_dimension(self, question_id: EntityId, dimension_id: EntityId) -> None:
        ...

    def set_dimension_range(self, dimension_id: EntityId, min_score: float, max_score: float) -> None:
        ...


# ─────────────────────────────────────────────
# VALIDATION
# ─────────────────────────────────────────────

def validate_quiz(quiz: QuizDefinition) -> ValidationReport:
    if quiz is None:
        raise ValueError("Quiz requis pour la validation.")

    report = ValidationReport(quiz_id=quiz.id)

    _check_questions(quiz, report)

    if quiz.is_complex:
        _check_complex_structure(quiz, report)
        _check_question_dimensions(quiz, report)
    elif not quiz.simple_criteria():
        report.warnings.append(Issue(
            IssueCode.NO_GRADING_CRITERIA,
            "Quiz sans critère de classement (le barème par défaut s'applique)",
        ))

    return report


def _check_questions(quiz: QuizDefinition, report: ValidationReport) -> None:
    if not quiz.questions:
        report.issues.append(Issue(IssueCode.NO_QUESTIONS, "Aucune question"))
        return

    for question in quiz.ordered_questions():
        if not question.options:
            report.issues.append(Issue(
                IssueCode.QUESTION_WITHOUT_OPTIONS,
                f"{_question_label(question)} n'a aucune option",
                question.id,
            ))
        elif len(question.options) < MIN_OPTIONS_PER_QUESTION:
            report.warnings.append(Issue(
                IssueCode.SINGLE_OPTION_QUESTION,
                f"{_question_label(question)} n'a qu'une seule option",
                question.id,
            ))


def _check_complex_structure(quiz: QuizDefinition, report: ValidationReport) -> None:
    dimensions = quiz.ordered_dimensions()
    if not dimensions:
        report.issues.append(Issue(IssueCode.NO_DIMENSIONS, "Quiz COMPLEX sans dimension"))

    criteria = quiz.threshold_criteria()
    if not criteria:
        report.issues.append(Issue(IssueCode.NO_GRADING_CRITERIA, "Quiz COMPLEX sans critère de classement"))

    short_names = {d.short_name for d in dimensions}
    for criterion in criteria:
        if not isinstance(criterion.logic, ThresholdSet) or not criterion.logic.predicates:
            kind = criterion.raw_logic_type or "absente"
            report.issues.append(Issue(
                IssueCode.INVALID_SCORING_LOGIC,
                f"Critère {criterion.name} : logique de scoring invalide ({kind})",
                criterion.id,
            ))
            continue
        for predicate in criterion.logic.predicates:
            if predicate.dimension not in short_names:
                report.issues.append(Issue(
                    IssueCode.UNKNOWN_CRITERION_DIMENSION,
                    f"Critère {criterion.name} : dimension inconnue '{predicate.dimension}'",
                    criterion.id,
                ))

    seen: set = set()
    for dim in dimensions:
        if dim.short_name in seen:
            report.issues.append(Issue(
                IssueCode.DUPLICATE_SHORT_NAME,
                f"Nom court de dimension dupliqué : {dim.short_name}",
                dim.id,
            ))
        seen.add(dim.short_name)

        if dim.min_score is None or dim.max_score is None:
            report.issues.append(Issue(
                IssueCode.MISSING_SCORE_RANGE,
                f"Dimension {dim.short_name} sans plage de score (min/max)",
                dim.id,
            ))
        if dim.threshold is None:
            report.warnings.append(Issue(
                IssueCode.MISSING_THRESHOLD,
                f"Dimension {dim.short_name} sans seuil (classement dégradé)",
                dim.id,
            ))


def _check_question_dimensions(quiz: QuizDefinition, report: ValidationReport) -> None:
    dimension_ids = {d.id for d in quiz.dimensions}

    for question in quiz.ordered_questions():
        if question.dimension_id is None:
            report.issues.append(Issue(
                IssueCode.MISSING_DIMENSION_ID,
                f"{_question_label(question)} sans dimension",
                question.id,
            ))
        elif question.dimension_id not in dimension_ids:
            report.issues.append(Issue(
                IssueCode.DANGLING_DIMENSION_ID,
                f"{_question_label(question)} référence une dimension invalide : {question.dimension_id}",
                question.id,
            ))

    assigned = {q.dimension_id for q in quiz.questions}
    for dim in quiz.ordered_dimensions():
        if dim.id not in assigned:
            report.warnings.append(Issue(
                IssueCode.EMPTY_DIMENSION,
                f"Dimension {dim.short_name} sans question (score toujours nul)",
                dim.id,
            ))


def _question_label(question: Question) -> str:
    return f"Question {question.order + 1}"


# ─────────────────────────────────────────────
# RÉPARATION
# ─────────────────────────────────────────────

def find_orphaned_questions(quiz: QuizDefinition) -> List[Question]:
    """Questions (ordre déclaré) dont dimension_id est nul ou hors du quiz."""
    dimension_ids = {d.id for d in quiz.dimensions}
    return [
        q for q in quiz.ordered_questions()
        if q.dimension_id is None or q.dimension_id not in dimension_ids
    ]


def plan_dimension_reassignment(quiz: QuizDefinition) -> List[Tuple[Question, Dimension]]:
    """
    Affectation positionnelle des questions orphelines.

    Les questions sont découpées (ordre déclaré) en blocs contigus de
    ceil(n / d) ; la question à la position i va à la dimension i // bloc.
    Un éventuel reliquat tombe sur la dernière dimension. Seules les
    orphelines sont réaffectées, les questions déjà valides ne bougent pas :
    une question rattachée à une dimension existante peut donc rester hors
    de son bloc positionnel (ex. [D1, null, null, D0] → [D1, D0, D1, D0]).
    """
    dimensions = quiz.ordered_dimensions()
    questions = quiz.ordered_questions()
    if not dimensions or not questions:
        return []

    orphan_ids = {q.id for q in find_orphaned_questions(quiz)}
    block_size = math.ceil(len(questions) / len(dimensions))

    plan = []
    for position, question in enumerate(questions):
        if question.id not in orphan_ids:
            continue
        index = min(position // block_size, len(dimensions) - 1)
        plan.append((question, dimensions[index]))
    return plan


def repair_quiz(quiz: QuizDefinition, writer: QuizRepairWriter) -> RepairReport:
    """
    Répare un quiz en une passe : réaffectation des orphelines PUIS
    recalcul des plages manquantes. Le quiz passé en paramètre n'est pas
    muté ; la version réparée est renvoyée dans RepairReport.quiz.

    Deux passes successives : la seconde n'écrit rien (idempotence).
    """
    if quiz is None:
        raise ValueError("Quiz requis pour la réparation.")
    if writer is None:
        raise ValueError("Writer requis pour la réparation.")

    before = validate_quiz(quiz)
    repaired = copy.deepcopy(quiz)
    fixed: List[Fix] = []

    if repaired.is_complex and repaired.dimensions:
        fixed.extend(_reassign_orphans(repaired, writer))
        fixed.extend(_fill_missing_ranges(repaired, writer))

    after = validate_quiz(repaired)
    success = after.is_valid
    message = (
        f"Réparation terminée : {len(before.issues)} problème(s) détecté(s), "
        f"{len(fixed)} correction(s), {len(after.issues)} restant(s)."
    )

    if after.issues:
        logger.warning("Quiz %s : %d problème(s) non réparable(s)", quiz.id, len(after.issues))
    logger.info("Quiz %s : %s", quiz.id, message)

    return RepairReport(
        quiz_id=quiz.id,
        success=success,
        message=message,
        found=before.issues,
        fixed=fixed,
        issues=after.issues,
        warnings=after.warnings,
        quiz=repaired,
    )


def _reassign_orphans(quiz: QuizDefinition, writer: QuizRepairWriter) -> List[Fix]:
    fixes = []
    for question, dimension in plan_dimension_reassignment(quiz):
        previous = question.dimension_id
        writer.set_question_dimension(question.id, dimension.id)
        question.dimension_id = dimension.id
        fixes.append(Fix(
            FixKind.REASSIGN_QUESTION,
            question.id,
            f"{_question_label(question)} : {previous if previous is not None else 'null'} "
            f"→ {dimension.id} ({dimension.short_name})",
        ))
    return fixes


def _fill_missing_ranges(quiz: QuizDefinition, writer: QuizRepairWriter) -> List[Fix]:
    fixes = []
    for dim in quiz.ordered_dimensions():
        if dim.min_score is not None and dim.max_score is not None:
            continue

        min_score = dim.min_score if dim.min_score is not None else DEFAULT_MIN_SCORE
        max_score = dim.max_score
        if max_score is None:
            max_score = sum(
                q.max_option_value() for q in quiz.questions if q.dimension_id == dim.id
            )

        writer.set_dimension_range(dim.id, min_score, max_score)
        dim.min_score, dim.max_score = min_score, max_score
        fixes.append(Fix(
            FixKind.SET_DIMENSION_RANGE,
            dim.id,
            f"Dimension {dim.short_name} : min_score={min_score}, max_score={max_score}",
        ))
    return fixes


# ─────────────────────────────────────────────
# DIAGNOSTIC DES SCORES
# ─────────────────────────────────────────────

def diagnose_scores(quiz: QuizDefinition, scores: DimensionScoreMap) -> List[Issue]:
    """Warnings sur une map de scores : dimensions à 0, ou tout à 0."""
    warnings: List[Issue] = []
    dimensions = quiz.ordered_dimensions()
    if not dimensions:
        return warnings

    zero_dims = [d for d in dimensions if not scores.get(d.short_name)]
    for dim in zero_dims:
        warnings.append(Issue(
            IssueCode.ZERO_DIMENSION_SCORE,
            f"Dimension {dim.short_name} à 0 : vérifier l'affectation question/dimension",
            dim.id,
        ))

    if len(zero_dims) == len(dimensions):
        warnings.append(Issue(
            IssueCode.ALL_SCORES_ZERO,
            "Tous les scores de dimension sont à 0 : mapping question/dimension probablement cassé",
        ))
    return warnings


def audit_result(
    quiz: QuizDefinition,
    answers: Iterable,
    stored_scores: Optional[Dict[str, float]],
) -> AuditReport:
    """Recalcule la map de scores d'un résultat stocké et la compare."""
    recomputed = compute_dimension_scores(quiz, answers).scores
    stored = stored_scores or {}

    differences = {}
    for key in list(recomputed) + [k for k in stored if k not in recomputed]:
        if stored.get(key) != recomputed.get(key):
            differences[key] = (stored.get(key), recomputed.get(key))

    return AuditReport(
        matches=not differences,
        recomputed=recomputed,
        stored=stored_scores,
        differences=differences,
    )
