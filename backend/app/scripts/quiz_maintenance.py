# scripts/quiz_maintenance.py
"""
Maintenance des quiz : validation, réparation, audit, debug du scoring.

Sous-commandes :
    validate [--quiz-id N]   → un quiz, ou tous avec résumé
    repair --quiz-id N       → valide, répare sous verrou, re-valide
    repair-all               → répare tous les quiz COMPLEX
    audit --result-id N      → recalcule un résultat stocké et compare
    debug FICHIER.json       → score une fixture JSON avec la trace complète (sans DB)

Code de sortie : 0 si tout est sain, 1 si des problèmes restent.

Usage :
    python -m app.scripts.quiz_maintenance validate
    python -m app.scripts.quiz_maintenance repair --quiz-id 12
    python -m app.scripts.quiz_maintenance debug fixtures/mbti.json
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, List, Optional

from pydantic import ValidationError

from app.core.database import AsyncSessionLocal
from app.core.logging import setup_logging
from app.engine.quiz.consistency import (
    AuditReport,
    RepairReport,
    ValidationReport,
    diagnose_scores,
    validate_quiz,
)
from app.engine.quiz.levels import build_result_feedback
from app.engine.quiz.model import QuizDefinition
from app.engine.quiz.scoring import QuizScore, score_quiz
from app.modules.quiz.schemas import ScoringDebugIn
from app.modules.quiz.service import QuizService

logger = logging.getLogger(__name__)

service = QuizService()

EXIT_OK = 0
EXIT_ISSUES = 1


# ─────────────────────────────────────────────
# RAPPORTS
# ─────────────────────────────────────────────

def print_validation(quiz_id, report: ValidationReport) -> None:
    status = "✅ valide" if report.is_valid else f"❌ {len(report.issues)} problème(s)"
    print(f"📋 Quiz {quiz_id} : {status}")
    for issue in report.issues:
        print(f"   ❌ {issue}")
    for warning in report.warnings:
        print(f"   ⚠️  {warning}")


def print_repair(report: RepairReport) -> None:
    print(f"🔧 Quiz {report.quiz_id}")
    for issue in report.found:
        print(f"   · détecté : {issue}")
    for fix in report.fixed:
        print(f"   🔄 {fix}")
    if not report.fixed:
        print("   ✓ Aucune correction nécessaire")
    for issue in report.issues:
        print(f"   ❌ restant : {issue}")
    print(f"   {'✅' if report.success else '⚠️ '} {report.message}")


def print_audit(result_id, report: AuditReport) -> None:
    status = "✅ conforme" if report.matches else "❌ divergent"
    print(f"🔍 Résultat {result_id} : {status}")
    print(f"   Recalculé : {report.recomputed}")
    print(f"   Stocké    : {report.stored}")
    for short_name, (stored, recomputed) in report.differences.items():
        print(f"   ❌ {short_name} : stocké={stored} recalculé={recomputed}")


def print_debug(quiz: QuizDefinition, answers: List, quiz_score: QuizScore) -> None:
    print("=== DEBUG SCORING ===")
    print()
    print("1. Structure :")
    print(f"   - Type       : {quiz.quiz_type.value}")
    print(f"   - Dimensions : {len(quiz.dimensions)}")
    print(f"   - Critères   : {len(quiz.criteria)}")
    print(f"   - Questions  : {len(quiz.questions)}")
    print(f"   - Réponses   : {len(answers)}")
    print()

    if quiz.is_complex:
        print("2. Dimensions :")
        for index, dim in enumerate(quiz.ordered_dimensions(), start=1):
            n_questions = sum(1 for q in quiz.questions if q.dimension_id == dim.id)
            print(f"   {index}. {dim.short_name} ({dim.name})")
            print(f"      - Seuil    : {dim.threshold}")
            print(f"      - Plage    : {dim.min_score}-{dim.max_score}")
            print(f"      - Questions: {n_questions}")
            print(f"      - Labels   : {dim.low_label}/{dim.high_label}")
            print(f"      - Score    : {quiz_score.dimension_scores.get(dim.short_name)}")
        print()
    else:
        print(f"2. Score : {quiz_score.total.score}/{quiz_score.total.max_score} ({quiz_score.total.percentage}%)")
        print()

    print("3. Classement :")
    for trace in quiz_score.classification.trace:
        mark = "✅" if trace.matched else "❌"
        reason = f" [{trace.reason.value}]" if trace.reason else ""
        print(f"   {mark} {trace.criterion}{reason}")
        for predicate in trace.predicates:
            print(f"      {predicate.comparison} = {predicate.matched}")
    print()

    feedback = build_result_feedback(quiz_score)
    print(f"4. Résultat : {feedback.classification} ({quiz_score.classification.status.value})")
    if feedback.level:
        print(f"   Niveau : {feedback.level.value}")
    if feedback.is_fallback:
        print("   ⚠️  Descripteur de repli : aucun critère stocké ne correspond")

    diagnostics = []
    if quiz_score.skipped_answers:
        diagnostics.append(f"{len(quiz_score.skipped_answers)} réponse(s) ignorée(s) (question/option inconnue)")
    if quiz_score.unassigned_answers:
        diagnostics.append(f"{len(quiz_score.unassigned_answers)} réponse(s) sur question orpheline")
    if quiz_score.duplicate_question_ids:
        diagnostics.append(f"Questions répondues plusieurs fois : {quiz_score.duplicate_question_ids}")
    if quiz_score.is_complex:
        diagnostics.extend(str(w) for w in diagnose_scores(quiz, quiz_score.dimension_scores))
    for line in diagnostics:
        print(f"   ⚠️  {line}")
    print()


# ─────────────────────────────────────────────
# COMMANDES
# ─────────────────────────────────────────────

async def run_validate(quiz_id: Optional[int]) -> int:
    async with AsyncSessionLocal() as db:
        if quiz_id is not None:
            reports: Dict[int, ValidationReport] = {quiz_id: await service.validate_quiz(db, quiz_id)}
        else:
            reports = await service.validate_all(db)

    for qid, report in reports.items():
        print_validation(qid, report)

    invalid = [qid for qid, r in reports.items() if not r.is_valid]
    print()
    print(f"Résumé : {len(reports)} quiz, {len(invalid)} invalide(s)")
    return EXIT_ISSUES if invalid else EXIT_OK


async def run_repair(quiz_id: int) -> int:
    async with AsyncSessionLocal() as db:
        report = await service.repair_quiz(db, quiz_id)
    print_repair(report)
    return EXIT_OK if report.success else EXIT_ISSUES


async def run_repair_all() -> int:
    async with AsyncSessionLocal() as db:
        reports = await service.repair_all(db)

    for report in reports:
        print_repair(report)
        print()
    failed = [r for r in reports if not r.success]
    n_fixes = sum(len(r.fixed) for r in reports)
    print(f"Résumé : {len(reports)} quiz COMPLEX, {n_fixes} correction(s), {len(failed)} en échec")
    return EXIT_ISSUES if failed else EXIT_OK


async def run_audit(result_id: int) -> int:
    async with AsyncSessionLocal() as db:
        report = await service.audit_result(db, result_id)
    print_audit(result_id, report)
    return EXIT_OK if report.matches else EXIT_ISSUES


def run_debug(path: str) -> int:
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    quiz, answers = ScoringDebugIn.model_validate(payload).to_engine()
    validation = validate_quiz(quiz)
    print_validation(quiz.id, validation)
    print()

    quiz_score = score_quiz(quiz, answers)
    print_debug(quiz, answers, quiz_score)
    return EXIT_OK if validation.is_valid and quiz_score.classification.is_match else EXIT_ISSUES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintenance des quiz (validation, réparation, audit, debug)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Logs DEBUG (trace engine)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Valider un quiz ou tous les quiz")
    p_validate.add_argument("--quiz-id", type=int, help="Quiz à valider (défaut : tous)")

    p_repair = sub.add_parser("repair", help="Réparer un quiz")
    p_repair.add_argument("--quiz-id", type=int, required=True)

    sub.add_parser("repair-all", help="Réparer tous les quiz COMPLEX")

    p_audit = sub.add_parser("audit", help="Recalculer un résultat stocké")
    p_audit.add_argument("--result-id", type=int, required=True)

    p_debug = sub.add_parser("debug", help="Scorer une fixture JSON sans DB")
    p_debug.add_argument("path", help="Fichier JSON {quiz, answers, questions?}")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        if args.command == "validate":
            return asyncio.run(run_validate(args.quiz_id))
        if args.command == "repair":
            return asyncio.run(run_repair(args.quiz_id))
        if args.command == "repair-all":
            return asyncio.run(run_repair_all())
        if args.command == "audit":
            return asyncio.run(run_audit(args.result_id))
        return run_debug(args.path)
    except (ValueError, ValidationError, OSError) as e:
        logger.error("%s", e)
        print(f"❌ {e}")
        return EXIT_ISSUES


if __name__ == "__main__":
    sys.exit(main())
