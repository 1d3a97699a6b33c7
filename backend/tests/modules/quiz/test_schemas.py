# tests/modules/quiz/test_schemas.py
"""
Tests unitaires pour modules.quiz.schemas

Couverture :
    - JSON camelCase (exports) et lignes ORM → mêmes dataclasses engine
    - parse_scoring_logic() : threshold valide, type non supporté, payload cassé
    - QuizDefinitionIn : critères retenus selon le type de quiz
    - ScoringDebugIn : questions de premier niveau prioritaires
    - OrmQuizWriter : écritures sur les lignes, ids inconnus refusés
"""
import pytest
from pydantic import ValidationError

from app.engine.quiz.model import SimpleRange, ThresholdSet
from app.modules.quiz.repository import OrmQuizWriter
from app.modules.quiz.schemas import (
    AnswerIn,
    ComplexGradingCriteriaIn,
    QuizDefinitionIn,
    QuizSubmissionIn,
    ScoringDebugIn,
    parse_scoring_logic,
)
from app.shared.enums import QuizType
from tests.conftest import make_complex_criteria_row, make_criteria_row, make_quiz_row

pytestmark = pytest.mark.service


def _camel_quiz() -> dict:
    return {
        "id": 7,
        "title": "Personality",
        "quizType": "COMPLEX",
        "dimensions": [{
            "id": 1, "name": "Extraversion/Introversion", "shortName": "E/I",
            "order": 0, "minScore": 0, "maxScore": 10, "threshold": 3,
            "lowLabel": "I", "highLabel": "E",
        }],
        "questions": [{
            "id": 1, "order": 0, "dimensionId": 1,
            "options": [{"id": 101, "value": 0}, {"id": 102, "value": 5}],
        }],
        "complexGradingCriteria": [{
            "name": "Extravert", "label": "The Extravert",
            "scoringLogic": {"type": "threshold", "dimensions": [{"name": "E/I", "value": "high", "threshold": "3"}]},
        }],
        "gradingCriteria": [{"name": "Ignored", "minScore": 0, "maxScore": 100}],
    }


class TestQuizDefinitionIn:
    def test_json_camel_case(self):
        quiz = QuizDefinitionIn.model_validate(_camel_quiz()).to_engine()
        assert quiz.quiz_type == QuizType.COMPLEX
        assert quiz.dimensions[0].short_name == "E/I"
        assert quiz.dimensions[0].low_label == "I"
        assert quiz.questions[0].dimension_id == 1
        assert quiz.questions[0].max_option_value() == 5

    def test_complex_garde_seulement_les_criteres_a_seuils(self):
        quiz = QuizDefinitionIn.model_validate(_camel_quiz()).to_engine()
        assert [c.name for c in quiz.criteria] == ["Extravert"]
        assert quiz.criteria[0].logic.predicates[0].threshold == 3.0

    def test_default_garde_les_criteres_simples(self):
        row = make_quiz_row(quiz_type="DEFAULT", grading_criteria=[make_criteria_row()])
        quiz = QuizDefinitionIn.model_validate(row).to_engine()
        assert len(quiz.criteria) == 1
        assert isinstance(quiz.criteria[0].logic, SimpleRange)
        assert quiz.criteria[0].raw_logic_type == "range"

    def test_ligne_orm(self):
        quiz = QuizDefinitionIn.model_validate(make_quiz_row()).to_engine()
        assert quiz.id == 1
        assert [o.id for o in quiz.questions[1].options] == [201, 202]

    def test_recommandations_nulles(self):
        criterion = ComplexGradingCriteriaIn.model_validate(
            make_complex_criteria_row(recommendations=None)
        ).to_engine()
        assert criterion.recommendations == []


class TestParseScoringLogic:
    def test_threshold_valide(self):
        logic, raw_type = parse_scoring_logic({
            "type": "threshold",
            "dimensions": [{"name": "E/I", "value": "low"}, {"name": "S/N", "value": "high", "threshold": 20}],
        })
        assert raw_type == "threshold"
        assert isinstance(logic, ThresholdSet)
        assert logic.predicates[0].threshold is None
        assert logic.predicates[1].threshold == 20

    @pytest.mark.parametrize("payload,expected_type", [
        (None, None),
        ("threshold", None),
        ({"dimensions": []}, None),
        ({"type": "highest"}, "highest"),
        ({"type": "threshold"}, "threshold"),
        ({"type": "threshold", "dimensions": [{"value": "low"}]}, "threshold"),
        ({"type": "threshold", "dimensions": [{"name": "E/I", "threshold": "abc"}]}, "threshold"),
    ])
    def test_payload_inexploitable(self, payload, expected_type):
        logic, raw_type = parse_scoring_logic(payload)
        assert logic is None
        assert raw_type == expected_type


class TestSubmission:
    def test_reponses_snake_et_camel(self):
        assert AnswerIn.model_validate({"questionId": 1, "optionId": 2}).to_engine().option_id == 2
        assert AnswerIn.model_validate({"question_id": 1, "option_id": 2}).to_engine().question_id == 1

    def test_soumission_vide_refusee(self):
        with pytest.raises(ValidationError):
            QuizSubmissionIn.model_validate({"answers": []})

    def test_temps_negatif_refuse(self):
        with pytest.raises(ValidationError):
            QuizSubmissionIn.model_validate({"answers": [{"questionId": 1, "optionId": 2}], "timeSpent": -1})


class TestScoringDebugIn:
    def test_questions_de_premier_niveau_prioritaires(self):
        payload = {
            "quiz": _camel_quiz(),
            "questions": [
                {"id": 1, "order": 0, "dimensionId": 1, "options": [{"id": 101, "value": 0}]},
                {"id": 2, "order": 1, "dimensionId": 1, "options": [{"id": 201, "value": 5}]},
            ],
            "answers": [{"questionId": 2, "optionId": 201}],
        }
        quiz, answers = ScoringDebugIn.model_validate(payload).to_engine()
        assert [q.id for q in quiz.questions] == [1, 2]
        assert answers[0].option_id == 201

    def test_sans_questions_de_premier_niveau(self):
        quiz, answers = ScoringDebugIn.model_validate({"quiz": _camel_quiz()}).to_engine()
        assert len(quiz.questions) == 1
        assert answers == []


class TestOrmQuizWriter:
    def test_ecritures_sur_les_lignes(self):
        row = make_quiz_row()
        writer = OrmQuizWriter(row)
        writer.set_question_dimension(2, 1)
        writer.set_dimension_range(1, 0, 42)
        assert row.questions[1].dimension_id == 1
        assert row.dimensions[0].max_score == 42
        assert writer.writes == 2

    def test_question_inconnue_refusee(self):
        writer = OrmQuizWriter(make_quiz_row())
        with pytest.raises(ValueError, match="Question 99"):
            writer.set_question_dimension(99, 1)
        assert writer.writes == 0

    def test_dimension_inconnue_refusee(self):
        writer = OrmQuizWriter(make_quiz_row())
        with pytest.raises(ValueError, match="Dimension 9"):
            writer.set_question_dimension(1, 9)
        with pytest.raises(ValueError, match="Dimension 9"):
            writer.set_dimension_range(9, 0, 10)
