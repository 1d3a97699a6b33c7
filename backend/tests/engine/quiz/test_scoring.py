# tests/engine/quiz/test_scoring.py
"""
Tests unitaires pour engine.quiz.scoring.score_quiz()

Couverture :
    - Quiz DEFAULT : critère simple évalué sur le pourcentage
    - Quiz ONBOARDING : scoré comme un DEFAULT
    - Quiz COMPLEX : map de scores → critère à seuils
    - Quiz COMPLEX sans match → FALLBACK avec descripteur
    - Diagnostics d'agrégation remontés (réponses ignorées, orphelines)
    - Réponses au format dict acceptées
"""
import pytest

from app.engine.quiz.criteria import ClassificationStatus
from app.engine.quiz.model import Answer
from app.engine.quiz.scoring import score_quiz
from app.shared.enums import QuizType
from tests.conftest import answer_for, default_quiz, mbti_quiz

pytestmark = pytest.mark.engine


def _mbti_answers(quiz, values):
    """values : une valeur par question, dans l'ordre des questions."""
    return [answer_for(q, v) for q, v in zip(quiz.ordered_questions(), values)]


class TestScoreQuizDefault:
    def test_score_maximal_critere_master(self):
        quiz = default_quiz()
        result = score_quiz(quiz, [answer_for(q, 4) for q in quiz.questions])
        assert result.total.percentage == 100
        assert result.classification.status == ClassificationStatus.MATCHED
        assert result.classification_label == "Wellness Master"
        assert result.dimension_scores is None

    def test_score_moyen_critere_learner(self):
        quiz = default_quiz()
        result = score_quiz(quiz, [answer_for(q, 2) for q in quiz.questions])
        assert (result.total.score, result.total.max_score, result.total.percentage) == (10, 20, 50)
        assert result.classification.criterion.name == "Learner"

    def test_aucun_critere_unclassified(self):
        quiz = default_quiz(criteria=[])
        result = score_quiz(quiz, [answer_for(q, 2) for q in quiz.questions])
        assert result.classification.status == ClassificationStatus.UNCLASSIFIED
        assert result.classification_label is None

    def test_onboarding_score_comme_default(self):
        quiz = default_quiz(quiz_type=QuizType.ONBOARDING)
        result = score_quiz(quiz, [answer_for(q, 4) for q in quiz.questions])
        assert not result.is_complex
        assert result.classification.criterion.name == "Master"

    def test_reponses_dict(self):
        quiz = default_quiz()
        result = score_quiz(quiz, [{"questionId": 1, "optionId": 104}])
        assert result.total.percentage == 100


class TestScoreQuizComplex:
    def test_critere_istj(self):
        quiz = mbti_quiz()
        result = score_quiz(quiz, _mbti_answers(quiz, [5, 5, 10, 15, 5, 5, 15, 15]))
        assert result.dimension_scores == {"E/I": 10, "S/N": 25, "T/F": 10, "J/P": 30}
        assert result.classification.is_match
        assert result.classification_label == "The Inspector"

    def test_sans_match_descripteur_de_repli(self):
        quiz = mbti_quiz()
        result = score_quiz(quiz, _mbti_answers(quiz, [15, 15, 10, 15, 5, 5, 15, 15]))
        assert result.classification.status == ClassificationStatus.FALLBACK
        assert result.classification.criterion is None
        assert result.classification_label == "ESTJ"

    def test_total_cumule_toutes_dimensions(self):
        quiz = mbti_quiz()
        result = score_quiz(quiz, _mbti_answers(quiz, [5] * 8))
        assert result.total.score == 40
        assert result.total.max_score == 120

    def test_diagnostics_remontes(self):
        quiz = mbti_quiz()
        quiz.questions[0].dimension_id = None
        answers = [answer_for(quiz.questions[0], 5), Answer(question_id=404, option_id=1)]
        result = score_quiz(quiz, answers)
        assert len(result.unassigned_answers) == 1
        assert len(result.skipped_answers) == 1
        data = result.to_dict()
        assert data["diagnostics"]["skipped_answers"] == 1
        assert data["diagnostics"]["unassigned_answers"] == 1

    def test_quiz_none_leve_value_error(self):
        with pytest.raises(ValueError, match="Quiz requis"):
            score_quiz(None, [])
