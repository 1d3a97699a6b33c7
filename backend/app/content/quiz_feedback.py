# app/content/quiz_feedback.py
"""
Textes de restitution des quiz DEFAULT sans critère applicable.

Barème par pourcentage (bornes basses incluses) :
    >= 80 → Master   (EXCELLENT)
    >= 60 → Builder  (GOOD)
    >= 40 → Learner  (FAIR)
    sinon → Starter  (NEEDS_IMPROVEMENT)

Les textes sont affichés tels quels à l'utilisateur final (anglais, comme
le contenu des quiz).
"""

from app.shared.enums import QuizResultLevel

BAND_EXCELLENT = 80
BAND_GOOD      = 60
BAND_FAIR      = 40

GRADING_BANDS = {
    QuizResultLevel.EXCELLENT: {
        "classification": "Master",
        "feedback": "Excellent! You demonstrate mastery in this area.",
        "recommendations": [
            "Continue building on your strong foundation",
            "Share your knowledge with others",
            "Consider mentoring or coaching others",
        ],
        "areas_of_improvement": [],
        "support_needed": ["Advanced resources", "Mentorship opportunities"],
    },
    QuizResultLevel.GOOD: {
        "classification": "Builder",
        "feedback": "Good! You have a solid foundation with room for improvement.",
        "recommendations": [
            "Focus on consistency in your practice",
            "Identify and work on your weakest areas",
            "Set specific, measurable goals",
        ],
        "areas_of_improvement": ["Consistency", "Advanced techniques"],
        "support_needed": ["Practice tools", "Accountability partner"],
    },
    QuizResultLevel.FAIR: {
        "classification": "Learner",
        "feedback": "Fair. You have potential but need to develop better practices.",
        "recommendations": [
            "Start with one small change",
            "Create a structured practice routine",
            "Seek accountability from friends or family",
        ],
        "areas_of_improvement": ["Basic practices", "Consistency", "Understanding"],
        "support_needed": ["Beginner resources", "Practice guidance", "Community support"],
    },
    QuizResultLevel.NEEDS_IMPROVEMENT: {
        "classification": "Starter",
        "feedback": "You have significant room for improvement in this area.",
        "recommendations": [
            "Start with very small, manageable changes",
            "Consider working with a coach or mentor",
            "Focus on building one practice at a time",
        ],
        "areas_of_improvement": ["Basic understanding", "Practice habits", "Consistency"],
        "support_needed": ["Professional guidance", "Structured programs", "Regular check-ins"],
    },
}

# Critère matché : textes génériques complémentaires
MATCHED_AREAS_OF_IMPROVEMENT = ["Focus on areas for improvement"]
MATCHED_SUPPORT_NEEDED       = ["Consider the recommended courses and products"]


def default_criterion_feedback(criterion_name: str) -> str:
    return f"You scored in the {criterion_name} range."


def fallback_feedback(descriptor: str) -> str:
    return f"Your profile: {descriptor}."
