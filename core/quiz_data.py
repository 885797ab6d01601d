# =============================================================================
# core/quiz_data.py - Onboarding Quiz Questions
# =============================================================================
# The five onboarding questions. Option values are what the recommendation
# rules in RecommendationService match on, so change them together.
# =============================================================================

from core.models.quiz import QuizQuestion


ONBOARDING_QUESTIONS: list[QuizQuestion] = [
    QuizQuestion.model_validate(question)
    for question in [
        {
            "id": "stress-sources",
            "question": "What causes you the most stress?",
            "type": "multiple",
            "options": [
                {"id": "work", "label": "Work or career", "value": "work", "icon": "💼"},
                {"id": "relationships", "label": "Relationships", "value": "relationships", "icon": "💬"},
                {"id": "health", "label": "Health concerns", "value": "health", "icon": "🏥"},
                {"id": "sleep", "label": "Sleep problems", "value": "sleep", "icon": "😴"},
                {"id": "general", "label": "General anxiety", "value": "general", "icon": "😰"},
                {"id": "physical", "label": "Physical tension", "value": "physical", "icon": "💪"},
            ],
        },
        {
            "id": "goals",
            "question": "What would you like to achieve?",
            "type": "multiple",
            "options": [
                {"id": "reduce-stress", "label": "Reduce daily stress", "value": "reduce-stress", "icon": "🧘"},
                {"id": "better-sleep", "label": "Sleep better", "value": "better-sleep", "icon": "🌙"},
                {"id": "release-tension", "label": "Release muscle tension", "value": "release-tension", "icon": "✨"},
                {"id": "calm-anxiety", "label": "Calm anxiety", "value": "calm-anxiety", "icon": "🌊"},
                {"id": "focus", "label": "Improve focus", "value": "focus", "icon": "🎯"},
                {"id": "build-habit", "label": "Build a relaxation habit", "value": "build-habit", "icon": "📅"},
            ],
        },
        {
            "id": "experience",
            "question": "Have you tried relaxation techniques before?",
            "type": "single",
            "options": [
                {"id": "beginner", "label": "I'm completely new to this", "value": "beginner", "icon": "🌱"},
                {"id": "some", "label": "I've tried a few things", "value": "intermediate", "icon": "🌿"},
                {"id": "experienced", "label": "I practice regularly", "value": "advanced", "icon": "🌳"},
            ],
        },
        {
            "id": "duration",
            "question": "How much time can you dedicate daily?",
            "type": "single",
            "options": [
                {"id": "5min", "label": "5 minutes or less", "value": "5", "icon": "⚡"},
                {"id": "10min", "label": "About 10 minutes", "value": "10", "icon": "⏱️"},
                {"id": "15min", "label": "15-20 minutes", "value": "15", "icon": "🕐"},
                {"id": "30min", "label": "30+ minutes", "value": "30", "icon": "🧘‍♀️"},
            ],
        },
        {
            "id": "focus-areas",
            "question": "Where do you hold the most tension?",
            "type": "multiple",
            "options": [
                {"id": "jaw", "label": "Jaw & face", "value": "jaw", "icon": "😬"},
                {"id": "neck", "label": "Neck", "value": "neck", "icon": "🦒"},
                {"id": "shoulders", "label": "Shoulders", "value": "shoulders", "icon": "💆"},
                {"id": "back", "label": "Back", "value": "back", "icon": "🔙"},
                {"id": "hands", "label": "Hands & arms", "value": "hands", "icon": "🤲"},
                {"id": "all", "label": "All over", "value": "all", "icon": "🧍"},
            ],
        },
    ]
]

QUESTIONS_BY_ID: dict[str, QuizQuestion] = {q.id: q for q in ONBOARDING_QUESTIONS}
