# =============================================================================
# core/catalog.py - Built-in Quick Exercises
# =============================================================================
# Three short exercises that work without any database content, for the
# dashboard's "quick relief" buttons. They use string IDs (quick-*) and are
# recorded with exercise_id = null when completed.
# =============================================================================

from core.models.exercise import Exercise


QUICK_BREATHING = Exercise(
    id="quick-breathing",
    title="2-Minute Calm",
    description="A quick box breathing exercise to help you find calm in any moment.",
    type="breathing",
    duration_seconds=120,
    content={},
    breathing_pattern={
        "inhale": 4,
        "hold": 4,
        "exhale": 4,
        "holdAfterExhale": 4,
        "cycles": 8,
    },
)


QUICK_PMR = Exercise(
    id="quick-pmr",
    title="Shoulder Release",
    description="A quick tension release for your neck and shoulders - perfect for desk workers.",
    type="pmr",
    duration_seconds=300,
    content={
        "steps": [
            {
                "muscleGroup": "neck",
                "phase": "tense",
                "instruction": "Gently tilt your head forward, chin toward chest. Feel the stretch in the back of your neck.",
                "duration": 10,
            },
            {
                "muscleGroup": "neck",
                "phase": "hold",
                "instruction": "Hold this position. Notice the gentle tension.",
                "duration": 5,
            },
            {
                "muscleGroup": "neck",
                "phase": "release",
                "instruction": "Slowly release, bringing your head back to center.",
                "duration": 10,
            },
            {
                "muscleGroup": "neck",
                "phase": "rest",
                "instruction": "Rest and feel the relaxation spreading through your neck.",
                "duration": 15,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "tense",
                "instruction": "Raise your shoulders up toward your ears. Hold them there tightly.",
                "duration": 10,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "hold",
                "instruction": "Keep your shoulders raised. Feel the tension building.",
                "duration": 5,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "release",
                "instruction": "Let your shoulders drop completely. Let all the tension melt away.",
                "duration": 10,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "rest",
                "instruction": "Rest and notice the warmth and relaxation in your shoulders.",
                "duration": 15,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "tense",
                "instruction": "Roll your shoulders back and squeeze your shoulder blades together.",
                "duration": 10,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "hold",
                "instruction": "Hold this squeeze. Feel the muscles between your shoulder blades.",
                "duration": 5,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "release",
                "instruction": "Release and let your shoulders return to a natural position.",
                "duration": 10,
            },
            {
                "muscleGroup": "shoulders",
                "phase": "rest",
                "instruction": "Rest. Notice how much lighter your shoulders feel now.",
                "duration": 20,
            },
            {
                "muscleGroup": "neck",
                "phase": "tense",
                "instruction": "Gently tilt your head to the right, ear toward shoulder.",
                "duration": 10,
            },
            {
                "muscleGroup": "neck",
                "phase": "release",
                "instruction": "Return to center, then tilt to the left.",
                "duration": 10,
            },
            {
                "muscleGroup": "neck",
                "phase": "rest",
                "instruction": "Return to center. Take a deep breath and enjoy the relaxation.",
                "duration": 20,
            },
        ]
    },
    muscle_groups=["neck", "shoulders"],
    target_areas=["neck", "shoulders"],
)


QUICK_MEDITATION = Exercise(
    id="quick-meditation",
    title="Mindful Moment",
    description="A brief meditation to help you reconnect with the present moment.",
    type="meditation",
    duration_seconds=180,
    content={
        "steps": [
            {
                "instruction": "Find a comfortable position and gently close your eyes.",
                "duration": 15,
                "audioScript": "Find a comfortable position. Let your eyes gently close. Take a moment to arrive fully in this space.",
            },
            {
                "instruction": "Take three deep breaths, letting each exhale release any tension.",
                "duration": 20,
                "audioScript": "Take a deep breath in through your nose. And slowly exhale through your mouth. Again, breathe in deeply. And release. One more time, breathe in. And let go completely.",
            },
            {
                "instruction": "Notice the sensations in your body right now.",
                "duration": 25,
                "audioScript": "Now, bring your attention to your body. Notice any sensations present right now. Perhaps you feel the weight of your body where you are sitting or standing. Simply observe without judgment.",
            },
            {
                "instruction": "Let your breath return to its natural rhythm.",
                "duration": 20,
                "audioScript": "Allow your breath to return to its natural rhythm. No need to control it. Simply observe each breath as it comes and goes.",
            },
            {
                "instruction": "Focus on the present moment. Let thoughts come and go.",
                "duration": 40,
                "audioScript": "Rest your attention on this present moment. If thoughts arise, acknowledge them gently and let them drift away like clouds in the sky. Return your focus to your breath, to this moment, to simply being here.",
            },
            {
                "instruction": "Notice the stillness within you.",
                "duration": 30,
                "audioScript": "Notice the stillness that exists beneath all your thoughts and feelings. This peaceful awareness is always available to you. You can return to it anytime you need.",
            },
            {
                "instruction": "Slowly bring your awareness back to the room.",
                "duration": 20,
                "audioScript": "Now, slowly begin to bring your awareness back to your surroundings. Notice the sounds around you. Feel the surface beneath you.",
            },
            {
                "instruction": "When you are ready, gently open your eyes.",
                "duration": 10,
                "audioScript": "When you feel ready, gently open your eyes. Carry this sense of calm with you as you continue your day.",
            },
        ]
    },
    audio_script=(
        "Find a comfortable position and close your eyes. Take three deep breaths, "
        "letting each exhale release any tension. Notice the sensations in your body "
        "right now. Let your breath return to its natural rhythm. Focus on the present "
        "moment, letting thoughts come and go like clouds. Notice the stillness within "
        "you. Slowly bring your awareness back to the room. When ready, gently open your eyes."
    ),
    target_areas=["calm", "focus"],
)


QUICK_EXERCISES: dict[str, Exercise] = {
    exercise.id: exercise
    for exercise in (QUICK_BREATHING, QUICK_PMR, QUICK_MEDITATION)
}


def is_quick_exercise(exercise_id: str | None) -> bool:
    return bool(exercise_id) and exercise_id in QUICK_EXERCISES


def get_quick_exercise(exercise_id: str) -> Exercise | None:
    return QUICK_EXERCISES.get(exercise_id)
