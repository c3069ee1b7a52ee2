"""Folds quiz scores into a user's running performance profile."""

from edumind.models.user_profile import PerformanceProfile

WEAK_TOPIC_THRESHOLD = 60.0
STRONG_TOPIC_THRESHOLD = 80.0


def apply_quiz_result(
    profile: PerformanceProfile,
    score: float,
    topic: str,
    *,
    weak_below: float = WEAK_TOPIC_THRESHOLD,
    strong_at: float = STRONG_TOPIC_THRESHOLD,
) -> PerformanceProfile:
    """Return a new profile with one more quiz folded in.

    The average is updated incrementally, weighted by the quiz count before
    this result, so each quiz counts once whatever its length. A score below
    `weak_below` marks the topic weak; a score of `strong_at` or more clears
    it; anything in between leaves the weak topics as they were.

    Args:
        profile: Profile before this quiz.
        score: Quiz score in [0, 100].
        topic: Topic the quiz was generated for.

    Returns:
        Updated copy of the profile; the input is not modified.
    """
    count = profile.total_quizzes
    average = (profile.average_score * count + score) / (count + 1)

    weak_topics = list(profile.weak_topics)
    if score < weak_below and topic not in weak_topics:
        weak_topics.append(topic)
    elif score >= strong_at:
        weak_topics = [t for t in weak_topics if t != topic]

    return PerformanceProfile(
        total_quizzes=count + 1,
        average_score=average,
        weak_topics=weak_topics,
    )
