from django.dispatch import receiver

from progress.services.progress_service import record_quiz_outcome
from quizzes.signals import quiz_outcome_recorded


@receiver(quiz_outcome_recorded)
def _quiz_outcome_handler(sender, student, course_id, quiz_id, score, passed, count_attempt=True, **kwargs):
    # Exceptions are collected by send_robust and logged by the sender
    record_quiz_outcome(student, course_id, quiz_id, score, passed, count_attempt=count_attempt)
