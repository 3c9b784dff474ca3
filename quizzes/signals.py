from django.dispatch import Signal

# Sent after an attempt is graded and again after a manual review changes its
# outcome. Keyword arguments: student, course_id, quiz_id, score, passed,
# count_attempt.
quiz_outcome_recorded = Signal()
