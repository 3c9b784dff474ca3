# Question types and their grading mode.

MULTIPLE_CHOICE = 'multiple-choice'
TRUE_FALSE = 'true-false'
BROAD_TEXT = 'broad-text'
SHORT_ANSWER = 'short-answer'
ESSAY = 'essay'

QUESTION_TYPE_CHOICES = [
    (MULTIPLE_CHOICE, 'Multiple Choice'),
    (TRUE_FALSE, 'True/False'),
    (BROAD_TEXT, 'Broad Text'),
    (SHORT_ANSWER, 'Short Answer'),
    (ESSAY, 'Essay'),
]

QUESTION_TYPES = {value for value, _ in QUESTION_TYPE_CHOICES}

# Answers to these types are graded by an instructor, never automatically.
MANUAL_REVIEW_TYPES = frozenset({BROAD_TEXT, ESSAY})

TRUE_FALSE_ANSWERS = ('true', 'false')

QUIZ_TYPE_LESSON = 'lesson'
QUIZ_TYPE_FINAL = 'final'

QUIZ_TYPE_CHOICES = [
    (QUIZ_TYPE_LESSON, 'Lesson'),
    (QUIZ_TYPE_FINAL, 'Final'),
]

DEFAULT_PASSING_SCORE = 70
DEFAULT_ATTEMPTS_ALLOWED = 1
