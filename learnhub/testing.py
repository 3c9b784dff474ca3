"""Object factories shared by the test suites of every app."""
from datetime import timedelta

from django.utils import timezone

from accounts.models import User
from courses.models import Course, Enrollment, Lecture
from quizzes.constants import BROAD_TEXT, MULTIPLE_CHOICE, QUIZ_TYPE_FINAL, QUIZ_TYPE_LESSON
from quizzes.models import Question, Quiz


def make_user(email, role=User.Role.STUDENT, password='Str0ng-pass!', **extra):
    return User.objects.create_user(
        email=email,
        first_name=email.split('@')[0].title(),
        password=password,
        role=role,
        **extra
    )


def make_course(instructor, title='Python 101', lectures=2, published=True):
    course = Course.objects.create(title=title, instructor=instructor, price=10, is_published=published)
    for index in range(lectures):
        Lecture.objects.create(course=course, title=f"Lecture {index + 1}", order=index)
    return course


def enroll(student, course):
    return Enrollment.objects.create(student=student, course=course, paid_amount=course.price)


def make_quiz(course, questions=None, lecture=None, **fields):
    """
    Quiz with the given question specs, by default two multiple-choice
    questions worth 2 and 1 points whose correct option is index 0.
    """
    fields.setdefault('title', 'Quiz')
    fields.setdefault('quiz_type', QUIZ_TYPE_LESSON if lecture else QUIZ_TYPE_FINAL)
    fields.setdefault('passing_score', 70)
    quiz = Quiz.objects.create(course=course, lecture=lecture, created_by=course.instructor, **fields)

    if questions is None:
        questions = [
            {'question_type': MULTIPLE_CHOICE, 'options': ['a', 'b'], 'correct_answer': '0', 'points': 2},
            {'question_type': MULTIPLE_CHOICE, 'options': ['a', 'b'], 'correct_answer': '0', 'points': 1},
        ]
    for order, spec in enumerate(questions):
        Question.objects.create(
            quiz=quiz,
            prompt=spec.get('prompt', f"Question {order + 1}"),
            order=order,
            question_type=spec['question_type'],
            options=spec.get('options', []),
            correct_answer=spec.get('correct_answer', ''),
            points=spec.get('points', 1),
        )
    return quiz


def mixed_quiz(course, **fields):
    """One auto-graded multiple-choice question (2 pts) and one broad-text question (3 pts)."""
    return make_quiz(course, questions=[
        {'question_type': MULTIPLE_CHOICE, 'options': ['a', 'b', 'c'], 'correct_answer': '1', 'points': 2},
        {'question_type': BROAD_TEXT, 'points': 3},
    ], **fields)


def backdate(attempt, **delta):
    attempt.started_at = timezone.now() - timedelta(**delta)
    attempt.save(update_fields=['started_at'])
    return attempt
