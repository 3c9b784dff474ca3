import logging

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Prefetch
from django.utils.module_loading import import_string

from audit.services import QUIZ_CREATED, QUIZ_DELETED, record_event
from courses.models import Course, Lecture
from courses.services.enrollment_service import require_enrollment
from learnhub.exceptions import (
    AccessDeniedError,
    DependencyError,
    NotFoundError,
    PrerequisiteNotMetError,
    ValidationError,
)
from quizzes.constants import (
    DEFAULT_ATTEMPTS_ALLOWED,
    DEFAULT_PASSING_SCORE,
    MANUAL_REVIEW_TYPES,
    MULTIPLE_CHOICE,
    QUESTION_TYPES,
    QUIZ_TYPE_FINAL,
    QUIZ_TYPE_LESSON,
    SHORT_ANSWER,
    TRUE_FALSE,
    TRUE_FALSE_ANSWERS,
)
from quizzes.models import Question, Quiz, QuizAttempt

logger = logging.getLogger(__name__)

QUIZ_FIELDS = (
    'title', 'description', 'quiz_type', 'lecture_id', 'passing_score', 'time_limit',
    'attempts_allowed', 'enforce_attempt_limit', 'enforce_time_limit', 'is_active',
)
BOOLEAN_FIELDS = ('enforce_attempt_limit', 'enforce_time_limit', 'is_active')


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _as_int(value):
    """Return value as int, or None when it is not an integral number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _validate_question(index, data, errors):
    prefix = f"questions[{index}]"
    if not isinstance(data, dict):
        errors[prefix] = "Each question must be an object."
        return None

    question_type = data.get('question_type')
    prompt = data.get('prompt')
    options = data.get('options') or []
    correct_answer = data.get('correct_answer')
    points = _as_int(data.get('points'))

    if question_type not in QUESTION_TYPES:
        errors[f"{prefix}.question_type"] = (
            "Invalid type. Must be one of: " + ", ".join(sorted(QUESTION_TYPES)) + "."
        )
    if _is_blank(prompt) or not isinstance(prompt, str):
        errors[f"{prefix}.prompt"] = "Question text is required."
    if points is None or points < 1:
        errors[f"{prefix}.points"] = "Question must have at least 1 point."

    if question_type == MULTIPLE_CHOICE:
        if not isinstance(options, list) or len(options) < 2 or any(_is_blank(o) for o in options):
            errors[f"{prefix}.options"] = "Multiple choice questions must have at least 2 non-empty options."
        index_value = _as_int(correct_answer)
        if _is_blank(correct_answer) or index_value is None:
            errors[f"{prefix}.correct_answer"] = "Correct answer must be the zero-based index of an option."
        elif isinstance(options, list) and not 0 <= index_value < len(options):
            errors[f"{prefix}.correct_answer"] = "Correct answer index is out of range."
        else:
            correct_answer = str(index_value)
    elif question_type == TRUE_FALSE:
        if isinstance(correct_answer, bool):
            correct_answer = 'true' if correct_answer else 'false'
        if correct_answer not in TRUE_FALSE_ANSWERS:
            errors[f"{prefix}.correct_answer"] = "Correct answer must be 'true' or 'false'."
        options = []
    elif question_type == SHORT_ANSWER:
        if _is_blank(correct_answer):
            errors[f"{prefix}.correct_answer"] = "Short answer questions must have a correct answer."
        options = []
    elif question_type in MANUAL_REVIEW_TYPES:
        # Optional sample answer, never used for grading.
        options = []

    return {
        'question_type': question_type,
        'prompt': prompt.strip() if isinstance(prompt, str) else prompt,
        'options': [str(o) for o in options] if isinstance(options, list) else [],
        'correct_answer': '' if correct_answer is None else str(correct_answer),
        'points': points,
        'order': index,
    }


def validate_quiz_definition(data):
    """
    Validate a full quiz definition.

    Returns ``(cleaned, course, lecture)``. Raises one ValidationError whose
    ``errors`` mapping lists every violated field.
    """
    if not isinstance(data, dict):
        raise ValidationError("Quiz definition must be an object.")

    errors = {}
    cleaned = {}

    title = data.get('title')
    if _is_blank(title) or not isinstance(title, str):
        errors['title'] = "Title is required."
    elif len(title.strip()) > 200:
        errors['title'] = "Title must be at most 200 characters."
    else:
        cleaned['title'] = title.strip()
    cleaned['description'] = data.get('description') or ''

    course = None
    course_id = _as_int(data.get('course_id'))
    if course_id is None:
        errors['course_id'] = "A valid course ID is required."
    else:
        course = Course.objects.filter(id=course_id).first()
        if course is None:
            errors['course_id'] = "Course not found."

    quiz_type = data.get('quiz_type')
    if quiz_type not in (QUIZ_TYPE_LESSON, QUIZ_TYPE_FINAL):
        errors['quiz_type'] = "Invalid quiz type. Must be 'lesson' or 'final'."
    cleaned['quiz_type'] = quiz_type

    lecture = None
    raw_lecture_id = data.get('lecture_id')
    if quiz_type == QUIZ_TYPE_LESSON:
        lecture_id = _as_int(raw_lecture_id)
        if _is_blank(raw_lecture_id):
            errors['lecture_id'] = "Lecture ID is required for lesson quizzes."
        elif lecture_id is None:
            errors['lecture_id'] = "Invalid lecture ID format."
        elif course is not None:
            lecture = Lecture.objects.filter(id=lecture_id, course=course).first()
            if lecture is None:
                errors['lecture_id'] = "Lecture not found in this course."
    elif quiz_type == QUIZ_TYPE_FINAL and not _is_blank(raw_lecture_id):
        errors['lecture_id'] = "Final quizzes cannot be attached to a lecture."
    cleaned['lecture_id'] = lecture.id if lecture else None

    passing_score = data.get('passing_score')
    if passing_score is None:
        cleaned['passing_score'] = DEFAULT_PASSING_SCORE
    else:
        value = _as_int(passing_score)
        if value is None or not 0 <= value <= 100:
            errors['passing_score'] = "Passing score must be an integer between 0 and 100."
        cleaned['passing_score'] = value

    time_limit = data.get('time_limit')
    if time_limit is None or time_limit == '':
        cleaned['time_limit'] = None
    else:
        value = _as_int(time_limit)
        if value is None or value < 1:
            errors['time_limit'] = "Time limit must be a positive number of minutes."
        cleaned['time_limit'] = value

    attempts_allowed = data.get('attempts_allowed')
    if attempts_allowed is None:
        cleaned['attempts_allowed'] = DEFAULT_ATTEMPTS_ALLOWED
    else:
        value = _as_int(attempts_allowed)
        if value is None or value < 1:
            errors['attempts_allowed'] = "Attempts allowed must be at least 1."
        cleaned['attempts_allowed'] = value

    for name in BOOLEAN_FIELDS:
        value = data.get(name, True)
        if not isinstance(value, bool):
            errors[name] = "Must be a boolean."
        cleaned[name] = value

    questions = data.get('questions')
    cleaned_questions = []
    if not isinstance(questions, list) or len(questions) == 0:
        errors['questions'] = "At least one question is required."
    else:
        for index, question in enumerate(questions):
            cleaned_questions.append(_validate_question(index, question, errors))
    cleaned['questions'] = cleaned_questions

    if errors:
        raise ValidationError("Quiz validation failed.", errors=errors)
    return cleaned, course, lecture


def _check_course_owner(instructor, course):
    if course.instructor_id != instructor.pk and not instructor.is_admin:
        raise AccessDeniedError("You can only manage quizzes for your own courses.")


def _replace_questions(quiz, questions):
    quiz.questions.all().delete()
    Question.objects.bulk_create([Question(quiz=quiz, **q) for q in questions])


# ---------------------------------------------------------------------------
# Instructor operations
# ---------------------------------------------------------------------------

def create_quiz(instructor, definition):
    cleaned, course, lecture = validate_quiz_definition(definition)
    _check_course_owner(instructor, course)

    questions = cleaned.pop('questions')
    cleaned.pop('lecture_id')
    with transaction.atomic():
        quiz = Quiz.objects.create(course=course, lecture=lecture, created_by=instructor, **cleaned)
        _replace_questions(quiz, questions)

    logger.info(f"Instructor {instructor.pk} created quiz {quiz.id} for course {course.id}")
    record_event(instructor, QUIZ_CREATED, 'quiz', target_id=quiz.id, target_name=quiz.title, details={'course_id': course.id})
    return quiz


def get_owned_quiz(instructor, quiz_id):
    try:
        return Quiz.objects.select_related('course', 'lecture').get(id=quiz_id, created_by=instructor)
    except Quiz.DoesNotExist:
        raise NotFoundError("Quiz not found.")


def quiz_to_definition(quiz):
    definition = {name: getattr(quiz, name) for name in QUIZ_FIELDS}
    definition['course_id'] = quiz.course_id
    definition['questions'] = [
        {
            'question_type': q.question_type,
            'prompt': q.prompt,
            'options': q.options,
            'correct_answer': q.correct_answer,
            'points': q.points,
        }
        for q in quiz.questions.all()
    ]
    return definition


def update_quiz(instructor, quiz_id, changes):
    """
    Partial update restricted to the quiz owner.
    The merged definition is re-validated; a supplied ``questions`` list
    replaces the existing question set.
    """
    quiz = get_owned_quiz(instructor, quiz_id)
    if not isinstance(changes, dict):
        raise ValidationError("Quiz changes must be an object.")

    if 'course_id' in changes and _as_int(changes['course_id']) != quiz.course_id:
        raise ValidationError("Quiz validation failed.", errors={'course_id': "A quiz cannot be moved to another course."})

    merged = quiz_to_definition(quiz)
    if changes.get('quiz_type') == QUIZ_TYPE_FINAL and 'lecture_id' not in changes:
        merged['lecture_id'] = None
    for key, value in changes.items():
        if key in QUIZ_FIELDS or key == 'questions':
            merged[key] = value

    cleaned, _course, lecture = validate_quiz_definition(merged)
    questions = cleaned.pop('questions')
    cleaned.pop('lecture_id')

    with transaction.atomic():
        for name, value in cleaned.items():
            setattr(quiz, name, value)
        quiz.lecture = lecture
        quiz.save()
        if 'questions' in changes:
            _replace_questions(quiz, questions)

    logger.info(f"Instructor {instructor.pk} updated quiz {quiz.id}")
    return quiz


def delete_quiz(instructor, quiz_id):
    quiz = get_owned_quiz(instructor, quiz_id)
    title = quiz.title
    quiz.delete()
    logger.info(f"Instructor {instructor.pk} deleted quiz {quiz_id}")
    record_event(instructor, QUIZ_DELETED, 'quiz', target_id=quiz_id, target_name=title)


def get_quiz_for_instructor(instructor, quiz_id):
    return get_owned_quiz(instructor, quiz_id)


def list_quizzes_for_instructor(instructor, course_id):
    return Quiz.objects.filter(course_id=course_id, created_by=instructor).prefetch_related('questions')


def get_quiz_attempts_for_instructor(instructor, quiz_id):
    quiz = get_owned_quiz(instructor, quiz_id)
    attempts = (
        QuizAttempt.objects.filter(quiz=quiz)
        .select_related('student')
        .prefetch_related('answers')
        .order_by('student_id', 'attempt_number')
    )
    return quiz, attempts


# ---------------------------------------------------------------------------
# Student operations
# ---------------------------------------------------------------------------

def get_prerequisite_checker():
    return import_string(settings.QUIZ_PREREQUISITE_CHECKER)


def lecture_prerequisite_met(student, quiz):
    """Final quizzes have no prerequisite; lesson quizzes need their lecture fully watched."""
    if quiz.lecture_id is None:
        return True
    checker = get_prerequisite_checker()
    try:
        return bool(checker(student, quiz.lecture_id))
    except DatabaseError as e:
        logger.error(f"Prerequisite lookup failed for quiz {quiz.id}: {str(e)}", exc_info=True)
        raise DependencyError("Course progress is unavailable.") from e


def get_active_quiz(quiz_id):
    try:
        return Quiz.objects.select_related('course').get(id=quiz_id, is_active=True)
    except Quiz.DoesNotExist:
        raise NotFoundError("Quiz not found or inactive.")


def get_quiz_for_student(student, quiz_id):
    """
    Quiz as shown to a student. Correct answers are redacted by the
    serializer used for this payload; the student's attempts are attached as
    ``student_attempts``.
    """
    quiz = get_active_quiz(quiz_id)
    require_enrollment(student, quiz.course_id)
    if not lecture_prerequisite_met(student, quiz):
        raise PrerequisiteNotMetError()
    quiz.student_attempts = list(QuizAttempt.objects.filter(quiz=quiz, student=student).order_by('attempt_number'))
    return quiz


def list_quizzes_for_course(student, course_id, with_prerequisite_filter=True):
    """
    Active quizzes of a course with the student's attempts.
    With the prerequisite filter on, lesson quizzes whose lecture is not fully
    watched are left out; final quizzes are always listed.
    """
    require_enrollment(student, course_id)
    quizzes = (
        Quiz.objects.filter(course_id=course_id, is_active=True)
        .prefetch_related(
            'questions',
            Prefetch(
                'attempts',
                queryset=QuizAttempt.objects.filter(student=student).order_by('attempt_number'),
                to_attr='student_attempts',
            ),
        )
    )
    if not with_prerequisite_filter:
        return list(quizzes)
    return [quiz for quiz in quizzes if lecture_prerequisite_met(student, quiz)]
