from django.test import TestCase

from accounts.models import User
from learnhub.exceptions import AccessDeniedError, NotFoundError, PrerequisiteNotMetError, ValidationError
from learnhub.testing import enroll, make_course, make_quiz, make_user
from progress.services.progress_service import record_lecture_view
from quizzes.constants import ESSAY, MULTIPLE_CHOICE, TRUE_FALSE
from quizzes.models import Question, Quiz
from quizzes.serializers import StudentQuizSerializer
from quizzes.services.quiz_service import (
    create_quiz,
    delete_quiz,
    get_quiz_for_student,
    list_quizzes_for_course,
    update_quiz,
)


class QuizDefinitionTests(TestCase):
    def setUp(self):
        self.instructor = make_user('instructor@example.com', role=User.Role.INSTRUCTOR)
        self.other_instructor = make_user('other@example.com', role=User.Role.INSTRUCTOR)
        self.course = make_course(self.instructor)
        self.lecture = self.course.lectures.first()

    def definition(self, **overrides):
        data = {
            'course_id': self.course.id,
            'lecture_id': self.lecture.id,
            'quiz_type': 'lesson',
            'title': 'Lecture 1 check',
            'passing_score': 60,
            'questions': [
                {'question_type': MULTIPLE_CHOICE, 'prompt': 'Pick b', 'options': ['a', 'b'], 'correct_answer': 1, 'points': 2},
                {'question_type': TRUE_FALSE, 'prompt': 'Sky is blue', 'correct_answer': True, 'points': 1},
                {'question_type': ESSAY, 'prompt': 'Explain', 'points': 5},
            ],
        }
        data.update(overrides)
        return data

    def test_create_quiz(self):
        quiz = create_quiz(self.instructor, self.definition())
        self.assertEqual(quiz.created_by, self.instructor)
        self.assertEqual(quiz.lecture, self.lecture)
        self.assertEqual(quiz.attempts_allowed, 1)
        self.assertEqual(quiz.total_points, 8)
        questions = list(quiz.questions.all())
        self.assertEqual(questions[0].correct_answer, '1')
        self.assertEqual(questions[1].correct_answer, 'true')
        self.assertTrue(questions[2].needs_manual_review)

    def test_validation_reports_every_invalid_field(self):
        with self.assertRaises(ValidationError) as ctx:
            create_quiz(self.instructor, {
                'quiz_type': 'lesson',
                'passing_score': 150,
                'attempts_allowed': 0,
                'questions': [
                    {'question_type': 'matching', 'prompt': '', 'points': 0},
                    {'question_type': MULTIPLE_CHOICE, 'prompt': 'Q', 'options': ['only'], 'correct_answer': '3', 'points': 1},
                ],
            })
        errors = ctx.exception.errors
        for field in (
            'title', 'course_id', 'lecture_id', 'passing_score', 'attempts_allowed',
            'questions[0].question_type', 'questions[0].prompt', 'questions[0].points',
            'questions[1].options', 'questions[1].correct_answer',
        ):
            self.assertIn(field, errors)
        self.assertFalse(Quiz.objects.exists())

    def test_malformed_numbers_are_validation_errors(self):
        questions = self.definition()['questions']
        questions[0]['correct_answer'] = '--1'
        questions[1]['points'] = '²'
        with self.assertRaises(ValidationError) as ctx:
            create_quiz(self.instructor, self.definition(
                passing_score='--5',
                time_limit='1-0',
                attempts_allowed='²',
                questions=questions,
            ))
        errors = ctx.exception.errors
        for field in (
            'passing_score', 'time_limit', 'attempts_allowed',
            'questions[0].correct_answer', 'questions[1].points',
        ):
            self.assertIn(field, errors)

    def test_questions_are_required(self):
        with self.assertRaises(ValidationError) as ctx:
            create_quiz(self.instructor, self.definition(questions=[]))
        self.assertIn('questions', ctx.exception.errors)

    def test_true_false_requires_literal_token(self):
        definition = self.definition(questions=[
            {'question_type': TRUE_FALSE, 'prompt': 'Yes?', 'correct_answer': 'yes', 'points': 1},
        ])
        with self.assertRaises(ValidationError) as ctx:
            create_quiz(self.instructor, definition)
        self.assertIn('questions[0].correct_answer', ctx.exception.errors)

    def test_lecture_must_belong_to_course(self):
        other_course = make_course(self.other_instructor, title='Other')
        definition = self.definition(lecture_id=other_course.lectures.first().id)
        with self.assertRaises(ValidationError) as ctx:
            create_quiz(self.instructor, definition)
        self.assertIn('lecture_id', ctx.exception.errors)

    def test_final_quiz_cannot_have_lecture(self):
        with self.assertRaises(ValidationError) as ctx:
            create_quiz(self.instructor, self.definition(quiz_type='final'))
        self.assertIn('lecture_id', ctx.exception.errors)

        quiz = create_quiz(self.instructor, self.definition(quiz_type='final', lecture_id=None))
        self.assertTrue(quiz.is_final)

    def test_cannot_create_for_foreign_course(self):
        with self.assertRaises(AccessDeniedError):
            create_quiz(self.other_instructor, self.definition())

    def test_update_keeps_questions_unless_supplied(self):
        quiz = create_quiz(self.instructor, self.definition())
        update_quiz(self.instructor, quiz.id, {'passing_score': 80, 'attempts_allowed': 3})
        quiz.refresh_from_db()
        self.assertEqual(quiz.passing_score, 80)
        self.assertEqual(quiz.attempts_allowed, 3)
        self.assertEqual(quiz.questions.count(), 3)

        update_quiz(self.instructor, quiz.id, {'questions': [
            {'question_type': TRUE_FALSE, 'prompt': 'Only one', 'correct_answer': 'false', 'points': 4},
        ]})
        self.assertEqual(quiz.questions.count(), 1)
        self.assertEqual(quiz.total_points, 4)

    def test_update_to_final_drops_lecture(self):
        quiz = create_quiz(self.instructor, self.definition())
        update_quiz(self.instructor, quiz.id, {'quiz_type': 'final'})
        quiz.refresh_from_db()
        self.assertIsNone(quiz.lecture_id)

    def test_update_validates_merged_definition(self):
        quiz = create_quiz(self.instructor, self.definition())
        with self.assertRaises(ValidationError) as ctx:
            update_quiz(self.instructor, quiz.id, {'time_limit': -5, 'title': ''})
        self.assertEqual(set(ctx.exception.errors), {'time_limit', 'title'})

    def test_only_owner_can_update_or_delete(self):
        quiz = create_quiz(self.instructor, self.definition())
        with self.assertRaises(NotFoundError):
            update_quiz(self.other_instructor, quiz.id, {'title': 'Hijacked'})
        with self.assertRaises(NotFoundError):
            delete_quiz(self.other_instructor, quiz.id)

        delete_quiz(self.instructor, quiz.id)
        self.assertFalse(Quiz.objects.filter(id=quiz.id).exists())
        self.assertFalse(Question.objects.exists())


class StudentQuizAccessTests(TestCase):
    def setUp(self):
        self.instructor = make_user('instructor@example.com', role=User.Role.INSTRUCTOR)
        self.student = make_user('student@example.com')
        self.course = make_course(self.instructor)
        self.lecture = self.course.lectures.first()
        self.lesson_quiz = make_quiz(self.course, lecture=self.lecture, title='Lesson quiz')
        self.final_quiz = make_quiz(self.course, title='Final quiz')
        make_quiz(self.course, title='Hidden', is_active=False)

    def test_requires_enrollment(self):
        with self.assertRaises(AccessDeniedError):
            get_quiz_for_student(self.student, self.final_quiz.id)
        with self.assertRaises(AccessDeniedError):
            list_quizzes_for_course(self.student, self.course.id)

    def test_correct_answers_are_redacted(self):
        enroll(self.student, self.course)
        quiz = get_quiz_for_student(self.student, self.final_quiz.id)
        data = StudentQuizSerializer(quiz).data
        self.assertEqual(len(data['questions']), 2)
        for question in data['questions']:
            self.assertNotIn('correct_answer', question)
        self.assertEqual(data['attempts'], [])

    def test_lesson_quiz_requires_watched_lecture(self):
        enroll(self.student, self.course)
        with self.assertRaises(PrerequisiteNotMetError):
            get_quiz_for_student(self.student, self.lesson_quiz.id)

        record_lecture_view(self.student, self.course.id, self.lecture.id, 0.5)
        with self.assertRaises(PrerequisiteNotMetError):
            get_quiz_for_student(self.student, self.lesson_quiz.id)

        record_lecture_view(self.student, self.course.id, self.lecture.id, 1)
        self.assertEqual(get_quiz_for_student(self.student, self.lesson_quiz.id), self.lesson_quiz)

    def test_inactive_quiz_not_found(self):
        enroll(self.student, self.course)
        hidden = Quiz.objects.get(title='Hidden')
        with self.assertRaises(NotFoundError):
            get_quiz_for_student(self.student, hidden.id)

    def test_listing_with_prerequisite_filter(self):
        enroll(self.student, self.course)
        titles = [q.title for q in list_quizzes_for_course(self.student, self.course.id)]
        self.assertEqual(titles, ['Final quiz'])

        titles = [q.title for q in list_quizzes_for_course(self.student, self.course.id, with_prerequisite_filter=False)]
        self.assertEqual(titles, ['Lesson quiz', 'Final quiz'])

        record_lecture_view(self.student, self.course.id, self.lecture.id, 1)
        titles = [q.title for q in list_quizzes_for_course(self.student, self.course.id)]
        self.assertEqual(titles, ['Lesson quiz', 'Final quiz'])
