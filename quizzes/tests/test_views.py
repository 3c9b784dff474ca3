from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from accounts.models import User
from learnhub.testing import enroll, make_course, make_quiz, make_user
from quizzes.constants import MULTIPLE_CHOICE, SHORT_ANSWER
from quizzes.models import Quiz, QuizAttempt


class InstructorQuizEndpointTests(APITestCase):
    def setUp(self):
        self.instructor = make_user('instructor@example.com', role=User.Role.INSTRUCTOR)
        self.student = make_user('student@example.com')
        self.course = make_course(self.instructor)
        self.client = APIClient()
        self.client.force_authenticate(user=self.instructor)
        self.payload = {
            'course_id': self.course.id,
            'quiz_type': 'final',
            'title': 'Final exam',
            'passing_score': 50,
            'time_limit': 30,
            'attempts_allowed': 2,
            'questions': [
                {'question_type': MULTIPLE_CHOICE, 'prompt': '2 + 2?', 'options': ['3', '4'], 'correct_answer': '1', 'points': 2},
                {'question_type': SHORT_ANSWER, 'prompt': 'Capital of France?', 'correct_answer': 'Paris', 'points': 1},
            ],
        }

    def test_create_and_fetch(self):
        response = self.client.post(reverse('instructor-quiz-create'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        data = response.data['data']
        self.assertEqual(data['total_points'], 3)
        self.assertEqual(data['questions'][1]['correct_answer'], 'Paris')

        detail = self.client.get(reverse('instructor-quiz-detail', args=[data['id']]))
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(detail.data['data']['title'], 'Final exam')

        listing = self.client.get(reverse('instructor-course-quizzes', args=[self.course.id]))
        self.assertEqual(len(listing.data['data']), 1)

    def test_create_validation_envelope(self):
        self.payload['questions'] = []
        self.payload['passing_score'] = 'high'
        response = self.client.post(reverse('instructor-quiz-create'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'validation_error')
        self.assertEqual(set(response.data['errors']), {'questions', 'passing_score'})

    def test_students_cannot_author(self):
        student_client = APIClient()
        student_client.force_authenticate(user=self.student)
        response = student_client.post(reverse('instructor-quiz-create'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_request(self):
        response = APIClient().post(reverse('instructor-quiz-create'), self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'not_authenticated')

    def test_patch_and_delete(self):
        quiz = make_quiz(self.course)
        url = reverse('instructor-quiz-detail', args=[quiz.id])
        response = self.client.patch(url, {'title': 'Renamed', 'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        quiz.refresh_from_db()
        self.assertEqual(quiz.title, 'Renamed')
        self.assertFalse(quiz.is_active)

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Quiz.objects.exists())

    def test_foreign_quiz_is_not_found(self):
        other = make_user('other@example.com', role=User.Role.INSTRUCTOR)
        quiz = make_quiz(make_course(other, title='Other'))
        response = self.client.get(reverse('instructor-quiz-detail', args=[quiz.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'not_found')

    def test_quiz_attempts(self):
        quiz = make_quiz(self.course)
        enroll(self.student, self.course)
        student_client = APIClient()
        student_client.force_authenticate(user=self.student)
        student_client.post(reverse('student-start-attempt', args=[quiz.id]))

        response = self.client.get(reverse('instructor-quiz-attempts', args=[quiz.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        attempts = response.data['data']['attempts']
        self.assertEqual(len(attempts), 1)
        self.assertEqual(attempts[0]['student_email'], 'student@example.com')


class StudentQuizFlowTests(APITestCase):
    def setUp(self):
        self.instructor = make_user('instructor@example.com', role=User.Role.INSTRUCTOR)
        self.student = make_user('student@example.com')
        self.course = make_course(self.instructor)
        enroll(self.student, self.course)
        self.quiz = make_quiz(self.course, attempts_allowed=1)
        self.q1, self.q2 = list(self.quiz.questions.all())
        self.client = APIClient()
        self.client.force_authenticate(user=self.student)

    def start(self):
        response = self.client.post(reverse('student-start-attempt', args=[self.quiz.id]))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['data']['attempt_id']

    def submit(self, attempt_id, answers):
        url = reverse('student-submit-attempt', args=[self.quiz.id, attempt_id])
        return self.client.post(url, {'answers': answers}, format='json')

    def test_quiz_detail_is_redacted(self):
        response = self.client.get(reverse('student-quiz-detail', args=[self.quiz.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        for question in response.data['data']['questions']:
            self.assertNotIn('correct_answer', question)

    def test_course_listing(self):
        make_quiz(self.course, lecture=self.course.lectures.first(), title='Lesson')
        url = reverse('student-course-quizzes', args=[self.course.id])
        self.assertEqual(len(self.client.get(url).data['data']), 1)
        self.assertEqual(len(self.client.get(url, {'prerequisite_filter': 'false'}).data['data']), 2)

    def test_full_attempt_flow(self):
        attempt_id = self.start()
        response = self.submit(attempt_id, [
            {'question_id': self.q1.id, 'answer': '0'},
            {'question_id': self.q2.id, 'answer': '1'},
        ])
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['score'], 67)
        self.assertFalse(response.data['data']['passed'])
        self.assertEqual(response.data['data']['total_points'], 3)

        again = self.submit(attempt_id, [])
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data['error'], 'already_submitted')

        limit = self.client.post(reverse('student-start-attempt', args=[self.quiz.id]))
        self.assertEqual(limit.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(limit.data['error'], 'attempt_limit_exceeded')

        results = self.client.get(reverse('student-quiz-results', args=[self.quiz.id]))
        self.assertEqual(results.status_code, status.HTTP_200_OK)
        self.assertEqual(results.data['data']['score'], 67)
        self.assertEqual(results.data['data']['attempts'][0]['status'], QuizAttempt.Status.COMPLETED)
        self.assertEqual(results.data['data']['answers'][1]['correct_answer'], '0')

    def test_missing_answers_body(self):
        attempt_id = self.start()
        response = self.client.post(reverse('student-submit-attempt', args=[self.quiz.id, attempt_id]), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')

    def test_not_enrolled(self):
        outsider = APIClient()
        outsider.force_authenticate(user=make_user('outsider@example.com'))
        response = outsider.post(reverse('student-start-attempt', args=[self.quiz.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'access_denied')
        self.assertEqual(response.data['message'], 'Access denied. Course not purchased.')

    def test_prerequisite_error_kind(self):
        lesson = make_quiz(self.course, lecture=self.course.lectures.first(), title='Lesson')
        response = self.client.post(reverse('student-start-attempt', args=[lesson.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'prerequisite_not_met')

    def test_foreign_attempt(self):
        attempt_id = self.start()
        intruder = make_user('intruder@example.com')
        enroll(intruder, self.course)
        client = APIClient()
        client.force_authenticate(user=intruder)
        response = client.post(
            reverse('student-submit-attempt', args=[self.quiz.id, attempt_id]),
            {'answers': []},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'ownership_error')
