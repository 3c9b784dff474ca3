from django.urls import path

from quizzes import views

urlpatterns = [
    # Instructor
    path('instructor/quizzes/', views.instructor_quiz_create_view, name='instructor-quiz-create'),
    path('instructor/courses/<int:course_id>/quizzes/', views.instructor_course_quizzes_view, name='instructor-course-quizzes'),
    path('instructor/quizzes/<int:quiz_id>/', views.instructor_quiz_detail_view, name='instructor-quiz-detail'),
    path('instructor/quizzes/<int:quiz_id>/attempts/', views.instructor_quiz_attempts_view, name='instructor-quiz-attempts'),

    # Student
    path('student/courses/<int:course_id>/quizzes/', views.student_course_quizzes_view, name='student-course-quizzes'),
    path('student/quizzes/<int:quiz_id>/', views.student_quiz_detail_view, name='student-quiz-detail'),
    path('student/quizzes/<int:quiz_id>/attempts/', views.start_attempt_view, name='student-start-attempt'),
    path('student/quizzes/<int:quiz_id>/attempts/<int:attempt_id>/submit/', views.submit_attempt_view, name='student-submit-attempt'),
    path('student/quizzes/<int:quiz_id>/results/', views.attempt_results_view, name='student-quiz-results'),
]
