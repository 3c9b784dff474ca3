from django.urls import path

from progress import views

urlpatterns = [
    path('courses/<int:course_id>/', views.get_course_progress_view, name='course-progress'),
    path('courses/<int:course_id>/reset/', views.reset_course_progress_view, name='course-progress-reset'),
    path('courses/<int:course_id>/lectures/<int:lecture_id>/view/', views.record_lecture_view_view, name='lecture-view'),
    path('courses/<int:course_id>/quiz-outcomes/', views.record_quiz_outcome_view, name='quiz-outcome'),
]
