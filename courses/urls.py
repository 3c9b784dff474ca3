from django.urls import path

from courses.views import enroll_in_course_view, get_course_detail_view

urlpatterns = [
    path('<int:course_id>/', get_course_detail_view, name='course_detail'),
    path('<int:course_id>/enroll/', enroll_in_course_view, name='enroll_in_course'),
]
