from django.urls import path
from .views import (
    ReviewAnswerView,
    PendingReviewsView,
)

urlpatterns = [
    path('attempts/<int:attempt_id>/questions/<int:question_id>/review/', ReviewAnswerView.as_view(), name='review_answer'),
    path('reviews/pending/', PendingReviewsView.as_view(), name='pending_reviews'),
]
