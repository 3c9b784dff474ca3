from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LearnHubTokenObtainPairView, me_view, register_view

urlpatterns = [
    path('register/', register_view, name='register'),
    path('token/', LearnHubTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('me/', me_view, name='me'),
]
