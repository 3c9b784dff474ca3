import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView

from learnhub.exceptions import ValidationError
from learnhub.responses import success_response

from .serializers import LearnHubTokenObtainPairSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


class LearnHubTokenObtainPairView(TokenObtainPairView):
    serializer_class = LearnHubTokenObtainPairSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """
    Register a student or instructor account.
    Expected payload: {"email", "first_name", "last_name", "password", "role"}
    """
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        raise ValidationError("Registration failed.", errors=serializer.errors)
    user = serializer.save()
    logger.info(f"Registered user {user.id} with role {user.role}")
    return success_response(
        UserSerializer(user).data,
        "Account created successfully.",
        status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return success_response(UserSerializer(request.user).data, "Current user retrieved successfully.")
