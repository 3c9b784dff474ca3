from rest_framework import status
from rest_framework.response import Response


def success_response(data=None, message="", status_code=status.HTTP_200_OK):
    """Standard success envelope used by every endpoint."""
    return Response({
        "success": True,
        "message": message,
        "data": data,
    }, status=status_code)
