from rest_framework.permissions import BasePermission


class IsInstructor(BasePermission):
    """Instructors (and admins) may author quizzes and review answers."""

    message = "Only instructors can perform this action."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_instructor or user.is_admin))


class IsStudent(BasePermission):
    message = "Only students can perform this action."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_student)


class IsAdmin(BasePermission):
    message = "Only administrators can perform this action."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)
