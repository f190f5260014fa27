from rest_framework.permissions import BasePermission


class IsAdmin(BasePermission):
    """Requires the ``admin`` custom claim on the verified token."""

    message = "This endpoint requires admin privileges"

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_admin", False))
