from rest_framework.permissions import BasePermission, SAFE_METHODS

from .policies import ProjectPolicy


class IsSystemAdminOrReadOnly(BasePermission):
    """
    Reference data (video types, tags, users):
    - SAFE methods for any authenticated user.
    - Writes for Admins only.
    """
    message = "Apenas administradores podem realizar esta operação"

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        if request.method in SAFE_METHODS:
            return True

        allowed, _ = ProjectPolicy.can_manage_lookups(request.user)
        return allowed
