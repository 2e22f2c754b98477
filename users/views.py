# users/views.py
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from core.exceptions import Unauthorized, ValidationError
from projects.policies import ProjectPolicy
from .models import User
from .serializers import UserSerializer, UserCreateSerializer

logger = logging.getLogger("framety.users")


class UserListCreateView(APIView):
    """
    GET  /api/users/ : active users (responsible picker)
    POST /api/users/ : Admin provisioning
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        users = User.objects.active()
        return Response(UserSerializer(users, many=True).data)

    def post(self, request):
        allowed, reason = ProjectPolicy.can_manage_users(request.user)
        if not allowed:
            raise Unauthorized(reason)

        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User provisioned: user=%s, role=%s, actor=%s", user.id, user.role, request.user.id)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class UserDeactivateView(APIView):
    """
    POST /api/users/<id>/deactivate/

    Users are never deleted; deactivation blocks login and removes them
    from the responsible picker. Their projects keep pointing at them.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, user_id):
        allowed, reason = ProjectPolicy.can_manage_users(request.user)
        if not allowed:
            raise Unauthorized(reason)

        user = get_object_or_404(User, pk=user_id)
        if user.pk == request.user.pk:
            raise ValidationError("Você não pode desativar a própria conta.")

        if user.is_active:
            user.is_active = False
            user.save(update_fields=["is_active"])
            logger.info("User deactivated: user=%s, actor=%s", user.id, request.user.id)

        return Response(UserSerializer(user).data)
