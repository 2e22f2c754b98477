from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from core.exceptions import Unauthorized
from .models import VideoType, Tag
from .permissions import IsSystemAdminOrReadOnly
from .policies import ProjectPolicy
from .serializers import (
    ProjectSerializer,
    ProjectWriteSerializer,
    StatusTransitionSerializer,
    StatusLogSerializer,
    VideoTypeSerializer,
    TagSerializer,
    LookupCreateSerializer,
)
from .metrics import compute_metrics
from . import services


class ProjectListCreateView(APIView):
    """
    GET  /api/projects/?status=&responsible_id=&video_type_id=&priority=&search=
    POST /api/projects/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        filters = services.ProjectFilters.from_mapping(request.query_params)
        qs = services.list_projects(request.user, filters)
        serializer = ProjectSerializer(qs, many=True, context={"request": request})
        return Response(serializer.data)

    def post(self, request):
        serializer = ProjectWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        # Relations are already attached to the returned instance
        project = services.create_project(request.user, serializer.validated_data)
        return Response(
            ProjectSerializer(project, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class ProjectDetailView(APIView):
    """
    GET    /api/projects/<id>/
    PATCH  /api/projects/<id>/
    DELETE /api/projects/<id>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, project_id):
        project = services.get_project(request.user, project_id)
        return Response(ProjectSerializer(project, context={"request": request}).data)

    def patch(self, request, project_id):
        serializer = ProjectWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = services.update_project(request.user, project_id, serializer.validated_data)
        return Response(ProjectSerializer(project, context={"request": request}).data)

    def delete(self, request, project_id):
        services.delete_project(request.user, project_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProjectStatusView(APIView):
    """
    POST /api/projects/<id>/status/
    Body: {"status": "...", "deliverable_link": "..."}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, project_id):
        serializer = StatusTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = services.transition_status(
            request.user,
            project_id,
            serializer.validated_data["status"],
            deliverable_link=serializer.validated_data.get("deliverable_link"),
        )
        return Response(ProjectSerializer(project, context={"request": request}).data)


class ProjectStatusLogView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, project_id):
        logs = services.get_status_logs(request.user, project_id)
        return Response(StatusLogSerializer(logs, many=True).data)


class MyQueueView(APIView):
    """GET /api/projects/my-queue/: the caller's open projects."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = services.my_queue(request.user)
        return Response(ProjectSerializer(qs, many=True, context={"request": request}).data)


class MetricsView(APIView):
    """
    GET /api/projects/metrics/

    Recomputed on every call; the dashboard polls it.
    """
    permission_classes = [IsAuthenticated]
    throttle_scope = "metrics"

    def get(self, request):
        allowed, reason = ProjectPolicy.can_view_metrics(request.user)
        if not allowed:
            raise Unauthorized(reason)
        return Response(compute_metrics().as_dict())


# -----------------------------
# Reference data
# -----------------------------
class VideoTypeListCreateView(APIView):
    permission_classes = [IsSystemAdminOrReadOnly]

    def get(self, request):
        return Response(VideoTypeSerializer(VideoType.objects.all(), many=True).data)

    def post(self, request):
        serializer = LookupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        video_type = services.create_video_type(request.user, serializer.validated_data["name"])
        return Response(VideoTypeSerializer(video_type).data, status=status.HTTP_201_CREATED)


class TagListCreateView(APIView):
    permission_classes = [IsSystemAdminOrReadOnly]

    def get(self, request):
        return Response(TagSerializer(Tag.objects.all(), many=True).data)

    def post(self, request):
        serializer = LookupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tag = services.create_tag(request.user, serializer.validated_data["name"])
        return Response(TagSerializer(tag).data, status=status.HTTP_201_CREATED)
