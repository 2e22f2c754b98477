from django.urls import path
from .views import (
    ProjectListCreateView,
    ProjectDetailView,
    ProjectStatusView,
    ProjectStatusLogView,
    MyQueueView,
    MetricsView,
    VideoTypeListCreateView,
    TagListCreateView,
)


urlpatterns = [
    path("", ProjectListCreateView.as_view(), name="project-list-create"),
    path("my-queue/", MyQueueView.as_view(), name="project-my-queue"),
    path("metrics/", MetricsView.as_view(), name="project-metrics"),
    path("video-types/", VideoTypeListCreateView.as_view(), name="video-type-list-create"),
    path("tags/", TagListCreateView.as_view(), name="tag-list-create"),
    path("<int:project_id>/", ProjectDetailView.as_view(), name="project-detail"),
    path("<int:project_id>/status/", ProjectStatusView.as_view(), name="project-status"),
    path("<int:project_id>/logs/", ProjectStatusLogView.as_view(), name="project-status-logs"),
]
