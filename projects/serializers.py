from rest_framework import serializers

from users.models import User
from .models import Project, StatusLog, VideoType, Tag
from .metrics import is_overdue
from . import state_machine


class VideoTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = VideoType
        fields = ["id", "name"]


class TagSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tag
        fields = ["id", "name"]


class ResponsibleSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "role"]


# -----------------------------------------
# PROJECT (read): relations joined in
# -----------------------------------------
class ProjectSerializer(serializers.ModelSerializer):
    responsible = ResponsibleSerializer(read_only=True)
    video_type = VideoTypeSerializer(read_only=True)
    is_overdue = serializers.SerializerMethodField()
    allowed_transitions = serializers.SerializerMethodField()
    next_status = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            "id",
            "title",
            "description",
            "client",
            "responsible",
            "video_type",
            "tags",
            "priority",
            "status",
            "expected_delivery_date",
            "approved_at",
            "deliverable_link",
            "is_overdue",
            "allowed_transitions",
            "next_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_is_overdue(self, obj):
        return is_overdue(obj)

    def get_allowed_transitions(self, obj):
        return state_machine.get_allowed_transitions(obj)

    def get_next_status(self, obj):
        return state_machine.next_pipeline_status(obj.status)


# -----------------------------------------
# PROJECT (write): shape only; rules live in services
# -----------------------------------------
class ProjectWriteSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    client = serializers.CharField(required=False, allow_blank=True)
    responsible_id = serializers.IntegerField(required=False, allow_null=True)
    video_type_id = serializers.IntegerField(required=False, allow_null=True)
    tags = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
    )
    priority = serializers.CharField(required=False)
    status = serializers.CharField(required=False)
    expected_delivery_date = serializers.DateTimeField(required=False, allow_null=True)
    deliverable_link = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class StatusTransitionSerializer(serializers.Serializer):
    status = serializers.CharField()
    deliverable_link = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class StatusLogSerializer(serializers.ModelSerializer):
    changed_by = ResponsibleSerializer(read_only=True)

    class Meta:
        model = StatusLog
        fields = ["id", "project", "previous_status", "new_status", "changed_by", "created_at"]
        read_only_fields = fields


class LookupCreateSerializer(serializers.Serializer):
    name = serializers.CharField()
