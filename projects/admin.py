from django.contrib import admin
from .models import Project, StatusLog, VideoType, Tag


class StatusLogInline(admin.TabularInline):
    model = StatusLog
    extra = 0
    can_delete = False
    readonly_fields = ("previous_status", "new_status", "changed_by", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("title", "client", "status", "priority", "responsible", "video_type", "expected_delivery_date")
    list_filter = ("status", "priority", "video_type")
    search_fields = ("title", "description", "client")
    # Status and approval go through the state machine
    readonly_fields = ("status", "approved_at", "created_at", "updated_at")
    inlines = [StatusLogInline]


@admin.register(StatusLog)
class StatusLogAdmin(admin.ModelAdmin):
    list_display = ("project", "previous_status", "new_status", "changed_by", "created_at")
    list_filter = ("new_status",)
    readonly_fields = ("project", "previous_status", "new_status", "changed_by", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


admin.site.register(VideoType)
admin.site.register(Tag)
