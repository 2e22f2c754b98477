from django.contrib import admin
from django.urls import path, include
from core.views import HealthCheckView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/users/', include('users.urls')),
    path('api/auth/', include('authx.urls')),
    path('api/projects/', include('projects.urls')),
    path("api/health/", HealthCheckView.as_view(), name="health-check"),
]
