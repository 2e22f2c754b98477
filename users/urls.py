# users/urls.py

from django.urls import path
from .views import UserListCreateView, MeView, UserDeactivateView

urlpatterns = [
    path('', UserListCreateView.as_view(), name='user-list-create'),
    path('me/', MeView.as_view(), name='user-me'),
    path('<int:user_id>/deactivate/', UserDeactivateView.as_view(), name='user-deactivate'),
]
