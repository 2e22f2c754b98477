# framety/projects/policies.py
"""
Centralized project policy layer.

All permission checks for project actions are defined here.
Services and views should use these methods instead of inline role checks.
Every method is pure: it reads the user and project, never writes.
"""
from typing import Tuple

from users.models import User
from .models import Project


class ProjectPolicy:
    """
    Permission checks for projects.
    All `can_*` methods return (bool, reason).
    """

    @staticmethod
    def is_active_user(user) -> bool:
        return bool(user and user.is_authenticated and user.is_active)

    @staticmethod
    def is_system_admin(user) -> bool:
        """Check if user is an Admin (or a Django superuser)."""
        if not ProjectPolicy.is_active_user(user):
            return False
        return user.is_superuser or user.role == User.ROLE_ADMIN

    @staticmethod
    def is_manager(user) -> bool:
        """Admin and Gestor manage every project."""
        if not ProjectPolicy.is_active_user(user):
            return False
        return user.is_superuser or user.role in User.MANAGER_ROLES

    @staticmethod
    def is_responsible(user, project: Project) -> bool:
        if not ProjectPolicy.is_active_user(user) or project is None:
            return False
        return project.responsible_id == user.id

    # ─────────────────────────────────────────────────────────────
    # Project CRUD
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def can_create_project(user) -> Tuple[bool, str]:
        if not user or not user.is_authenticated:
            return False, "Autenticação necessária"

        if not user.is_active:
            return False, "Usuário inativo"

        return True, ""

    @staticmethod
    def can_view_project(user, project: Project = None) -> Tuple[bool, str]:
        """Every authenticated user sees every project."""
        if not user or not user.is_authenticated:
            return False, "Autenticação necessária"
        return True, ""

    @staticmethod
    def can_edit_project(user, project: Project) -> Tuple[bool, str]:
        if not user or not user.is_authenticated:
            return False, "Autenticação necessária"

        if ProjectPolicy.is_manager(user):
            return True, ""

        if ProjectPolicy.is_responsible(user, project):
            return True, ""

        return False, "Apenas Admin, Gestor ou o responsável podem alterar este projeto"

    @staticmethod
    def can_transition_project(user, project: Project) -> Tuple[bool, str]:
        return ProjectPolicy.can_edit_project(user, project)

    @staticmethod
    def can_edit_deliverable_link(user, project: Project) -> Tuple[bool, str]:
        return ProjectPolicy.can_edit_project(user, project)

    @staticmethod
    def can_delete_project(user, project: Project) -> Tuple[bool, str]:
        if not user or not user.is_authenticated:
            return False, "Autenticação necessária"

        if ProjectPolicy.is_manager(user):
            return True, ""

        if ProjectPolicy.is_responsible(user, project):
            return True, ""

        return False, "Apenas Admin, Gestor ou o responsável podem excluir este projeto"

    # ─────────────────────────────────────────────────────────────
    # Reference data & reporting
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def can_manage_lookups(user) -> Tuple[bool, str]:
        """Video types and tags are created by admins (or by seeding)."""
        if ProjectPolicy.is_system_admin(user):
            return True, ""
        return False, "Apenas administradores podem cadastrar tipos de vídeo e tags"

    @staticmethod
    def can_manage_users(user) -> Tuple[bool, str]:
        if ProjectPolicy.is_system_admin(user):
            return True, ""
        return False, "Apenas administradores podem gerenciar usuários"

    @staticmethod
    def can_view_metrics(user) -> Tuple[bool, str]:
        if not user or not user.is_authenticated:
            return False, "Autenticação necessária"
        return True, ""
