# framety/projects/services.py
"""
Project operations.

Every function takes the acting user explicitly and raises the typed
errors from `core.exceptions`. Views stay thin and call into here.

Concurrent edits are last-write-wins: there is no version token.
Store failures leave this module as `StoreUnavailable`; readers return
evaluated lists so the failure surfaces here, not in the caller.
"""
from dataclasses import dataclass, fields
from functools import wraps
from typing import Mapping, Optional
import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q

from core.exceptions import NotFound, StoreUnavailable, Unauthorized, ValidationError
from users.models import User
from .models import Project, StatusLog, VideoType, Tag
from .policies import ProjectPolicy
from .sanitizers import (
    sanitize_title,
    sanitize_description,
    sanitize_client,
    sanitize_tags,
    sanitize_text,
)
from . import state_machine

logger = logging.getLogger('framety.projects')

PRIORITY_VALUES = [value for value, _ in Project.PRIORITY_CHOICES]


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def store_guard(func):
    """Re-raise database failures from `func` as StoreUnavailable."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.error("Store failure in %s: %s", func.__name__, exc)
            raise StoreUnavailable() from exc
    return wrapper


def _authorize(result, actor=None):
    allowed, reason = result
    if not allowed:
        logger.warning("Operation denied: actor=%s. Reason: %s", getattr(actor, "id", "unknown"), reason)
        raise Unauthorized(reason)


def _get_project(project_id) -> Project:
    try:
        return (
            Project.objects
            .select_related("responsible", "video_type")
            .get(pk=project_id)
        )
    except (Project.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Projeto {project_id} não encontrado.")


def _resolve_responsible(user_id) -> User:
    if user_id in (None, ""):
        raise ValidationError("O projeto precisa de um responsável.")
    try:
        user = User.objects.get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise ValidationError(f"Responsável {user_id} não encontrado.")
    if not user.is_active:
        raise ValidationError("Usuários inativos não podem ser responsáveis por projetos.")
    return user


def _resolve_video_type(video_type_id) -> Optional[VideoType]:
    if video_type_id in (None, ""):
        return None
    try:
        return VideoType.objects.get(pk=video_type_id)
    except (VideoType.DoesNotExist, ValueError, TypeError):
        raise ValidationError(f"Tipo de vídeo {video_type_id} não encontrado.")


def _clean_metadata(data: Mapping, partial: bool) -> dict:
    """Sanitize the editable metadata present in `data`."""
    cleaned = {}

    if "title" in data or not partial:
        cleaned["title"] = sanitize_title(data.get("title"))
    if "description" in data:
        cleaned["description"] = sanitize_description(data.get("description"))
    if "client" in data:
        cleaned["client"] = sanitize_client(data.get("client"))
    if "tags" in data:
        cleaned["tags"] = sanitize_tags(data.get("tags"))
    if "priority" in data:
        priority = data.get("priority")
        if priority not in PRIORITY_VALUES:
            raise ValidationError(f"Prioridade inválida: {priority}")
        cleaned["priority"] = priority
    if "expected_delivery_date" in data:
        cleaned["expected_delivery_date"] = data.get("expected_delivery_date")
    if "responsible_id" in data:
        cleaned["responsible"] = _resolve_responsible(data.get("responsible_id"))
    if "video_type_id" in data:
        cleaned["video_type"] = _resolve_video_type(data.get("video_type_id"))

    return cleaned


# ─────────────────────────────────────────────────────────────
# Project CRUD
# ─────────────────────────────────────────────────────────────

@store_guard
def create_project(actor, data: Mapping) -> Project:
    """
    Create a project in Briefing.

    The responsible defaults to the acting user. A deliverable link is
    refused because a new project is never approved.
    """
    _authorize(ProjectPolicy.can_create_project(actor), actor)

    cleaned = _clean_metadata(data, partial=False)
    if "responsible" not in cleaned:
        cleaned["responsible"] = _resolve_responsible(actor.pk)

    # Raises InvalidTransition for any non-empty link
    state_machine.validate_deliverable_link(
        Project(status=Project.STATUS_BRIEFING), data.get("deliverable_link")
    )

    project = Project.objects.create(status=Project.STATUS_BRIEFING, **cleaned)
    logger.info(
        "Project created: project=%s, responsible=%s, actor=%s",
        project.id, project.responsible_id, actor.id,
    )
    return project


@store_guard
def update_project(actor, project_id, data: Mapping) -> Project:
    """
    Partial update of a project.

    A `status` different from the current one is applied through the
    state machine, so it is validated and logged like any transition.
    """
    project = _get_project(project_id)
    _authorize(ProjectPolicy.can_edit_project(actor, project), actor)

    cleaned = _clean_metadata(data, partial=True)

    new_status = data.get("status")
    if new_status == project.status:
        new_status = None

    target_status = new_status or project.status

    if "deliverable_link" in data:
        _authorize(ProjectPolicy.can_edit_deliverable_link(actor, project), actor)
        cleaned["deliverable_link"] = state_machine.validate_deliverable_link(
            project, data.get("deliverable_link"), target_status=target_status
        )

    # A rejected transition rolls the metadata changes back with it
    with transaction.atomic():
        for attr, value in cleaned.items():
            setattr(project, attr, value)
        if cleaned:
            project.save()
        if new_status is not None:
            state_machine.transition(project, new_status, actor)

    logger.info(
        "Project updated: project=%s, fields=%s, actor=%s",
        project.id, sorted(cleaned), actor.id,
    )
    return project


@store_guard
def transition_status(actor, project_id, new_status, deliverable_link=None) -> Project:
    project = _get_project(project_id)
    _authorize(ProjectPolicy.can_transition_project(actor, project), actor)
    state_machine.transition(project, new_status, actor, deliverable_link=deliverable_link)
    return project


@store_guard
def delete_project(actor, project_id) -> None:
    """Hard delete. The status history goes with the project."""
    project = _get_project(project_id)
    _authorize(ProjectPolicy.can_delete_project(actor, project), actor)

    project.delete()
    logger.info("Project deleted: project=%s, actor=%s", project_id, actor.id)


@store_guard
def get_project(actor, project_id) -> Project:
    project = _get_project(project_id)
    _authorize(ProjectPolicy.can_view_project(actor, project), actor)
    return project


@store_guard
def get_status_logs(actor, project_id):
    project = _get_project(project_id)
    _authorize(ProjectPolicy.can_view_project(actor, project), actor)
    return list(
        StatusLog.objects
        .filter(project=project)
        .select_related("changed_by")
        .order_by("-created_at", "-id")
    )


# ─────────────────────────────────────────────────────────────
# Listing
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProjectFilters:
    """
    Recognized listing filters. None means "not applied"; all applied
    filters are combined with AND.
    """
    status: Optional[str] = None
    responsible_id: Optional[int] = None
    video_type_id: Optional[int] = None
    priority: Optional[str] = None
    search: Optional[str] = None

    @classmethod
    def from_mapping(cls, params: Mapping) -> "ProjectFilters":
        values = {}
        for field in fields(cls):
            raw = params.get(field.name)
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            values[field.name] = raw.strip() if isinstance(raw, str) else raw

        if "status" in values and not state_machine.is_valid_status(values["status"]):
            raise ValidationError(f"Status inválido: {values['status']}")
        if "priority" in values and values["priority"] not in PRIORITY_VALUES:
            raise ValidationError(f"Prioridade inválida: {values['priority']}")
        for key in ("responsible_id", "video_type_id"):
            if key in values:
                try:
                    values[key] = int(values[key])
                except (TypeError, ValueError):
                    raise ValidationError(f"Filtro {key} deve ser numérico.")
        if "search" in values:
            values["search"] = sanitize_text(values["search"], max_length=255)
        return cls(**values)


@store_guard
def list_projects(actor, filters=None):
    """
    Filtered listing, newest first, with responsible and video type joined.
    """
    _authorize(ProjectPolicy.can_view_project(actor), actor)

    if filters is None:
        filters = ProjectFilters()
    elif not isinstance(filters, ProjectFilters):
        filters = ProjectFilters.from_mapping(filters)

    qs = Project.objects.select_related("responsible", "video_type")

    if filters.status:
        qs = qs.filter(status=filters.status)
    if filters.responsible_id is not None:
        qs = qs.filter(responsible_id=filters.responsible_id)
    if filters.video_type_id is not None:
        qs = qs.filter(video_type_id=filters.video_type_id)
    if filters.priority:
        qs = qs.filter(priority=filters.priority)
    if filters.search:
        qs = qs.filter(
            Q(title__icontains=filters.search) |
            Q(description__icontains=filters.search) |
            Q(client__icontains=filters.search)
        )

    return list(qs.order_by("-created_at", "-id"))


@store_guard
def my_queue(actor):
    """The actor's open projects, most urgent delivery first."""
    _authorize(ProjectPolicy.can_view_project(actor), actor)
    return list(
        Project.objects
        .select_related("responsible", "video_type")
        .filter(responsible=actor)
        .exclude(status__in=Project.CLOSED_STATUSES)
        .order_by(F("expected_delivery_date").asc(nulls_last=True), "-created_at", "-id")
    )


# ─────────────────────────────────────────────────────────────
# Reference data
# ─────────────────────────────────────────────────────────────

def _create_lookup(model, actor, name, max_length):
    _authorize(ProjectPolicy.can_manage_lookups(actor), actor)
    name = sanitize_text(name, max_length=max_length)
    if not name:
        raise ValidationError("O nome é obrigatório.")
    try:
        with transaction.atomic():
            obj = model.objects.create(name=name)
    except IntegrityError:
        raise ValidationError(f"'{name}' já está cadastrado.")
    logger.info("%s created: name=%s, actor=%s", model.__name__, name, actor.id)
    return obj


@store_guard
def create_video_type(actor, name) -> VideoType:
    return _create_lookup(VideoType, actor, name, max_length=100)


@store_guard
def create_tag(actor, name) -> Tag:
    return _create_lookup(Tag, actor, name, max_length=50)
