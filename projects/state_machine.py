# framety/projects/state_machine.py
"""
Project status pipeline.

Forward path:
Briefing → Roteiro → Captação → Edição → Entrega → Revisão
         → Aguardando Aprovação → Aprovado

Em Pausa and Cancelado are reachable from any open status. Aprovado and
Cancelado are terminal. Skipping ahead on the forward path is allowed;
only the terminal states and unknown targets are rejected.

Every accepted transition appends exactly one StatusLog entry.
"""
from typing import Optional, Tuple
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import InvalidTransition, ValidationError
from .models import Project, StatusLog
from .sanitizers import validate_url, host_matches

logger = logging.getLogger('framety.projects')


PIPELINE_ORDER = [
    Project.STATUS_BRIEFING,
    Project.STATUS_ROTEIRO,
    Project.STATUS_CAPTACAO,
    Project.STATUS_EDICAO,
    Project.STATUS_ENTREGA,
    Project.STATUS_REVISAO,
    Project.STATUS_AGUARDANDO_APROVACAO,
    Project.STATUS_APROVADO,
]

ALL_STATUSES = [value for value, _ in Project.STATUS_CHOICES]

TERMINAL_STATUSES = (Project.STATUS_APROVADO, Project.STATUS_CANCELADO)

# from_status -> allowed to_statuses
VALID_TRANSITIONS = {
    status: [target for target in ALL_STATUSES if target != status]
    for status in ALL_STATUSES
    if status not in TERMINAL_STATUSES
}


def is_valid_status(status) -> bool:
    return status in ALL_STATUSES


def is_terminal_status(status: str) -> bool:
    """Check if a status is terminal (no further transitions)."""
    return status not in VALID_TRANSITIONS or len(VALID_TRANSITIONS[status]) == 0


def get_allowed_transitions(project: Project) -> list:
    return list(VALID_TRANSITIONS.get(project.status, []))


def next_pipeline_status(status: str) -> Optional[str]:
    """The next stage on the forward path, or None off-path/at the end."""
    if status not in PIPELINE_ORDER:
        return None
    index = PIPELINE_ORDER.index(status)
    if index + 1 >= len(PIPELINE_ORDER):
        return None
    return PIPELINE_ORDER[index + 1]


def can_transition(project: Project, new_status) -> Tuple[bool, str]:
    """
    Check if a project can move to a new status.

    Returns (can_transition: bool, reason: str)
    """
    current_status = project.status

    if not is_valid_status(new_status):
        return False, f"Status inválido: {new_status}"

    if new_status == current_status:
        return False, f"O projeto já está em '{current_status}'"

    if is_terminal_status(current_status):
        return False, f"Projetos em '{current_status}' não mudam mais de status"

    if new_status not in VALID_TRANSITIONS[current_status]:
        return False, f"Não é possível passar de '{current_status}' para '{new_status}'"

    return True, ""


def validate_deliverable_link(project: Project, link, target_status: Optional[str] = None) -> Optional[str]:
    """
    Validate the published deliverable link for a project.

    The link is only accepted once the project is approved (or is being
    approved by the same call). Clearing it is always allowed.
    Raises InvalidTransition for links sent too early or with a bad format.
    """
    if link in (None, ""):
        return None

    status = target_status or project.status
    if status != Project.STATUS_APROVADO:
        raise InvalidTransition("O link de entrega só pode ser definido em projetos aprovados.")

    try:
        url = validate_url(link, required=True)
    except ValidationError as exc:
        raise InvalidTransition(f"Link de entrega inválido: {exc.detail}")

    allowed_hosts = getattr(settings, "DELIVERABLE_LINK_ALLOWED_HOSTS", [])
    if not host_matches(url, allowed_hosts):
        raise InvalidTransition(
            "Link de entrega deve apontar para: " + ", ".join(allowed_hosts)
        )
    return url


def transition(project: Project, new_status, actor, deliverable_link=None) -> StatusLog:
    """
    Move a project to a new status.

    Stamps `approved_at` when entering Aprovado, saves the project and
    appends the StatusLog entry in a single transaction.
    Raises InvalidTransition when the move is not allowed.
    """
    can, reason = can_transition(project, new_status)

    if not can:
        logger.warning(
            "Invalid status transition attempted: project=%s, from=%s, to=%s, actor=%s. Reason: %s",
            project.id, project.status, new_status, getattr(actor, 'id', 'unknown'), reason,
        )
        raise InvalidTransition(reason)

    link = validate_deliverable_link(project, deliverable_link, target_status=new_status)

    old_status = project.status
    project.status = new_status
    update_fields = ['status', 'approved_at', 'updated_at']

    if new_status == Project.STATUS_APROVADO:
        project.approved_at = timezone.now()
        if link:
            project.deliverable_link = link
            update_fields.append('deliverable_link')
    else:
        project.approved_at = None

    with transaction.atomic():
        project.save(update_fields=update_fields)
        entry = StatusLog.objects.create(
            project=project,
            previous_status=old_status,
            new_status=new_status,
            changed_by=actor,
        )

    logger.info(
        "Project status transition: project=%s, from=%s, to=%s, actor=%s",
        project.id, old_status, new_status, getattr(actor, 'id', 'unknown'),
    )

    return entry
