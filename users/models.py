# users/models.py
from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class FrametyUserManager(UserManager):
    def active(self):
        return self.filter(is_active=True)


class User(AbstractUser):
    """
    Staff account. Logs in by email; `role` drives the project policy.

    Users are never hard-deleted through the API: `is_active` is the
    active flag and deactivated users cannot log in.
    """
    ROLE_ADMIN = "Admin"
    ROLE_GESTOR = "Gestor"
    ROLE_MEMBRO = "Membro"

    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_GESTOR, "Gestor"),
        (ROLE_MEMBRO, "Membro"),
    ]

    # Roles allowed to manage any project regardless of responsibility
    MANAGER_ROLES = (ROLE_ADMIN, ROLE_GESTOR)

    name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(unique=True)
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_MEMBRO,
    )

    objects = FrametyUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        ordering = ["name", "email"]

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.username

    @property
    def is_manager(self) -> bool:
        return self.role in self.MANAGER_ROLES

    def __str__(self):
        return self.display_name
