"""
users/models.py
===============
The ledger principal.

Physicians, staff and the chief medical officer are all plain users. The
role a user plays is decided per record (physician, grantee) or by
SystemState (administrator), never by a field on this model.
Ledger rows reference users with PROTECT, so accounts are retired with
soft_delete() and never removed.
"""

import uuid

from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required.")
        if not password:
            raise ValueError("A password is required.")

        user = self.model(email=self.normalize_email(email).lower(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        """Django admin access only. Ledger administration is set by init_ledger."""
        extra_fields["is_staff"] = True
        extra_fields["is_superuser"] = True
        return self._create(email, password, **extra_fields)

    def live(self):
        return self.filter(is_deleted=False)


class User(AbstractBaseUser, PermissionsMixin):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=30, blank=True)
    last_name  = models.CharField(max_length=30, blank=True)

    is_active = models.BooleanField(default=True, db_index=True)
    is_staff  = models.BooleanField(default=False)

    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        app_label = "users"
        indexes = [
            models.Index(fields=["created_at"], name="idx_user_created_at"),
        ]

    def __str__(self):
        return self.get_full_name()

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def soft_delete(self):
        """Retire the account. Its records and grants stay on the ledger."""
        self.is_deleted = True
        self.is_active  = False
        self.deleted_at = timezone.now()
        self.save(update_fields=["is_deleted", "is_active", "deleted_at"])
