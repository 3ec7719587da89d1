from django.contrib.auth.models import AbstractUser
from django.contrib.auth.base_user import BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email=None, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email=None, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.ROLE_ADMIN)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    ROLE_ADMIN = "admin"
    ROLE_STAFF = "staff"
    ROLE_STUDENT = "student"
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_STAFF, "Staff"),
        (ROLE_STUDENT, "Student"),
    ]

    username = None
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_STUDENT)
    display_name = models.CharField(max_length=128, blank=True)
    EMAIL_FIELD = "email"
    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []
    objects = UserManager()

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_student(self):
        return self.role == self.ROLE_STUDENT

    def get_display_name(self):
        full = f"{self.first_name} {self.last_name}".strip()
        return self.display_name or full or self.email

    def fee_statuses(self):
        """Fee status entries keyed by fee id."""
        return {entry.fee_id: entry for entry in self.fee_status_entries.all()}


class SiteBootstrap(models.Model):
    """Marks that the initial administrator has been created.

    A single row (pk=1) exists once bootstrap completes; its absence means the
    site still accepts the initial-admin registration.
    """

    SINGLETON_ID = 1

    completed_at = models.DateTimeField()
    initial_admin = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL
    )

    @classmethod
    def is_complete(cls):
        return cls.objects.filter(pk=cls.SINGLETON_ID).exists()
