# apps/accounts/models.py
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.utils import timezone


class CustomUserManager(BaseUserManager):
    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('Email must be set')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        """
        Create a platform super-admin with Django admin access.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.SUPER_ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self._create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    LEARNER = 'learner'
    INSTRUCTOR = 'instructor'
    ADMIN = 'admin'
    SUPER_ADMIN = 'super-admin'

    ROLE_CHOICES = [
        (LEARNER, 'Learner'),
        (INSTRUCTOR, 'Instructor'),
        (ADMIN, 'Admin'),
        (SUPER_ADMIN, 'Super Admin'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_DROPPED = 'dropped'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_DROPPED, 'Dropped'),
    ]

    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    # role is fixed at creation; nothing in the API mutates it
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, default=LEARNER)
    # mutated by drop recommendation / appeal outcomes
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    # convenience pointer; progress rows are authoritative for enrollment
    active_cohort = models.ForeignKey(
        'learn.Cohort', null=True, blank=True, on_delete=models.SET_NULL, related_name='active_learners'
    )
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ['last_name', 'first_name', 'email']

    # ============================================================
    # ROLES
    # ============================================================

    @property
    def is_learner(self):
        return self.role == self.LEARNER

    @property
    def is_instructor(self):
        return self.role == self.INSTRUCTOR

    @property
    def is_platform_admin(self):
        """Admin or super-admin (the review workflow's reviewers)"""
        return self.role in (self.ADMIN, self.SUPER_ADMIN) or self.is_superuser

    # ============================================================
    # DISPLAY METHODS
    # ============================================================

    def get_full_name(self):
        """Full name"""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name if full_name else self.email

    def __str__(self):
        return f"{self.get_full_name()} - {self.get_role_display()}"
