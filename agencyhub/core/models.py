from django.contrib.auth.models import AbstractUser
from django.db import models


DEPARTMENT_CHOICES = [
    ('financial', 'Financial'),
    ('graphic_design', 'Graphic Design'),
    ('developers', 'Developers'),
    ('advertising', 'Advertising'),
    ('compliance', 'Compliance'),
    ('management', 'Management'),
    ('records_management', 'Records Management'),
]

DEPARTMENT_LABELS = dict(DEPARTMENT_CHOICES)

ROLE_CHOICES = [
    ('admin', 'Admin'),
    ('developer', 'Developer'),
    ('designer', 'Designer'),
    ('writer', 'Writer'),
    ('client', 'Client'),
    ('team', 'Team'),
]

# Roles routed to the team dashboard
TEAM_ROLES = ['team', 'developer', 'designer', 'writer']


class User(AbstractUser):
    """Extended user model with additional fields"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def display_name(self):
        profile = getattr(self, 'profile', None)
        if profile and profile.full_name:
            return profile.full_name
        return self.get_full_name() or self.username


class Profile(models.Model):
    """Per-user profile; created automatically with the user"""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=255, blank=True, null=True)
    department = models.CharField(max_length=30, choices=DEPARTMENT_CHOICES, blank=True, null=True)
    avatar_url = models.URLField(max_length=500, blank=True, null=True)
    # Hashed with Django's password hashers, never the raw PIN
    lock_pin = models.CharField(max_length=128, blank=True, default='')
    install_prompt_dismissed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name or self.user.username

    class Meta:
        db_table = 'profiles'


class UserRole(models.Model):
    """Portal role assignments (admin, team, client, ...)"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='roles')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user.username}: {self.role}"

    class Meta:
        db_table = 'user_roles'
        constraints = [
            models.UniqueConstraint(fields=['user', 'role'], name='unique_user_role'),
        ]


class UserPreference(models.Model):
    """Notification preferences"""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='preferences')
    email_notifications = models.BooleanField(default=True)
    push_notifications = models.BooleanField(default=False)
    project_updates = models.BooleanField(default=True)
    security_alerts = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_preferences'


class TeamActivity(models.Model):
    """Activity feed entries shown on dashboards"""
    ACTIVITY_TYPE_CHOICES = [
        ('project', 'Project'),
        ('submission', 'Submission'),
        ('message', 'Message'),
        ('document', 'Document'),
        ('design', 'Design'),
        ('task', 'Task'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='activities')
    activity_type = models.CharField(max_length=20, choices=ACTIVITY_TYPE_CHOICES)
    description = models.TextField()
    project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='activities')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user.username} - {self.activity_type}"

    class Meta:
        db_table = 'team_activity'
        ordering = ['-created_at']


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('approve', 'Approve'),
        ('reject', 'Reject'),
        ('assign', 'Assign'),
        ('role_change', 'Role Changed'),
        ('sync', 'External Sync'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., client name, project name)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_8a4c2e_idx'),
            models.Index(fields=['action'], name='audit_logs_action_3b9d71_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_c6e0f4_idx'),
        ]


class ChangeEvent(models.Model):
    """Row-change notification consumed by polling clients"""
    EVENT_CHOICES = [
        ('INSERT', 'Insert'),
        ('UPDATE', 'Update'),
        ('DELETE', 'Delete'),
    ]

    table = models.CharField(max_length=64)
    event = models.CharField(max_length=10, choices=EVENT_CHOICES)
    record_id = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.event} {self.table}#{self.record_id}"

    class Meta:
        db_table = 'change_events'
        ordering = ['id']
        indexes = [
            models.Index(fields=['table', 'id'], name='change_even_table_5d1f0e_idx'),
        ]
