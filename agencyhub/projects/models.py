from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from agencyhub.core.models import User, DEPARTMENT_CHOICES
from agencyhub.clients.models import Client


class Project(models.Model):
    """Client or internal project"""
    STATUS_CHOICES = [
        ('planning', 'Planning'),
        ('in-progress', 'In Progress'),
        ('review', 'Review'),
        ('completed', 'Completed'),
        ('on-hold', 'On Hold'),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='projects')
    department = models.CharField(max_length=30, choices=DEPARTMENT_CHOICES, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='planning')
    progress = models.PositiveSmallIntegerField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])
    product_type = models.CharField(max_length=100, blank=True, null=True)
    repository_url = models.URLField(max_length=500, blank=True, null=True)
    live_url = models.URLField(max_length=500, blank=True, null=True)
    start_date = models.DateField(blank=True, null=True)
    end_date = models.DateField(blank=True, null=True)
    assigned_team = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_projects')
    deadline_hours = models.PositiveSmallIntegerField(blank=True, null=True)
    submitted_at = models.DateTimeField(blank=True, null=True)
    submission_notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='projects_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'projects'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='projects_status_7e1a2b_idx'),
            models.Index(fields=['department'], name='projects_departm_4c9f3d_idx'),
        ]


class Task(models.Model):
    """Kanban card on a project board"""
    STATUS_CHOICES = [
        ('todo', 'To Do'),
        ('in_progress', 'In Progress'),
        ('review', 'Review'),
        ('done', 'Done'),
    ]
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='tasks')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='todo')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    assigned_to = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_tasks')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='tasks_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project.name}: {self.title}"

    class Meta:
        db_table = 'tasks'
        ordering = ['created_at']


class ProjectSubmission(models.Model):
    """Progress submission from the assigned team member"""
    SUBMISSION_TYPE_CHOICES = [
        ('design', 'Design'),
        ('document', 'Document'),
        ('code', 'Code/Software'),
        ('other', 'Other'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='submissions')
    submitted_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='project_submissions')
    submission_type = models.CharField(max_length=20, choices=SUBMISSION_TYPE_CHOICES, default='other')
    progress = models.PositiveSmallIntegerField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])
    notes = models.TextField(blank=True, null=True)
    file_path = models.CharField(max_length=500, blank=True, null=True)
    file_name = models.CharField(max_length=255, blank=True, null=True)
    file_size = models.BigIntegerField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.project.name} ({self.submission_type}, {self.progress}%)"

    class Meta:
        db_table = 'project_submissions'
        ordering = ['-created_at']


class ProjectProposal(models.Model):
    """Department proposal that becomes a project once approved"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    client_name = models.CharField(max_length=255, blank=True, null=True)
    department = models.CharField(max_length=30, choices=DEPARTMENT_CHOICES)
    estimated_hours = models.PositiveIntegerField(blank=True, null=True)
    estimated_budget = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    proposed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='proposals')
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='proposals_approved')
    approved_at = models.DateTimeField(blank=True, null=True)
    rejection_reason = models.TextField(blank=True, null=True)
    project = models.OneToOneField(Project, on_delete=models.SET_NULL, null=True, blank=True, related_name='proposal')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.status})"

    class Meta:
        db_table = 'project_proposals'
        ordering = ['-created_at']
