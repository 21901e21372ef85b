from django.contrib import admin
from .models import Project, Task, ProjectSubmission, ProjectProposal


class TaskInline(admin.TabularInline):
    model = Task
    extra = 0
    fields = ['title', 'status', 'priority', 'assigned_to']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'department', 'status', 'progress', 'assigned_team', 'created_at']
    list_filter = ['status', 'department', 'created_at']
    search_fields = ['name', 'description', 'client__name']
    ordering = ['-created_at']
    inlines = [TaskInline]


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'status', 'priority', 'assigned_to', 'created_at']
    list_filter = ['status', 'priority']
    search_fields = ['title', 'project__name']


@admin.register(ProjectSubmission)
class ProjectSubmissionAdmin(admin.ModelAdmin):
    list_display = ['project', 'submitted_by', 'submission_type', 'progress', 'created_at']
    list_filter = ['submission_type']
    ordering = ['-created_at']


@admin.register(ProjectProposal)
class ProjectProposalAdmin(admin.ModelAdmin):
    list_display = ['title', 'department', 'status', 'proposed_by', 'approved_by', 'created_at']
    list_filter = ['status', 'department']
    search_fields = ['title', 'client_name']
    readonly_fields = ['approved_by', 'approved_at', 'project']
