from rest_framework import serializers
from agencyhub.core.models import User
from agencyhub.documents.storage import public_url
from .models import Project, Task, ProjectSubmission, ProjectProposal


class ProjectSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True, default=None)
    assigned_team_name = serializers.CharField(source='assigned_team.display_name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)
    department_display = serializers.CharField(source='get_department_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Project
        fields = ['id', 'name', 'description', 'client', 'client_name', 'department', 'department_display',
                  'status', 'status_display', 'progress', 'product_type', 'repository_url', 'live_url',
                  'start_date', 'end_date', 'assigned_team', 'assigned_team_name', 'deadline_hours',
                  'submitted_at', 'submission_notes', 'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['assigned_team', 'deadline_hours', 'submitted_at', 'submission_notes',
                            'created_by', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Project name cannot be blank")
        return value

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': 'End date cannot be before start date'})
        return attrs


class TaskSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    assigned_to_name = serializers.CharField(source='assigned_to.display_name', read_only=True, default=None)

    class Meta:
        model = Task
        fields = ['id', 'project', 'project_name', 'title', 'description', 'status', 'priority',
                  'assigned_to', 'assigned_to_name', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['project', 'created_by', 'created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Task title cannot be blank")
        return value


class TaskMoveSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Task.STATUS_CHOICES)


class ProjectAssignSerializer(serializers.Serializer):
    user_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True), source='user')
    deadline_hours = serializers.IntegerField(min_value=2, max_value=24, default=8)

    def validate_user_id(self, value):
        if not value.roles.filter(role='team').exists():
            raise serializers.ValidationError("Projects can only be assigned to team members")
        return value


class ProjectSubmissionSerializer(serializers.ModelSerializer):
    submitted_by_name = serializers.CharField(source='submitted_by.display_name', read_only=True, default=None)
    file = serializers.FileField(write_only=True, required=False)
    file_url = serializers.SerializerMethodField()

    class Meta:
        model = ProjectSubmission
        fields = ['id', 'project', 'submitted_by', 'submitted_by_name', 'submission_type', 'progress', 'notes',
                  'file', 'file_path', 'file_name', 'file_size', 'file_url', 'created_at']
        read_only_fields = ['project', 'submitted_by', 'file_path', 'file_name', 'file_size', 'created_at']

    def get_file_url(self, obj):
        return public_url(obj.file_path)


class ProjectProposalSerializer(serializers.ModelSerializer):
    proposed_by_name = serializers.CharField(source='proposed_by.display_name', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.display_name', read_only=True, default=None)
    department_display = serializers.CharField(source='get_department_display', read_only=True)

    class Meta:
        model = ProjectProposal
        fields = ['id', 'title', 'description', 'client_name', 'department', 'department_display',
                  'estimated_hours', 'estimated_budget', 'status', 'proposed_by', 'proposed_by_name',
                  'approved_by', 'approved_by_name', 'approved_at', 'rejection_reason', 'project',
                  'created_at', 'updated_at']
        read_only_fields = ['status', 'proposed_by', 'approved_by', 'approved_at', 'rejection_reason',
                            'project', 'created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Proposal title cannot be blank")
        return value

    def validate_estimated_budget(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Estimated budget cannot be negative")
        return value


class ProposalRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
