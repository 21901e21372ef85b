from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import (
    User, Profile, UserRole, UserPreference, TeamActivity, AuditLog, ChangeEvent,
    DEPARTMENT_CHOICES, ROLE_CHOICES,
)


class ProfileSerializer(serializers.ModelSerializer):
    department_display = serializers.CharField(source='get_department_display', read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'full_name', 'department', 'department_display', 'avatar_url', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()
    department = serializers.SerializerMethodField()
    roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'full_name', 'department',
                  'roles', 'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_full_name(self, obj):
        return obj.display_name

    def get_department(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.department if profile else None

    def get_roles(self, obj):
        return list(obj.roles.values_list('role', flat=True))


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    full_name = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone', 'full_name']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        full_name = validated_data.pop('full_name', '').strip()
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        if full_name:
            Profile.objects.filter(user=user).update(full_name=full_name)
        return user


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)
    new_password_confirm = serializers.CharField(write_only=True)

    def validate_current_password(self, value):
        if not self.context['user'].check_password(value):
            raise serializers.ValidationError("Current password is incorrect")
        return value

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({"new_password": "Passwords don't match"})
        validate_password(attrs['new_password'], user=self.context['user'])
        return attrs


class UserPreferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserPreference
        fields = ['email_notifications', 'push_notifications', 'project_updates', 'security_alerts', 'updated_at']
        read_only_fields = ['updated_at']


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLE_CHOICES)


class DepartmentChangeSerializer(serializers.Serializer):
    department = serializers.ChoiceField(choices=DEPARTMENT_CHOICES, allow_null=True)


class LockPinSerializer(serializers.Serializer):
    pin = serializers.RegexField(r'^\d{4}$', error_messages={'invalid': 'PIN must be exactly 4 digits'})


class TeamMemberSerializer(serializers.ModelSerializer):
    """Team listing row: profile data plus role and presence"""
    full_name = serializers.SerializerMethodField()
    department = serializers.SerializerMethodField()
    avatar_url = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()
    is_online = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'full_name', 'department', 'avatar_url', 'role', 'is_online', 'created_at']

    def get_full_name(self, obj):
        return obj.display_name

    def get_department(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.department if profile else None

    def get_avatar_url(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.avatar_url if profile else None

    def get_role(self, obj):
        roles = [r.role for r in obj.roles.all()]
        return roles[0] if roles else None

    def get_is_online(self, obj):
        online = self.context.get('online_user_ids', set())
        return obj.id in online


class TeamActivitySerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.display_name', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)

    class Meta:
        model = TeamActivity
        fields = ['id', 'user', 'user_name', 'activity_type', 'description', 'project', 'project_name', 'created_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']


class ChangeEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChangeEvent
        fields = ['id', 'table', 'event', 'record_id', 'created_at']
