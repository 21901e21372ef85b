from rest_framework import serializers
from .models import Client, ClientMessage


class ClientSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)
    project_count = serializers.SerializerMethodField()

    class Meta:
        model = Client
        fields = ['id', 'name', 'company', 'email', 'phone', 'notes', 'status',
                  'created_by', 'created_by_name', 'project_count', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def get_project_count(self, obj):
        annotated = getattr(obj, 'project_count', None)
        if annotated is not None:
            return annotated
        return obj.projects.count()

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Client name cannot be blank")
        return value


class ClientMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.display_name', read_only=True, default=None)

    class Meta:
        model = ClientMessage
        fields = ['id', 'client', 'sender', 'sender_name', 'message', 'is_admin_reply', 'created_at']
        read_only_fields = ['client', 'sender', 'is_admin_reply', 'created_at']

    def validate_message(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Message cannot be blank")
        return value
