from django.conf import settings
from rest_framework import serializers
from agencyhub.core.models import DEPARTMENT_CHOICES
from agencyhub.documents.storage import public_url
from .models import DepartmentMessage

CHAT_ATTACHMENT_MAX_BYTES = getattr(settings, 'CHAT_ATTACHMENT_MAX_BYTES', 10 * 1024 * 1024)

# 'admin' addresses the management department
RECIPIENT_CHOICES = DEPARTMENT_CHOICES + [('admin', 'Admin')]


class DepartmentMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.display_name', read_only=True, default=None)
    attachment_url = serializers.SerializerMethodField()

    class Meta:
        model = DepartmentMessage
        fields = ['id', 'sender', 'sender_name', 'sender_department', 'recipient_department', 'message', 'read',
                  'attachment_path', 'attachment_name', 'attachment_size', 'attachment_url', 'created_at']

    def get_attachment_url(self, obj):
        return public_url(obj.attachment_path)


class SendMessageSerializer(serializers.Serializer):
    recipient_department = serializers.ChoiceField(choices=RECIPIENT_CHOICES)
    message = serializers.CharField(allow_blank=True, trim_whitespace=True)
    attachment = serializers.FileField(required=False)

    def validate_message(self, value):
        if not value:
            raise serializers.ValidationError("Message cannot be blank")
        return value

    def validate_recipient_department(self, value):
        return 'management' if value == 'admin' else value

    def validate_attachment(self, value):
        if value is not None and value.size > CHAT_ATTACHMENT_MAX_BYTES:
            limit_mb = CHAT_ATTACHMENT_MAX_BYTES // (1024 * 1024)
            raise serializers.ValidationError(f"Attachments must be {limit_mb} MB or smaller")
        return value
