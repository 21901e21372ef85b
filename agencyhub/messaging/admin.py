from django.contrib import admin
from .models import DepartmentMessage


@admin.register(DepartmentMessage)
class DepartmentMessageAdmin(admin.ModelAdmin):
    list_display = ['sender', 'sender_department', 'recipient_department', 'read', 'attachment_name', 'created_at']
    list_filter = ['sender_department', 'recipient_department', 'read']
    search_fields = ['message', 'sender__username']
    ordering = ['-created_at']
