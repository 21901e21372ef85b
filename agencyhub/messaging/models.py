from django.db import models
from agencyhub.core.models import User, DEPARTMENT_CHOICES


class DepartmentMessage(models.Model):
    """Chat message between departments, optionally with one attachment"""
    sender = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='department_messages_sent')
    sender_department = models.CharField(max_length=30, choices=DEPARTMENT_CHOICES)
    recipient_department = models.CharField(max_length=30, choices=DEPARTMENT_CHOICES)
    message = models.TextField()
    read = models.BooleanField(default=False)
    attachment_path = models.CharField(max_length=500, blank=True, null=True)
    attachment_name = models.CharField(max_length=255, blank=True, null=True)
    attachment_size = models.BigIntegerField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.sender_department} -> {self.recipient_department}"

    class Meta:
        db_table = 'department_messages'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['recipient_department', 'read'], name='department__recipie_2f8c1a_idx'),
        ]
