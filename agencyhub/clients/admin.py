from django.contrib import admin
from .models import Client, ClientMessage


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'email', 'phone', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'company', 'email']
    ordering = ['name']


@admin.register(ClientMessage)
class ClientMessageAdmin(admin.ModelAdmin):
    list_display = ['client', 'sender', 'is_admin_reply', 'created_at']
    list_filter = ['is_admin_reply']
    search_fields = ['client__name', 'message']
    ordering = ['-created_at']
