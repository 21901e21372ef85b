from django.contrib import admin
from .models import Document, Design, AdvertisingAsset


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'file_name', 'created_by', 'created_at']
    search_fields = ['title', 'content', 'file_name']
    ordering = ['-created_at']


@admin.register(Design)
class DesignAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'file_name', 'created_by', 'created_at']
    search_fields = ['title', 'description', 'file_name']
    ordering = ['-created_at']


@admin.register(AdvertisingAsset)
class AdvertisingAssetAdmin(admin.ModelAdmin):
    list_display = ['title', 'asset_type', 'status', 'expense_amount', 'created_by', 'created_at']
    list_filter = ['asset_type', 'status']
    search_fields = ['title', 'coverage']
