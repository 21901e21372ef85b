from django.contrib import admin
from .models import FinancialTransaction, ExpenseRequest


@admin.register(FinancialTransaction)
class FinancialTransactionAdmin(admin.ModelAdmin):
    list_display = ['transaction_date', 'transaction_type', 'category', 'amount', 'client_name', 'recorded_by']
    list_filter = ['transaction_type', 'category', 'transaction_date']
    search_fields = ['description', 'client_name']
    ordering = ['-transaction_date']


@admin.register(ExpenseRequest)
class ExpenseRequestAdmin(admin.ModelAdmin):
    list_display = ['title', 'requesting_department', 'amount', 'status', 'requested_by', 'approved_by', 'created_at']
    list_filter = ['status', 'requesting_department']
    search_fields = ['title', 'description']
    readonly_fields = ['approved_by', 'approved_at', 'transaction']
