from django.db import models
from django.utils import timezone
from agencyhub.core.models import User, DEPARTMENT_CHOICES
from agencyhub.documents.models import AdvertisingAsset


class FinancialTransaction(models.Model):
    """Money in or out of the agency"""
    TRANSACTION_TYPE_CHOICES = [
        ('payment', 'Payment'),
        ('sale', 'Sale'),
        ('service', 'Service'),
        ('expense', 'Expense'),
        ('refund', 'Refund'),
    ]
    CATEGORY_CHOICES = [
        ('software_development', 'Software Development'),
        ('web_design', 'Web Design'),
        ('school_management_system', 'School Management System'),
        ('pos_system', 'POS System'),
        ('it_consultation', 'IT Consultation'),
        ('graphic_design', 'Graphic Design'),
        ('advertising', 'Advertising'),
        ('other', 'Other'),
    ]
    # Types that count towards revenue
    INCOME_TYPES = ['payment', 'sale', 'service']

    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES, default='payment')
    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES, default='software_development')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True, null=True)
    client_name = models.CharField(max_length=255, blank=True, null=True)
    transaction_date = models.DateField(default=timezone.localdate)
    recorded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='transactions_recorded')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.transaction_type} {self.amount} ({self.category})"

    class Meta:
        db_table = 'financial_transactions'
        ordering = ['-transaction_date', '-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name='transaction_amount_positive'),
        ]


class ExpenseRequest(models.Model):
    """Department request for money, approved or rejected by an admin"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    requesting_department = models.CharField(max_length=30, choices=DEPARTMENT_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    requested_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='expense_requests')
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='expense_requests_approved')
    approved_at = models.DateTimeField(blank=True, null=True)
    rejection_reason = models.TextField(blank=True, null=True)
    advertising_asset = models.ForeignKey(AdvertisingAsset, on_delete=models.SET_NULL, null=True, blank=True, related_name='expense_requests')
    transaction = models.OneToOneField(FinancialTransaction, on_delete=models.SET_NULL, null=True, blank=True, related_name='expense_request')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.status})"

    class Meta:
        db_table = 'expense_requests'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name='expense_amount_positive'),
        ]
