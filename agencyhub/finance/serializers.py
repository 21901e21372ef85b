from decimal import Decimal
from rest_framework import serializers
from agencyhub.core.models import DEPARTMENT_CHOICES
from .models import FinancialTransaction, ExpenseRequest


class FinancialTransactionSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    recorded_by_name = serializers.CharField(source='recorded_by.display_name', read_only=True, default=None)

    class Meta:
        model = FinancialTransaction
        fields = ['id', 'transaction_type', 'category', 'category_display', 'amount', 'description',
                  'client_name', 'transaction_date', 'recorded_by', 'recorded_by_name', 'created_at', 'updated_at']
        read_only_fields = ['recorded_by', 'created_at', 'updated_at']


class ExpenseRequestSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    requesting_department = serializers.ChoiceField(choices=DEPARTMENT_CHOICES, required=False)
    requested_by_name = serializers.CharField(source='requested_by.display_name', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.display_name', read_only=True, default=None)
    advertising_asset_title = serializers.CharField(source='advertising_asset.title', read_only=True, default=None)

    class Meta:
        model = ExpenseRequest
        fields = ['id', 'title', 'description', 'amount', 'requesting_department', 'status',
                  'requested_by', 'requested_by_name', 'approved_by', 'approved_by_name', 'approved_at',
                  'rejection_reason', 'advertising_asset', 'advertising_asset_title', 'transaction',
                  'created_at', 'updated_at']
        read_only_fields = ['status', 'requested_by', 'approved_by', 'approved_at', 'rejection_reason',
                            'transaction', 'created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title cannot be blank")
        return value


class ExpenseRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
