import logging
from decimal import Decimal
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db import transaction
from django.db.models import Sum, Count, Q
from django.utils import timezone

from agencyhub.core.models import DEPARTMENT_LABELS
from agencyhub.core.permissions import IsPortalAdmin, is_portal_admin, get_user_department
from agencyhub.core.utils import create_audit_log, deletion_confirmed, CONFIRMATION_REQUIRED
from .models import FinancialTransaction, ExpenseRequest
from .serializers import FinancialTransactionSerializer, ExpenseRequestSerializer, ExpenseRejectSerializer

logger = logging.getLogger('agencyhub.finance')

TRANSACTION_LIST_LIMIT = 50
DEFAULT_REJECTION_REASON = 'No reason provided'


def can_manage_finances(user):
    """Admins and members of the financial department"""
    return is_portal_admin(user) or get_user_department(user) == 'financial'


def expense_category_for(department):
    return 'advertising' if department == 'advertising' else 'other'


# Transaction views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transaction_list_create(request):
    """Latest transactions or record a new one"""
    if not can_manage_finances(request.user):
        logger.warning(f"User {request.user.username} attempted to access financial transactions")
        return Response({'error': 'Only administrators and the financial department can access transactions'},
                        status=status.HTTP_403_FORBIDDEN)
    try:
        if request.method == 'GET':
            queryset = FinancialTransaction.objects.select_related('recorded_by__profile')
            transaction_type = request.query_params.get('transaction_type')
            if transaction_type:
                queryset = queryset.filter(transaction_type=transaction_type)
            category = request.query_params.get('category')
            if category:
                queryset = queryset.filter(category=category)
            date_from = request.query_params.get('date_from')
            if date_from:
                queryset = queryset.filter(transaction_date__gte=date_from)
            date_to = request.query_params.get('date_to')
            if date_to:
                queryset = queryset.filter(transaction_date__lte=date_to)
            queryset = queryset.order_by('-transaction_date', '-created_at')[:TRANSACTION_LIST_LIMIT]
            return Response(FinancialTransactionSerializer(queryset, many=True).data)

        serializer = FinancialTransactionSerializer(data=request.data)
        if serializer.is_valid():
            record = serializer.save(recorded_by=request.user)
            logger.info(f"Transaction {record.id} ({record.transaction_type} {record.amount}) recorded by {request.user.username}")
            create_audit_log(request=request, action='create', model_name='FinancialTransaction',
                             object_id=record.id, object_name=str(record),
                             changes={'amount': str(record.amount), 'category': record.category})
            return Response(FinancialTransactionSerializer(record).data, status=status.HTTP_201_CREATED)
        logger.warning(f"Transaction validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Unexpected error in transaction_list_create: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def transaction_detail(request, pk):
    """Retrieve, update or delete a transaction"""
    if not can_manage_finances(request.user):
        return Response({'error': 'Only administrators and the financial department can access transactions'},
                        status=status.HTTP_403_FORBIDDEN)
    record = get_object_or_404(FinancialTransaction, pk=pk)

    if request.method == 'GET':
        return Response(FinancialTransactionSerializer(record).data)

    if request.method in ['PUT', 'PATCH']:
        old_amount = record.amount
        serializer = FinancialTransactionSerializer(record, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            changes = {'amount': {'from': str(old_amount), 'to': str(record.amount)}} if old_amount != record.amount else {}
            logger.info(f"Transaction {pk} updated by {request.user.username}")
            create_audit_log(request=request, action='update', model_name='FinancialTransaction',
                             object_id=record.id, object_name=str(record), changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if not deletion_confirmed(request):
        return Response(CONFIRMATION_REQUIRED, status=status.HTTP_400_BAD_REQUEST)
    description = str(record)
    record.delete()
    logger.info(f"Transaction {pk} deleted by {request.user.username}")
    create_audit_log(request=request, action='delete', model_name='FinancialTransaction',
                     object_id=pk, object_name=description)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transaction_summary(request):
    """Revenue, expenses and totals per category"""
    if not can_manage_finances(request.user):
        return Response({'error': 'Only administrators and the financial department can access transactions'},
                        status=status.HTTP_403_FORBIDDEN)

    totals = FinancialTransaction.objects.aggregate(
        total_revenue=Sum('amount', filter=Q(transaction_type__in=FinancialTransaction.INCOME_TYPES)),
        total_expenses=Sum('amount', filter=Q(transaction_type='expense')),
        total_refunds=Sum('amount', filter=Q(transaction_type='refund')),
        transaction_count=Count('id'),
    )
    total_revenue = totals['total_revenue'] or Decimal('0')
    total_expenses = totals['total_expenses'] or Decimal('0')
    total_refunds = totals['total_refunds'] or Decimal('0')

    by_category = {
        row['category']: float(row['total'])
        for row in FinancialTransaction.objects.values('category').annotate(total=Sum('amount')).order_by('-total')
    }
    top_category = next(iter(by_category), None)

    return Response({
        'total_revenue': float(total_revenue),
        'total_expenses': float(total_expenses),
        'total_refunds': float(total_refunds),
        'net': float(total_revenue - total_expenses - total_refunds),
        'transaction_count': totals['transaction_count'],
        'by_category': by_category,
        'top_category': top_category,
    })


# Expense request views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def expense_request_list_create(request):
    """
    List or submit expense requests.
    Admins see every request; other users see their department's requests
    and their own.
    """
    if request.method == 'GET':
        queryset = ExpenseRequest.objects.select_related(
            'requested_by__profile', 'approved_by__profile', 'advertising_asset'
        )
        if not is_portal_admin(request.user):
            department = get_user_department(request.user)
            visible = Q(requested_by=request.user)
            if department:
                visible |= Q(requesting_department=department)
            queryset = queryset.filter(visible)
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        department_filter = request.query_params.get('department')
        if department_filter:
            queryset = queryset.filter(requesting_department=department_filter)
        return Response(ExpenseRequestSerializer(queryset.order_by('-created_at'), many=True).data)

    serializer = ExpenseRequestSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Expense request validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    department = serializer.validated_data.get('requesting_department') or get_user_department(request.user)
    if not department:
        return Response({'requesting_department': ['A department is required to submit an expense request']},
                        status=status.HTTP_400_BAD_REQUEST)
    expense = serializer.save(requested_by=request.user, requesting_department=department, status='pending')
    logger.info(f"Expense request {expense.id} ({expense.amount}) submitted by {request.user.username} for {department}")
    return Response(ExpenseRequestSerializer(expense).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def expense_request_approve(request, pk):
    """Approve a pending expense request and record its expense transaction"""
    get_object_or_404(ExpenseRequest, pk=pk)
    with transaction.atomic():
        expense = ExpenseRequest.objects.select_for_update().get(pk=pk)
        if expense.status != 'pending':
            return Response({'error': f'Expense request is already {expense.status}'}, status=status.HTTP_400_BAD_REQUEST)

        department_label = DEPARTMENT_LABELS.get(expense.requesting_department, expense.requesting_department)
        expense_transaction = FinancialTransaction.objects.create(
            transaction_type='expense',
            category=expense_category_for(expense.requesting_department),
            amount=expense.amount,
            description=f"{expense.title} - Approved expense request from {department_label}",
            recorded_by=request.user,
        )
        expense.status = 'approved'
        expense.approved_by = request.user
        expense.approved_at = timezone.now()
        expense.transaction = expense_transaction
        expense.save(update_fields=['status', 'approved_by', 'approved_at', 'transaction', 'updated_at'])

    logger.info(f"Expense request {pk} approved by {request.user.username}; transaction {expense_transaction.id}")
    create_audit_log(request=request, action='approve', model_name='ExpenseRequest', object_id=expense.id,
                     object_name=expense.title,
                     changes={'amount': str(expense.amount), 'transaction_id': expense_transaction.id})
    return Response(ExpenseRequestSerializer(expense).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPortalAdmin])
def expense_request_reject(request, pk):
    """Reject a pending expense request"""
    serializer = ExpenseRejectSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    get_object_or_404(ExpenseRequest, pk=pk)
    with transaction.atomic():
        expense = ExpenseRequest.objects.select_for_update().get(pk=pk)
        if expense.status != 'pending':
            return Response({'error': f'Expense request is already {expense.status}'}, status=status.HTTP_400_BAD_REQUEST)
        expense.status = 'rejected'
        expense.rejection_reason = (serializer.validated_data.get('reason') or '').strip() or DEFAULT_REJECTION_REASON
        expense.approved_by = request.user
        expense.approved_at = timezone.now()
        expense.save(update_fields=['status', 'rejection_reason', 'approved_by', 'approved_at', 'updated_at'])

    logger.info(f"Expense request {pk} rejected by {request.user.username}")
    create_audit_log(request=request, action='reject', model_name='ExpenseRequest', object_id=expense.id,
                     object_name=expense.title, changes={'reason': expense.rejection_reason})
    return Response(ExpenseRequestSerializer(expense).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expense_request_summary(request):
    """Pending count and totals"""
    queryset = ExpenseRequest.objects.all()
    if not is_portal_admin(request.user):
        department = get_user_department(request.user)
        visible = Q(requested_by=request.user)
        if department:
            visible |= Q(requesting_department=department)
        queryset = queryset.filter(visible)

    totals = queryset.aggregate(
        pending_count=Count('id', filter=Q(status='pending')),
        pending_total=Sum('amount', filter=Q(status='pending')),
        approved_total=Sum('amount', filter=Q(status='approved')),
    )
    return Response({
        'pending_count': totals['pending_count'],
        'pending_total': float(totals['pending_total'] or 0),
        'approved_total': float(totals['approved_total'] or 0),
    })
