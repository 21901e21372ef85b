from django.urls import path
from .views import (
    transaction_list_create, transaction_detail, transaction_summary,
    expense_request_list_create, expense_request_approve, expense_request_reject, expense_request_summary,
)

urlpatterns = [
    path('transactions/', transaction_list_create, name='transaction-list-create'),
    path('transactions/summary/', transaction_summary, name='transaction-summary'),
    path('transactions/<int:pk>/', transaction_detail, name='transaction-detail'),
    path('expense-requests/', expense_request_list_create, name='expense-request-list-create'),
    path('expense-requests/summary/', expense_request_summary, name='expense-request-summary'),
    path('expense-requests/<int:pk>/approve/', expense_request_approve, name='expense-request-approve'),
    path('expense-requests/<int:pk>/reject/', expense_request_reject, name='expense-request-reject'),
]
