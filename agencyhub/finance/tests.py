"""
Test suite for the finance module
Tests: Transactions, Summary, Expense requests, Approval/Rejection
"""
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework import status

from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agencyhub.finance.models import FinancialTransaction, ExpenseRequest


class TransactionTests(TestCase):
    """Test financial transaction endpoints"""

    def setUp(self):
        self.accountant = TestDataFactory.create_team_member(department='financial')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.accountant)

    def test_record_transaction(self):
        response = self.client.post('/api/v1/transactions/', {
            'transaction_type': 'payment',
            'category': 'web_design',
            'amount': '1200.00',
            'client_name': 'Acme',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(FinancialTransaction.objects.get().recorded_by, self.accountant)

    def test_amount_must_be_positive(self):
        response = self.client.post('/api/v1/transactions/', {
            'transaction_type': 'payment', 'category': 'other', 'amount': '0',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_amount_constraint_in_database(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                FinancialTransaction.objects.create(transaction_type='sale', category='other', amount=Decimal('-5'))

    def test_other_departments_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_team_member(department='developers'))
        response = self.client.get('/api/v1/transactions/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        TestDataFactory.create_transaction(transaction_type='payment')
        TestDataFactory.create_transaction(transaction_type='expense', category='advertising')
        response = self.client.get('/api/v1/transactions/?transaction_type=expense')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/transactions/?category=advertising')
        self.assertEqual(len(response.data), 1)

    def test_list_limited_to_50(self):
        for _ in range(55):
            TestDataFactory.create_transaction()
        response = self.client.get('/api/v1/transactions/')
        self.assertEqual(len(response.data), 50)

    def test_summary(self):
        TestDataFactory.create_transaction(transaction_type='payment', amount=Decimal('1000.00'))
        TestDataFactory.create_transaction(transaction_type='sale', amount=Decimal('500.00'), category='pos_system')
        TestDataFactory.create_transaction(transaction_type='expense', amount=Decimal('300.00'), category='advertising')
        TestDataFactory.create_transaction(transaction_type='refund', amount=Decimal('100.00'))
        response = self.client.get('/api/v1/transactions/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], 1500.0)
        self.assertEqual(response.data['total_expenses'], 300.0)
        self.assertEqual(response.data['total_refunds'], 100.0)
        self.assertEqual(response.data['net'], 1100.0)
        self.assertEqual(response.data['transaction_count'], 4)
        self.assertEqual(response.data['top_category'], 'software_development')

    def test_delete_requires_confirmation(self):
        record = TestDataFactory.create_transaction()
        response = self.client.delete(f'/api/v1/transactions/{record.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.delete(f'/api/v1/transactions/{record.id}/?confirm=true')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class ExpenseRequestTests(TestCase):
    """Test expense requests and their approval"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.marketer = TestDataFactory.create_team_member(department='advertising')
        self.client = AuthenticatedAPIClient()

    def test_submit_uses_profile_department(self):
        self.client.authenticate_user(self.marketer)
        response = self.client.post('/api/v1/expense-requests/', {
            'title': 'Radio spots', 'amount': '750.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['requesting_department'], 'advertising')
        self.assertEqual(response.data['status'], 'pending')

    def test_submit_without_department(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/expense-requests/', {'title': 'Laptop', 'amount': '900.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_submit_rejects_zero_amount(self):
        self.client.authenticate_user(self.marketer)
        response = self.client.post('/api/v1/expense-requests/', {'title': 'Free', 'amount': '0.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_approve_creates_exactly_one_transaction(self):
        expense = TestDataFactory.create_expense_request(self.marketer, amount=Decimal('750.00'), title='Radio spots')
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/expense-requests/{expense.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')

        response = self.client.post(f'/api/v1/expense-requests/{expense.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertEqual(FinancialTransaction.objects.count(), 1)
        record = FinancialTransaction.objects.get()
        self.assertEqual(record.transaction_type, 'expense')
        self.assertEqual(record.category, 'advertising')
        self.assertEqual(record.amount, Decimal('750.00'))
        self.assertEqual(record.description, 'Radio spots - Approved expense request from Advertising')
        expense.refresh_from_db()
        self.assertEqual(expense.transaction, record)
        self.assertEqual(expense.approved_by, self.admin)

    def test_non_advertising_expense_category(self):
        dev = TestDataFactory.create_team_member(department='developers')
        expense = TestDataFactory.create_expense_request(dev, department='developers')
        self.client.authenticate_user(self.admin)
        self.client.post(f'/api/v1/expense-requests/{expense.id}/approve/')
        self.assertEqual(FinancialTransaction.objects.get().category, 'other')

    def test_reject_default_reason(self):
        expense = TestDataFactory.create_expense_request(self.marketer)
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/expense-requests/{expense.id}/reject/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        expense.refresh_from_db()
        self.assertEqual(expense.status, 'rejected')
        self.assertEqual(expense.rejection_reason, 'No reason provided')
        self.assertEqual(expense.approved_by, self.admin)
        self.assertIsNotNone(expense.approved_at)
        self.assertFalse(FinancialTransaction.objects.exists())

    def test_rejected_cannot_be_approved(self):
        expense = TestDataFactory.create_expense_request(self.marketer)
        self.client.authenticate_user(self.admin)
        self.client.post(f'/api/v1/expense-requests/{expense.id}/reject/', {'reason': 'Over budget'}, format='json')
        response = self.client.post(f'/api/v1/expense-requests/{expense.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(FinancialTransaction.objects.exists())

    def test_member_cannot_approve(self):
        expense = TestDataFactory.create_expense_request(self.marketer)
        self.client.authenticate_user(self.marketer)
        response = self.client.post(f'/api/v1/expense-requests/{expense.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_department_visibility(self):
        TestDataFactory.create_expense_request(self.admin, department='advertising')
        TestDataFactory.create_expense_request(self.admin, department='developers')
        self.client.authenticate_user(self.marketer)
        response = self.client.get('/api/v1/expense-requests/')
        self.assertEqual([row['requesting_department'] for row in response.data], ['advertising'])

    def test_summary(self):
        TestDataFactory.create_expense_request(self.marketer, amount=Decimal('100.00'))
        TestDataFactory.create_expense_request(self.marketer, amount=Decimal('50.00'))
        approved = TestDataFactory.create_expense_request(self.marketer, amount=Decimal('25.00'))
        ExpenseRequest.objects.filter(pk=approved.pk).update(status='approved')
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/expense-requests/summary/')
        self.assertEqual(response.data['pending_count'], 2)
        self.assertEqual(response.data['pending_total'], 150.0)
        self.assertEqual(response.data['approved_total'], 25.0)
