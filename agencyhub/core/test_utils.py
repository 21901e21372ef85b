"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from agencyhub.core.models import Profile, UserRole
from agencyhub.clients.models import Client
from agencyhub.projects.models import Project, Task, ProjectProposal
from agencyhub.documents.models import Document
from agencyhub.finance.models import FinancialTransaction, ExpenseRequest
from agencyhub.messaging.models import DepartmentMessage
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', roles=None, department=None, full_name=None):
        """Create a test user with optional roles and department"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(username=username, email=email, password=password)
        if department or full_name:
            Profile.objects.filter(user=user).update(department=department, full_name=full_name)
        for role in roles or []:
            UserRole.objects.create(user=user, role=role)
        return User.objects.get(pk=user.pk)

    @staticmethod
    def create_admin(**kwargs):
        return TestDataFactory.create_user(roles=['admin'], **kwargs)

    @staticmethod
    def create_team_member(department='developers', **kwargs):
        return TestDataFactory.create_user(roles=['team'], department=department, **kwargs)

    @staticmethod
    def create_client(created_by=None, name=None, status='active'):
        """Create a test client"""
        if not name:
            name = f'Client_{TestDataFactory.random_string(6)}'
        return Client.objects.create(
            name=name,
            company=f'{name} Ltd',
            email=f'{name.lower()}@client.test',
            status=status,
            created_by=created_by,
        )

    @staticmethod
    def create_project(created_by=None, name=None, client=None, department=None, status='planning', assigned_team=None):
        """Create a test project"""
        if not name:
            name = f'Project_{TestDataFactory.random_string(6)}'
        return Project.objects.create(
            name=name,
            client=client,
            department=department,
            status=status,
            assigned_team=assigned_team,
            created_by=created_by,
        )

    @staticmethod
    def create_task(project, created_by=None, title=None, status='todo', priority='medium', assigned_to=None):
        """Create a test task"""
        return Task.objects.create(
            project=project,
            title=title or f'Task_{TestDataFactory.random_string(6)}',
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            created_by=created_by,
        )

    @staticmethod
    def create_proposal(proposed_by, department='developers', title=None, status='pending'):
        """Create a test project proposal"""
        return ProjectProposal.objects.create(
            title=title or f'Proposal_{TestDataFactory.random_string(6)}',
            department=department,
            estimated_hours=40,
            estimated_budget=Decimal('1500.00'),
            status=status,
            proposed_by=proposed_by,
        )

    @staticmethod
    def create_document(created_by, title=None, project=None):
        """Create a test document without a file"""
        return Document.objects.create(
            title=title or f'Document_{TestDataFactory.random_string(6)}',
            content='Test content',
            project=project,
            created_by=created_by,
        )

    @staticmethod
    def create_transaction(recorded_by=None, transaction_type='payment', amount=None, category='software_development'):
        """Create a test financial transaction"""
        return FinancialTransaction.objects.create(
            transaction_type=transaction_type,
            category=category,
            amount=amount if amount is not None else Decimal('100.00'),
            recorded_by=recorded_by,
        )

    @staticmethod
    def create_expense_request(requested_by, department='advertising', amount=None, title=None):
        """Create a pending expense request"""
        return ExpenseRequest.objects.create(
            title=title or f'Expense_{TestDataFactory.random_string(6)}',
            amount=amount if amount is not None else Decimal('250.00'),
            requesting_department=department,
            requested_by=requested_by,
        )

    @staticmethod
    def create_message(sender, sender_department, recipient_department, message='Hello', read=False):
        """Create a department chat message"""
        return DepartmentMessage.objects.create(
            sender=sender,
            sender_department=sender_department,
            recipient_department=recipient_department,
            message=message,
            read=read,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
