"""
Test suite for the reports module
Tests: Dashboard counters, Analytics, CSV export, Department dashboard
"""
import csv
import io
from datetime import date

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from agencyhub.core.cache_utils import get_dashboard_version
from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agencyhub.reports.analytics import month_starts


class DashboardTests(TestCase):
    """Test the dashboard counters"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_counters(self):
        project = TestDataFactory.create_project(created_by=self.admin, status='in-progress')
        TestDataFactory.create_project(created_by=self.admin)
        TestDataFactory.create_task(project, status='done')
        TestDataFactory.create_task(project)
        TestDataFactory.create_client(created_by=self.admin)
        TestDataFactory.create_proposal(self.admin)
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects'], 2)
        self.assertEqual(response.data['active_projects'], 1)
        self.assertEqual(response.data['tasks'], 2)
        self.assertEqual(response.data['completed_tasks'], 1)
        self.assertEqual(response.data['clients'], 1)
        self.assertEqual(response.data['pending_proposals'], 1)

    def test_counters_refresh_after_change(self):
        self.assertEqual(self.client.get('/api/v1/dashboard/').data['clients'], 0)
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_client(created_by=self.admin)
        self.assertEqual(self.client.get('/api/v1/dashboard/').data['clients'], 1)

    def test_cache_version_bumped_only_on_commit(self):
        before = get_dashboard_version()
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            TestDataFactory.create_client(created_by=self.admin)
            self.assertEqual(get_dashboard_version(), before)
            self.assertEqual(self.client.get('/api/v1/dashboard/').data['clients'], 1)
        self.assertTrue(callbacks)
        self.assertGreater(get_dashboard_version(), before)


class AnalyticsTests(TestCase):
    """Test analytics aggregates and export"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.member = TestDataFactory.create_team_member(full_name='Dana Dev')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_month_starts_cross_year(self):
        starts = month_starts(date(2025, 2, 14))
        self.assertEqual(starts[0], date(2024, 9, 1))
        self.assertEqual(starts[-1], date(2025, 2, 1))
        self.assertEqual(len(starts), 6)

    def test_analytics(self):
        project = TestDataFactory.create_project(created_by=self.admin, status='completed')
        TestDataFactory.create_task(project, status='done', priority='high', assigned_to=self.member)
        TestDataFactory.create_task(project, status='todo', priority='low', assigned_to=self.member)
        TestDataFactory.create_task(project, status='todo', priority='low')
        response = self.client.get('/api/v1/analytics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn({'name': 'completed', 'value': 1}, response.data['projects_by_status'])
        self.assertIn({'name': 'low', 'value': 2}, response.data['tasks_by_priority'])
        self.assertEqual(response.data['team_performance'], [{'name': 'Dana Dev', 'completed': 1, 'pending': 1}])
        self.assertEqual(len(response.data['monthly_activity']), 6)
        self.assertEqual(response.data['monthly_activity'][-1]['tasks'], 3)
        self.assertEqual(response.data['totals']['completed_tasks'], 1)

    def test_analytics_admin_only(self):
        self.client.authenticate_user(self.member)
        response = self.client.get('/api/v1/analytics/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_export_csv(self):
        project = TestDataFactory.create_project(created_by=self.admin)
        TestDataFactory.create_task(project, assigned_to=self.member)
        response = self.client.get('/api/v1/analytics/export/?dataset=team_performance')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        self.assertEqual(rows[0], ['name', 'completed', 'pending'])
        self.assertEqual(rows[1], ['Dana Dev', '0', '1'])

    def test_export_empty_dataset(self):
        response = self.client.get('/api/v1/analytics/export/?dataset=team_performance')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No data available to export')

    def test_export_unknown_dataset(self):
        response = self.client.get('/api/v1/analytics/export/?dataset=salaries')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DepartmentDashboardTests(TestCase):
    """Test department dashboards"""

    def setUp(self):
        cache.clear()
        self.member = TestDataFactory.create_team_member(department='developers')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.member)

    def test_own_department(self):
        TestDataFactory.create_project(created_by=self.member, department='developers', status='in-progress')
        TestDataFactory.create_project(created_by=self.member, department='advertising')
        TestDataFactory.create_proposal(self.member, department='developers')
        response = self.client.get('/api/v1/departments/developers/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['projects']['total'], 1)
        self.assertEqual(response.data['projects']['active'], 1)
        self.assertEqual(response.data['pending_proposals'], 1)
        self.assertEqual(response.data['members'], 1)
        self.assertEqual(len(response.data['recent_projects']), 1)

    def test_other_department_forbidden(self):
        response = self.client.get('/api/v1/departments/financial/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_department(self):
        response = self.client.get('/api/v1/departments/sales/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
