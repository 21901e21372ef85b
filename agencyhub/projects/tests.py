"""
Test suite for the projects module
Tests: Projects, Assignment, Submissions, Overview, Tasks/Kanban, Proposals
"""
import os
import shutil
import tempfile
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework import status

from agencyhub.core.models import TeamActivity
from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agencyhub.projects.models import Project, Task, ProjectProposal, ProjectSubmission
from agencyhub.projects.serializers import ProjectSubmissionSerializer


class ProjectTests(TestCase):
    """Test project endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(roles=['client'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_project(self):
        record = TestDataFactory.create_client(created_by=self.user)
        response = self.client.post('/api/v1/projects/', {
            'name': 'Company Website',
            'client': record.id,
            'department': 'developers',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'planning')
        self.assertEqual(response.data['client_name'], record.name)
        self.assertTrue(TeamActivity.objects.filter(project_id=response.data['id']).exists())

    def test_progress_out_of_range(self):
        response = self.client.post('/api/v1/projects/', {'name': 'Bad', 'progress': 101}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_end_before_start_rejected(self):
        response = self.client.post('/api/v1/projects/', {
            'name': 'Backwards', 'start_date': '2025-05-10', 'end_date': '2025-05-01'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_clients_see_only_own_projects(self):
        TestDataFactory.create_project(created_by=self.user, name='Mine')
        TestDataFactory.create_project(created_by=TestDataFactory.create_user(), name='Other')
        response = self.client.get('/api/v1/projects/')
        self.assertEqual([row['name'] for row in response.data], ['Mine'])

    def test_filter_by_status(self):
        TestDataFactory.create_project(created_by=self.user, status='completed')
        TestDataFactory.create_project(created_by=self.user, status='planning')
        response = self.client.get('/api/v1/projects/?status=completed')
        self.assertEqual(len(response.data), 1)

    def test_delete_requires_confirmation(self):
        project = TestDataFactory.create_project(created_by=self.user)
        response = self.client.delete(f'/api/v1/projects/{project.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.delete(f'/api/v1/projects/{project.id}/?confirm=true')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Project.objects.filter(pk=project.id).exists())

    def test_client_portal(self):
        TestDataFactory.create_project(created_by=self.user)
        TestDataFactory.create_document(created_by=self.user)
        response = self.client.get('/api/v1/client-portal/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['projects']), 1)
        self.assertEqual(len(response.data['documents']), 1)
        self.assertEqual(response.data['designs'], [])


class ProjectAssignmentTests(TestCase):
    """Test assigning projects and submitting work"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.admin = TestDataFactory.create_admin()
        self.member = TestDataFactory.create_team_member()
        self.project = TestDataFactory.create_project(created_by=self.admin, department='developers')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def tearDown(self):
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_assign_sets_in_progress(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/assign/', {
            'user_id': self.member.id, 'deadline_hours': 12
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.project.refresh_from_db()
        self.assertEqual(self.project.assigned_team, self.member)
        self.assertEqual(self.project.deadline_hours, 12)
        self.assertEqual(self.project.status, 'in-progress')

    def test_assign_default_deadline(self):
        self.client.post(f'/api/v1/projects/{self.project.id}/assign/', {'user_id': self.member.id}, format='json')
        self.project.refresh_from_db()
        self.assertEqual(self.project.deadline_hours, 8)

    def test_assign_rejects_non_team_user(self):
        outsider = TestDataFactory.create_user()
        response = self.client.post(f'/api/v1/projects/{self.project.id}/assign/', {'user_id': outsider.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_rejects_long_deadline(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/assign/', {
            'user_id': self.member.id, 'deadline_hours': 48
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_rejects_short_deadline(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/assign/', {
            'user_id': self.member.id, 'deadline_hours': 1
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_requires_admin(self):
        self.client.authenticate_user(self.member)
        response = self.client.post(f'/api/v1/projects/{self.project.id}/assign/', {'user_id': self.member.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_submission_by_assigned_member(self):
        self.project.assigned_team = self.member
        self.project.save()
        self.client.authenticate_user(self.member)
        upload = SimpleUploadedFile('build.zip', b'zip-bytes', content_type='application/zip')
        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post(f'/api/v1/projects/{self.project.id}/submissions/', {
                'submission_type': 'code', 'progress': 100, 'notes': 'Done', 'file': upload,
            }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['file_path'].startswith(f'documents/{self.member.id}/{self.project.id}/'))
        self.project.refresh_from_db()
        self.assertEqual(self.project.progress, 100)
        self.assertIsNotNone(self.project.submitted_at)
        self.assertEqual(self.project.submission_notes, 'Done')

    def test_partial_submission_clears_submitted_at(self):
        self.project.assigned_team = self.member
        self.project.save()
        self.client.authenticate_user(self.member)
        response = self.client.post(f'/api/v1/projects/{self.project.id}/submissions/', {
            'submission_type': 'design', 'progress': 40,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.project.refresh_from_db()
        self.assertEqual(self.project.progress, 40)
        self.assertIsNone(self.project.submitted_at)

    def test_notes_only_submission_keeps_progress(self):
        self.project.assigned_team = self.member
        self.project.save()
        self.client.authenticate_user(self.member)
        self.client.post(f'/api/v1/projects/{self.project.id}/submissions/', {
            'submission_type': 'code', 'progress': 100,
        }, format='json')
        self.project.refresh_from_db()
        submitted_at = self.project.submitted_at

        response = self.client.post(f'/api/v1/projects/{self.project.id}/submissions/', {
            'notes': 'Added deployment notes',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['progress'], 100)
        self.project.refresh_from_db()
        self.assertEqual(self.project.progress, 100)
        self.assertIsNotNone(self.project.submitted_at)
        self.assertGreaterEqual(self.project.submitted_at, submitted_at)
        self.assertEqual(self.project.submission_notes, 'Added deployment notes')

    def test_failed_submission_removes_stored_file(self):
        self.project.assigned_team = self.member
        self.project.save()
        self.client.authenticate_user(self.member)
        upload = SimpleUploadedFile('build.zip', b'zip-bytes', content_type='application/zip')
        with override_settings(MEDIA_ROOT=self.media_root), \
                patch.object(ProjectSubmissionSerializer, 'save', side_effect=DatabaseError('write failed')):
            response = self.client.post(f'/api/v1/projects/{self.project.id}/submissions/', {
                'submission_type': 'code', 'progress': 50, 'file': upload,
            }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual([name for _, _, files in os.walk(self.media_root) for name in files], [])
        self.project.refresh_from_db()
        self.assertEqual(self.project.progress, 0)

    def test_unassigned_member_cannot_submit(self):
        self.client.authenticate_user(self.member)
        response = self.client.post(f'/api/v1/projects/{self.project.id}/submissions/', {'progress': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(ProjectSubmission.objects.count(), 0)

    def test_my_projects(self):
        self.project.assigned_team = self.member
        self.project.save()
        self.client.authenticate_user(self.member)
        response = self.client.get('/api/v1/projects/mine/')
        self.assertEqual([row['id'] for row in response.data], [self.project.id])

    def test_overview_counts(self):
        TestDataFactory.create_project(created_by=self.admin, status='completed')
        response = self.client.get('/api/v1/projects/overview/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['total'], 2)
        self.assertEqual(response.data['counts']['completed'], 1)
        response = self.client.get('/api/v1/projects/overview/?status=completed')
        self.assertEqual(len(response.data['projects']), 1)


class TaskTests(TestCase):
    """Test kanban task endpoints"""

    def setUp(self):
        self.member = TestDataFactory.create_team_member()
        self.project = TestDataFactory.create_project(created_by=self.member)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.member)

    def test_create_task(self):
        response = self.client.post(f'/api/v1/projects/{self.project.id}/tasks/', {
            'title': 'Build login page', 'priority': 'high'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'todo')
        self.assertEqual(response.data['project'], self.project.id)

    def test_move_task(self):
        task = TestDataFactory.create_task(self.project, created_by=self.member)
        response = self.client.post(f'/api/v1/tasks/{task.id}/move/', {'status': 'in_progress'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        task.refresh_from_db()
        self.assertEqual(task.status, 'in_progress')

    def test_move_to_unknown_column(self):
        task = TestDataFactory.create_task(self.project, created_by=self.member)
        response = self.client.post(f'/api/v1/tasks/{task.id}/move/', {'status': 'archived'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filtered_by_status(self):
        TestDataFactory.create_task(self.project, status='done')
        TestDataFactory.create_task(self.project, status='todo')
        response = self.client.get(f'/api/v1/projects/{self.project.id}/tasks/?status=done')
        self.assertEqual(len(response.data), 1)

    def test_delete_task_requires_confirmation(self):
        task = TestDataFactory.create_task(self.project)
        response = self.client.delete(f'/api/v1/tasks/{task.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.delete(f'/api/v1/tasks/{task.id}/?confirm=true')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Task.objects.filter(pk=task.id).exists())


class ProposalTests(TestCase):
    """Test project proposals and their approval"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.member = TestDataFactory.create_team_member(department='developers')
        self.client = AuthenticatedAPIClient()

    def test_member_submits_proposal(self):
        self.client.authenticate_user(self.member)
        response = self.client.post('/api/v1/proposals/', {
            'title': 'Inventory App', 'department': 'developers', 'estimated_hours': 80,
            'estimated_budget': '4000.00', 'status': 'approved',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')

    def test_negative_budget_rejected(self):
        self.client.authenticate_user(self.member)
        response = self.client.post('/api/v1/proposals/', {
            'title': 'Bad budget', 'department': 'developers', 'estimated_budget': '-1.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_lists_pending_by_default(self):
        TestDataFactory.create_proposal(self.member)
        TestDataFactory.create_proposal(self.member, status='rejected')
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/proposals/')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/proposals/?status=all')
        self.assertEqual(len(response.data), 2)

    def test_member_sees_own_department(self):
        TestDataFactory.create_proposal(self.admin, department='developers')
        TestDataFactory.create_proposal(self.admin, department='advertising')
        self.client.authenticate_user(self.member)
        response = self.client.get('/api/v1/proposals/')
        self.assertEqual([row['department'] for row in response.data], ['developers'])

    def test_approve_creates_one_project(self):
        proposal = TestDataFactory.create_proposal(self.member, title='Booking Platform')
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/proposals/{proposal.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['project']['name'], 'Booking Platform')
        self.assertEqual(response.data['project']['status'], 'planning')

        response = self.client.post(f'/api/v1/proposals/{proposal.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Project.objects.filter(name='Booking Platform').count(), 1)
        proposal.refresh_from_db()
        self.assertEqual(proposal.status, 'approved')
        self.assertEqual(proposal.approved_by, self.admin)

    def test_reject_with_reason(self):
        proposal = TestDataFactory.create_proposal(self.member)
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/proposals/{proposal.id}/reject/', {'reason': 'Out of scope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        proposal.refresh_from_db()
        self.assertEqual(proposal.status, 'rejected')
        self.assertEqual(proposal.rejection_reason, 'Out of scope')
        self.assertIsNone(proposal.project)

    def test_member_cannot_approve(self):
        proposal = TestDataFactory.create_proposal(self.member)
        self.client.authenticate_user(self.member)
        response = self.client.post(f'/api/v1/proposals/{proposal.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(ProjectProposal.objects.get(pk=proposal.id).status, 'pending')
