"""
Test suite for the messaging module
Tests: Department chat, Attachments, Unread count, Mark read
"""
import os
import shutil
import tempfile
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework import status

from agencyhub.core.models import ChangeEvent
from agencyhub.core.realtime import latest_cursor
from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agencyhub.messaging.models import DepartmentMessage


class DepartmentChatTests(TestCase):
    """Test sending and listing department messages"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.dev = TestDataFactory.create_team_member(department='developers')
        self.designer = TestDataFactory.create_team_member(department='graphic_design')
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.dev)

    def tearDown(self):
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_send_message(self):
        response = self.client.post('/api/v1/messages/', {
            'recipient_department': 'graphic_design', 'message': 'Need the new logo',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sender_department'], 'developers')
        self.assertFalse(response.data['read'])

    def test_admin_recipient_maps_to_management(self):
        response = self.client.post('/api/v1/messages/', {
            'recipient_department': 'admin', 'message': 'Status update',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['recipient_department'], 'management')

    def test_admin_sends_from_management(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/messages/', {
            'recipient_department': 'developers', 'message': 'Ship it',
        }, format='json')
        self.assertEqual(response.data['sender_department'], 'management')

    def test_blank_message_rejected(self):
        response = self.client.post('/api/v1/messages/', {
            'recipient_department': 'graphic_design', 'message': '   ',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_user_without_department(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/messages/', {
            'recipient_department': 'developers', 'message': 'Hello',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/messages/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_history_in_ascending_order(self):
        first = TestDataFactory.create_message(self.designer, 'graphic_design', 'developers', message='first')
        second = TestDataFactory.create_message(self.dev, 'developers', 'graphic_design', message='second')
        TestDataFactory.create_message(self.admin, 'management', 'financial', message='unrelated')
        response = self.client.get('/api/v1/messages/')
        self.assertEqual([row['id'] for row in response.data], [first.id, second.id])

    def test_history_limited_to_50(self):
        for i in range(60):
            TestDataFactory.create_message(self.designer, 'graphic_design', 'developers', message=f'm{i}')
        response = self.client.get('/api/v1/messages/')
        self.assertEqual(len(response.data), 50)
        self.assertEqual(response.data[-1]['message'], 'm59')

    def test_send_with_attachment(self):
        upload = SimpleUploadedFile('brief.txt', b'details', content_type='text/plain')
        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post('/api/v1/messages/', {
                'recipient_department': 'graphic_design', 'message': 'See attached', 'attachment': upload,
            }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['attachment_name'], 'brief.txt')
        self.assertTrue(response.data['attachment_path'].startswith(f'chat-attachments/{self.dev.id}/'))

    def test_failed_save_removes_attachment(self):
        upload = SimpleUploadedFile('brief.txt', b'details', content_type='text/plain')
        with override_settings(MEDIA_ROOT=self.media_root), \
                patch.object(DepartmentMessage.objects, 'create', side_effect=DatabaseError('write failed')):
            response = self.client.post('/api/v1/messages/', {
                'recipient_department': 'graphic_design', 'message': 'See attached', 'attachment': upload,
            }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual([name for _, _, files in os.walk(self.media_root) for name in files], [])

    @patch('agencyhub.messaging.serializers.CHAT_ATTACHMENT_MAX_BYTES', 16)
    def test_oversized_attachment_rejected_before_storage(self):
        upload = SimpleUploadedFile('big.bin', b'x' * 17, content_type='application/octet-stream')
        with patch('agencyhub.messaging.views.upload_to_bucket') as upload_mock:
            response = self.client.post('/api/v1/messages/', {
                'recipient_department': 'graphic_design', 'message': 'Too big', 'attachment': upload,
            }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('attachment', response.data)
        upload_mock.assert_not_called()
        self.assertFalse(DepartmentMessage.objects.exists())


class UnreadTests(TestCase):
    """Test unread counts and marking messages read"""

    def setUp(self):
        self.dev = TestDataFactory.create_team_member(department='developers')
        self.designer = TestDataFactory.create_team_member(department='graphic_design')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.dev)

    def test_unread_flow(self):
        TestDataFactory.create_message(self.designer, 'graphic_design', 'developers')
        TestDataFactory.create_message(self.designer, 'graphic_design', 'developers')
        TestDataFactory.create_message(self.designer, 'graphic_design', 'financial')
        TestDataFactory.create_message(self.dev, 'developers', 'developers')

        response = self.client.get('/api/v1/messages/unread-count/')
        self.assertEqual(response.data['unread'], 2)

        cursor = latest_cursor()
        response = self.client.post('/api/v1/messages/mark-read/')
        self.assertEqual(response.data['marked_read'], 2)
        self.assertTrue(ChangeEvent.objects.filter(id__gt=cursor, table='department_messages', event='UPDATE').exists())

        response = self.client.get('/api/v1/messages/unread-count/')
        self.assertEqual(response.data['unread'], 0)

    def test_mark_read_with_nothing_unread(self):
        cursor = latest_cursor()
        response = self.client.post('/api/v1/messages/mark-read/')
        self.assertEqual(response.data['marked_read'], 0)
        self.assertFalse(ChangeEvent.objects.filter(id__gt=cursor).exists())
