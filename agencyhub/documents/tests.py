"""
Test suite for the documents module
Tests: Storage buckets, Documents, Designs/thumbnails, Department documents, Records, Advertising assets
"""
import io
import os
import shutil
import tempfile
from unittest.mock import patch

from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status

from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agencyhub.documents import storage
from agencyhub.documents.models import Document, Design, AdvertisingAsset
from agencyhub.documents.serializers import DocumentSerializer, DesignSerializer


def png_upload(name='mockup.png', size=(800, 600)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color=(30, 120, 200)).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


def stored_files(root):
    return [name for _, _, files in os.walk(root) for name in files]


class MediaRootTestCase(TestCase):
    """Runs every test against a throwaway MEDIA_ROOT"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.media_override = override_settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)


class StorageTests(MediaRootTestCase):
    """Test bucket path layout and helpers"""

    def test_object_path_layout(self):
        path = storage.build_object_path(storage.DOCUMENTS_BUCKET, 7, 'Report.PDF', timestamp_ms=1700000000000)
        self.assertEqual(path, 'documents/7/1700000000000.pdf')
        path = storage.build_object_path(storage.DOCUMENTS_BUCKET, 7, 'notes', sub='12', timestamp_ms=1)
        self.assertEqual(path, 'documents/7/12/1.bin')

    def test_unknown_bucket(self):
        with self.assertRaises(ValueError):
            storage.build_object_path('secrets', 1, 'a.txt')

    def test_detect_asset_type(self):
        self.assertEqual(storage.detect_asset_type(png_upload()), 'image')
        video = SimpleUploadedFile('clip.mp4', b'0000', content_type='video/mp4')
        self.assertEqual(storage.detect_asset_type(video), 'video')
        pdf = SimpleUploadedFile('brief.pdf', b'%PDF', content_type='application/pdf')
        self.assertIsNone(storage.detect_asset_type(pdf))

    def test_thumbnail_fits_bounds(self):
        stored = storage.upload_to_bucket(storage.DESIGNS_BUCKET, 3, png_upload(size=(1200, 600)))
        thumb_path = storage.create_thumbnail(stored['file_path'], 3)
        self.assertTrue(thumb_path.startswith('designs/3/thumbnails/'))
        with default_storage.open(thumb_path, 'rb') as fh:
            with Image.open(fh) as thumb:
                self.assertEqual(thumb.size, (400, 200))

    def test_thumbnail_of_non_image(self):
        stored = storage.upload_to_bucket(
            storage.DESIGNS_BUCKET, 3, SimpleUploadedFile('x.png', b'not an image', content_type='image/png')
        )
        self.assertIsNone(storage.create_thumbnail(stored['file_path'], 3))

    def test_remove_missing_object(self):
        self.assertFalse(storage.remove_object('documents/1/missing.txt'))
        self.assertFalse(storage.remove_object(None))


class DocumentTests(MediaRootTestCase):
    """Test document endpoints"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user(roles=['client'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_without_file(self):
        response = self.client.post('/api/v1/documents/', {'title': 'Scope', 'content': 'Draft'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['file_path'])

    def test_upload_and_download(self):
        upload = SimpleUploadedFile('contract.txt', b'signed', content_type='text/plain')
        response = self.client.post('/api/v1/documents/', {'title': 'Contract', 'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['file_path'].startswith(f'documents/{self.user.id}/'))
        self.assertEqual(response.data['file_size'], 6)

        response = self.client.get(f"/api/v1/documents/{response.data['id']}/download/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(b''.join(response.streaming_content), b'signed')

    def test_download_without_file(self):
        document = TestDataFactory.create_document(created_by=self.user)
        response = self.client.get(f'/api/v1/documents/{document.id}/download/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_removes_stored_file(self):
        upload = SimpleUploadedFile('old.txt', b'old', content_type='text/plain')
        response = self.client.post('/api/v1/documents/', {'title': 'Old', 'file': upload}, format='multipart')
        path = response.data['file_path']
        self.assertTrue(default_storage.exists(path))

        response = self.client.delete(f"/api/v1/documents/{response.data['id']}/?confirm=true")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(default_storage.exists(path))

    def test_failed_save_removes_stored_file(self):
        upload = SimpleUploadedFile('contract.txt', b'signed', content_type='text/plain')
        with patch.object(DocumentSerializer, 'save', side_effect=DatabaseError('write failed')):
            response = self.client.post('/api/v1/documents/', {'title': 'Contract', 'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(stored_files(self.media_root), [])
        self.assertFalse(Document.objects.exists())

    def test_other_users_documents_hidden(self):
        TestDataFactory.create_document(created_by=TestDataFactory.create_user())
        response = self.client.get('/api/v1/documents/')
        self.assertEqual(response.data, [])


class DesignTests(MediaRootTestCase):
    """Test design uploads"""

    def setUp(self):
        super().setUp()
        self.designer = TestDataFactory.create_team_member(department='graphic_design')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.designer)

    def test_upload_image_creates_thumbnail(self):
        response = self.client.post('/api/v1/designs/', {
            'title': 'Homepage mockup', 'file': png_upload(), 'tags': ['web', 'homepage'],
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['tags'], ['web', 'homepage'])
        self.assertTrue(response.data['thumbnail_path'].startswith(f'designs/{self.designer.id}/thumbnails/'))
        self.assertIsNotNone(response.data['thumbnail_url'])

    def test_upload_requires_file(self):
        response = self.client.post('/api/v1/designs/', {'title': 'No file'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Design.objects.count(), 0)

    def test_non_image_has_no_thumbnail(self):
        upload = SimpleUploadedFile('brand.pdf', b'%PDF-1.4', content_type='application/pdf')
        response = self.client.post('/api/v1/designs/', {'title': 'Brand guide', 'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['thumbnail_path'])

    def test_failed_save_removes_file_and_thumbnail(self):
        with patch.object(DesignSerializer, 'save', side_effect=DatabaseError('write failed')):
            response = self.client.post('/api/v1/designs/', {'title': 'Mockup', 'file': png_upload()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(stored_files(self.media_root), [])

    def test_filter_by_tag(self):
        Design.objects.create(title='A', file_path='designs/1/a.png', file_name='a.png', tags=['logo'],
                              created_by=self.designer)
        Design.objects.create(title='B', file_path='designs/1/b.png', file_name='b.png', tags=['web'],
                              created_by=self.designer)
        response = self.client.get('/api/v1/designs/?tag=logo')
        self.assertEqual([row['title'] for row in response.data], ['A'])


class DepartmentDocumentTests(TestCase):
    """Test department document listing and records management"""

    def setUp(self):
        self.dev = TestDataFactory.create_team_member(department='developers')
        self.records = TestDataFactory.create_team_member(department='records_management')
        self.client = AuthenticatedAPIClient()

    def test_department_documents(self):
        TestDataFactory.create_document(created_by=self.dev, title='API notes')
        TestDataFactory.create_document(created_by=self.records, title='Archive index')
        self.client.authenticate_user(self.dev)
        response = self.client.get('/api/v1/departments/developers/documents/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['title'] for row in response.data], ['API notes'])

    def test_other_department_forbidden(self):
        self.client.authenticate_user(self.dev)
        response = self.client.get('/api/v1/departments/financial/documents/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_department(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/departments/sales/documents/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_records_lists_documents_and_designs(self):
        TestDataFactory.create_document(created_by=self.dev)
        Design.objects.create(title='Logo', file_path='designs/1/logo.png', file_name='logo.png', created_by=self.dev)
        self.client.authenticate_user(self.records)
        response = self.client.get('/api/v1/records/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(row['kind'] for row in response.data), ['design', 'document'])
        response = self.client.get('/api/v1/records/?kind=design')
        self.assertEqual(len(response.data), 1)

    def test_records_forbidden_for_other_departments(self):
        self.client.authenticate_user(self.dev)
        response = self.client.get('/api/v1/records/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AdvertisingAssetTests(MediaRootTestCase):
    """Test advertising asset uploads"""

    def setUp(self):
        super().setUp()
        self.marketer = TestDataFactory.create_team_member(department='advertising')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.marketer)

    def test_upload_image_asset(self):
        response = self.client.post('/api/v1/advertising/assets/', {
            'title': 'Billboard', 'file': png_upload(), 'coverage': 'Downtown', 'expense_amount': '300.00',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['asset_type'], 'image')
        self.assertEqual(response.data['status'], 'published')

    def test_reject_non_media_upload(self):
        upload = SimpleUploadedFile('plan.pdf', b'%PDF', content_type='application/pdf')
        response = self.client.post('/api/v1/advertising/assets/', {'title': 'Plan', 'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(AdvertisingAsset.objects.count(), 0)

    def test_other_departments_cannot_upload(self):
        self.client.authenticate_user(TestDataFactory.create_team_member(department='developers'))
        response = self.client.post('/api/v1/advertising/assets/', {'title': 'X', 'file': png_upload()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_requires_confirmation(self):
        response = self.client.post('/api/v1/advertising/assets/', {'title': 'Flyer', 'file': png_upload()}, format='multipart')
        asset_id = response.data['id']
        response = self.client.delete(f'/api/v1/advertising/assets/{asset_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.delete(f'/api/v1/advertising/assets/{asset_id}/?confirm=true')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Document.objects.exists())
        self.assertFalse(AdvertisingAsset.objects.filter(pk=asset_id).exists())
