"""
Test suite for the clients module
Tests: Client CRUD, visibility, delete confirmation, client messages
"""
from django.test import TestCase
from rest_framework import status

from agencyhub.clients.models import Client, ClientMessage
from agencyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ClientTests(TestCase):
    """Test client endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(roles=['client'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_client_shows_in_list(self):
        response = self.client.post('/api/v1/clients/', {
            'name': 'Acme Corp',
            'company': 'Acme',
            'email': 'hello@acme.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')

        response = self.client.get('/api/v1/clients/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], 'Acme Corp')

    def test_blank_name_rejected(self):
        response = self.client.post('/api/v1/clients/', {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_own_clients_visible(self):
        TestDataFactory.create_client(created_by=self.user, name='Mine')
        TestDataFactory.create_client(created_by=TestDataFactory.create_user(), name='Theirs')
        response = self.client.get('/api/v1/clients/')
        self.assertEqual([row['name'] for row in response.data], ['Mine'])

    def test_team_sees_every_client(self):
        TestDataFactory.create_client(created_by=self.user)
        TestDataFactory.create_client(created_by=TestDataFactory.create_user())
        self.client.authenticate_user(TestDataFactory.create_team_member())
        response = self.client.get('/api/v1/clients/')
        self.assertEqual(len(response.data), 2)

    def test_filter_by_status_and_search(self):
        TestDataFactory.create_client(created_by=self.user, name='Northwind', status='prospect')
        TestDataFactory.create_client(created_by=self.user, name='Contoso', status='active')
        response = self.client.get('/api/v1/clients/?status=prospect')
        self.assertEqual([row['name'] for row in response.data], ['Northwind'])
        response = self.client.get('/api/v1/clients/?search=conto')
        self.assertEqual([row['name'] for row in response.data], ['Contoso'])

    def test_update_client(self):
        created = TestDataFactory.create_client(created_by=self.user)
        response = self.client.patch(f'/api/v1/clients/{created.id}/', {'status': 'inactive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        created.refresh_from_db()
        self.assertEqual(created.status, 'inactive')

    def test_team_member_cannot_modify_others_client(self):
        created = TestDataFactory.create_client(created_by=self.user)
        self.client.authenticate_user(TestDataFactory.create_team_member())
        response = self.client.patch(f'/api/v1/clients/{created.id}/', {'notes': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_requires_confirmation(self):
        created = TestDataFactory.create_client(created_by=self.user)
        response = self.client.delete(f'/api/v1/clients/{created.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Client.objects.filter(pk=created.id).exists())

        response = self.client.delete(f'/api/v1/clients/{created.id}/?confirm=true')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Client.objects.filter(pk=created.id).exists())


class ClientMessageTests(TestCase):
    """Test the client message thread"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(roles=['client'])
        self.record = TestDataFactory.create_client(created_by=self.owner)
        self.client = AuthenticatedAPIClient()

    def test_client_and_admin_reply(self):
        self.client.authenticate_user(self.owner)
        response = self.client.post(f'/api/v1/clients/{self.record.id}/messages/', {'message': 'When is the launch?'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['is_admin_reply'])

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.post(f'/api/v1/clients/{self.record.id}/messages/', {'message': 'Next Friday'}, format='json')
        self.assertTrue(response.data['is_admin_reply'])

        response = self.client.get(f'/api/v1/clients/{self.record.id}/messages/')
        self.assertEqual([row['message'] for row in response.data], ['When is the launch?', 'Next Friday'])

    def test_blank_message_rejected(self):
        self.client.authenticate_user(self.owner)
        response = self.client.post(f'/api/v1/clients/{self.record.id}/messages/', {'message': ' '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ClientMessage.objects.count(), 0)

    def test_stranger_cannot_read_thread(self):
        self.client.authenticate_user(TestDataFactory.create_user(roles=['client']))
        response = self.client.get(f'/api/v1/clients/{self.record.id}/messages/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
