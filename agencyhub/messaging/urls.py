from django.urls import path
from .views import message_list_create, unread_count, mark_read

urlpatterns = [
    path('messages/', message_list_create, name='message-list-create'),
    path('messages/unread-count/', unread_count, name='message-unread-count'),
    path('messages/mark-read/', mark_read, name='message-mark-read'),
]
