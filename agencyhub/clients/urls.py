from django.urls import path
from .views import client_list_create, client_detail, client_messages

urlpatterns = [
    path('clients/', client_list_create, name='client-list-create'),
    path('clients/<int:pk>/', client_detail, name='client-detail'),
    path('clients/<int:pk>/messages/', client_messages, name='client-messages'),
]
