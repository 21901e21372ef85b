from django.urls import path
from .views import github_sync, repository_list, repository_commits

urlpatterns = [
    path('devhub/sync/', github_sync, name='devhub-sync'),
    path('devhub/repositories/', repository_list, name='devhub-repository-list'),
    path('devhub/repositories/<int:pk>/commits/', repository_commits, name='devhub-repository-commits'),
]
