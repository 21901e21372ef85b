from django.urls import path
from .views import (
    project_list_create, project_detail, project_assign, project_submissions,
    project_overview, my_projects, client_portal,
    task_list_create, task_detail, task_move,
    proposal_list_create, proposal_approve, proposal_reject,
)

urlpatterns = [
    path('projects/', project_list_create, name='project-list-create'),
    path('projects/overview/', project_overview, name='project-overview'),
    path('projects/mine/', my_projects, name='my-projects'),
    path('projects/<int:pk>/', project_detail, name='project-detail'),
    path('projects/<int:pk>/assign/', project_assign, name='project-assign'),
    path('projects/<int:pk>/submissions/', project_submissions, name='project-submissions'),
    path('projects/<int:project_pk>/tasks/', task_list_create, name='task-list-create'),
    path('tasks/<int:pk>/', task_detail, name='task-detail'),
    path('tasks/<int:pk>/move/', task_move, name='task-move'),
    path('client-portal/', client_portal, name='client-portal'),
    path('proposals/', proposal_list_create, name='proposal-list-create'),
    path('proposals/<int:pk>/approve/', proposal_approve, name='proposal-approve'),
    path('proposals/<int:pk>/reject/', proposal_reject, name='proposal-reject'),
]
