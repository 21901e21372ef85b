from django.urls import path
from .views import dashboard, analytics, analytics_export, department_dashboard

urlpatterns = [
    path('dashboard/', dashboard, name='dashboard'),
    path('analytics/', analytics, name='analytics'),
    path('analytics/export/', analytics_export, name='analytics-export'),
    path('departments/<str:department>/dashboard/', department_dashboard, name='department-dashboard'),
]
