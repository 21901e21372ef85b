"""
URL configuration for the AgencyHub portal.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "AgencyHub Admin Panel"
admin.site.site_title = "AgencyHub Admin Portal"
admin.site.index_title = "Welcome to the AgencyHub Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('agencyhub.core.urls')),
    path('api/v1/', include('agencyhub.clients.urls')),
    path('api/v1/', include('agencyhub.projects.urls')),
    path('api/v1/', include('agencyhub.documents.urls')),
    path('api/v1/', include('agencyhub.finance.urls')),
    path('api/v1/', include('agencyhub.messaging.urls')),
    path('api/v1/', include('agencyhub.devhub.urls')),
    path('api/v1/', include('agencyhub.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
