from django.urls import path
from .views import (
    document_list_create, document_detail, document_download,
    design_list_create, design_detail,
    department_documents, records_list,
    advertising_asset_list_create, advertising_asset_detail,
)

urlpatterns = [
    path('documents/', document_list_create, name='document-list-create'),
    path('documents/<int:pk>/', document_detail, name='document-detail'),
    path('documents/<int:pk>/download/', document_download, name='document-download'),
    path('designs/', design_list_create, name='design-list-create'),
    path('designs/<int:pk>/', design_detail, name='design-detail'),
    path('departments/<str:department>/documents/', department_documents, name='department-documents'),
    path('records/', records_list, name='records-list'),
    path('advertising/assets/', advertising_asset_list_create, name='advertising-asset-list-create'),
    path('advertising/assets/<int:pk>/', advertising_asset_detail, name='advertising-asset-detail'),
]
