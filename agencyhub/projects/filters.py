import django_filters
from django.db.models import Q
from agencyhub.core.models import DEPARTMENT_CHOICES
from .models import Project, ProjectProposal


class ProjectFilter(django_filters.FilterSet):
    """Filter for Project list using django-filter"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.ChoiceFilter(choices=Project.STATUS_CHOICES)
    client = django_filters.NumberFilter(field_name='client_id', lookup_expr='exact')
    department = django_filters.ChoiceFilter(choices=DEPARTMENT_CHOICES)
    assigned_team = django_filters.NumberFilter(field_name='assigned_team_id', lookup_expr='exact')

    class Meta:
        model = Project
        fields = ['search', 'status', 'client', 'department', 'assigned_team']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(description__icontains=value) |
            Q(client__name__icontains=value)
        )


class ProposalFilter(django_filters.FilterSet):
    department = django_filters.ChoiceFilter(choices=DEPARTMENT_CHOICES)
    status = django_filters.ChoiceFilter(choices=ProjectProposal.STATUS_CHOICES)

    class Meta:
        model = ProjectProposal
        fields = ['department', 'status']
