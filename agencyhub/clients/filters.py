import django_filters
from django.db.models import Q
from .models import Client


class ClientFilter(django_filters.FilterSet):
    """Filter for Client list using django-filter"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.ChoiceFilter(choices=Client.STATUS_CHOICES)

    class Meta:
        model = Client
        fields = ['search', 'status']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(company__icontains=value) |
            Q(email__icontains=value) |
            Q(phone__icontains=value)
        )
