"""
Dashboard and analytics aggregates.
Results are cached through cached_query and drop out of the cache as soon as
any tracked row changes.
"""
from datetime import date, datetime, time

from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone

from agencyhub.core.cache_utils import cached_query, DASHBOARD_CACHE_TTL, ANALYTICS_CACHE_TTL
from agencyhub.core.models import User, Profile, DEPARTMENT_LABELS
from agencyhub.clients.models import Client
from agencyhub.projects.models import Project, Task, ProjectProposal
from agencyhub.documents.models import Document, Design
from agencyhub.finance.models import ExpenseRequest

MONTHS_OF_ACTIVITY = 6


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix='dashboard_counters')
def get_dashboard_counters():
    project_counts = Project.objects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status='in-progress')),
    )
    task_counts = Task.objects.aggregate(
        total=Count('id'),
        completed=Count('id', filter=Q(status='done')),
    )
    return {
        'clients': Client.objects.count(),
        'projects': project_counts['total'],
        'active_projects': project_counts['active'],
        'tasks': task_counts['total'],
        'completed_tasks': task_counts['completed'],
        'documents': Document.objects.count(),
        'designs': Design.objects.count(),
        'pending_proposals': ProjectProposal.objects.filter(status='pending').count(),
        'pending_expense_requests': ExpenseRequest.objects.filter(status='pending').count(),
    }


def month_starts(today, months=MONTHS_OF_ACTIVITY):
    """First day of each of the last `months` months, oldest first, current month last"""
    starts = []
    year, month = today.year, today.month
    for _ in range(months):
        starts.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


def _counts_by_month(queryset, since):
    rows = queryset.filter(created_at__gte=since).annotate(
        month=TruncMonth('created_at')
    ).values('month').annotate(count=Count('id'))
    counts = {}
    for row in rows:
        month = row['month']
        if isinstance(month, datetime):
            month = timezone.localtime(month).date() if timezone.is_aware(month) else month.date()
        counts[(month.year, month.month)] = row['count']
    return counts


def monthly_activity(today=None):
    """Projects, clients and tasks created per month over the last six months"""
    today = today or timezone.localdate()
    starts = month_starts(today)
    since = timezone.make_aware(datetime.combine(starts[0], time.min))

    projects = _counts_by_month(Project.objects.all(), since)
    clients = _counts_by_month(Client.objects.all(), since)
    tasks = _counts_by_month(Task.objects.all(), since)

    activity = []
    for start in starts:
        key = (start.year, start.month)
        activity.append({
            'month': start.strftime('%b'),
            'year': start.year,
            'projects': projects.get(key, 0),
            'clients': clients.get(key, 0),
            'tasks': tasks.get(key, 0),
        })
    return activity


def team_performance():
    """Completed and pending tasks per user, users without tasks left out"""
    users = User.objects.annotate(
        completed=Count('assigned_tasks', filter=Q(assigned_tasks__status='done')),
        pending=Count('assigned_tasks', filter=~Q(assigned_tasks__status='done')),
    ).filter(Q(completed__gt=0) | Q(pending__gt=0)).select_related('profile').order_by('username')
    return [
        {'name': user.display_name, 'completed': user.completed, 'pending': user.pending}
        for user in users
    ]


@cached_query(cache_ttl=ANALYTICS_CACHE_TTL, key_prefix='analytics')
def get_analytics():
    projects_by_status = [
        {'name': row['status'], 'value': row['count']}
        for row in Project.objects.values('status').annotate(count=Count('id')).order_by('status')
    ]
    tasks_by_priority = [
        {'name': row['priority'], 'value': row['count']}
        for row in Task.objects.values('priority').annotate(count=Count('id')).order_by('priority')
    ]
    return {
        'projects_by_status': projects_by_status,
        'tasks_by_priority': tasks_by_priority,
        'monthly_activity': monthly_activity(),
        'team_performance': team_performance(),
        'totals': {
            'projects': Project.objects.count(),
            'tasks': Task.objects.count(),
            'completed_tasks': Task.objects.filter(status='done').count(),
            'clients': Client.objects.count(),
        },
    }


EXPORTABLE_DATASETS = ['projects_by_status', 'tasks_by_priority', 'monthly_activity', 'team_performance']


def department_stats(department):
    """Headline numbers for one department's dashboard"""
    projects = Project.objects.filter(department=department)
    project_counts = projects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status='in-progress')),
        completed=Count('id', filter=Q(status='completed')),
    )
    return {
        'department': department,
        'department_display': DEPARTMENT_LABELS.get(department, department),
        'projects': project_counts,
        'pending_proposals': ProjectProposal.objects.filter(department=department, status='pending').count(),
        'members': Profile.objects.filter(department=department).count(),
        'documents': Document.objects.filter(created_by__profile__department=department).count(),
    }
