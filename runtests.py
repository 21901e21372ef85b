#!/usr/bin/env python
"""
Test runner script for the full portal test suite
Usage: python runtests.py [app labels...]
"""
import os
import sys
import django
from django.conf import settings
from django.test.utils import get_runner

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'agencyhub.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests(sys.argv[1:] or [
        'agencyhub.core',
        'agencyhub.clients',
        'agencyhub.projects',
        'agencyhub.documents',
        'agencyhub.finance',
        'agencyhub.messaging',
        'agencyhub.devhub',
        'agencyhub.reports',
    ])
    sys.exit(bool(failures))
