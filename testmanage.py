#!/usr/bin/env python
"""manage.py for the test project.

Examples:
    ./testmanage.py makemigrations course_catalog
    ./testmanage.py ask_course_assistant "Which courses are free?" --stream
"""

import argparse
import os
import sys
import warnings

from django.core.management import execute_from_command_line

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "testapp.settings")
sys.path.append("tests")


def run():
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--show-deprecations", action="store_true")
    args, rest = parser.parse_known_args()

    if args.show_deprecations:
        warnings.simplefilter("default", DeprecationWarning)
        warnings.simplefilter("default", PendingDeprecationWarning)

    execute_from_command_line([sys.argv[0], *rest])


if __name__ == "__main__":
    run()
