#!/usr/bin/env python
"""papervault Django 관리 명령 (migrate, shell 등)."""
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent


def main():
    # apps/ libs/ papervault/ 를 import 경로에
    if str(ROOT) not in sys.path:
        sys.path.insert(0, str(ROOT))

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "apps.api.config.settings.dev")

    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
