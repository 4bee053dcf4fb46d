"""Gantry CLI.

Commands:
- fetch: pull a GitHub project, schedule it, write the JSON artifacts
- schedule: schedule a local raw-project export
- deps: show dependencies found in issue text
- estimate: convert story points into a duration and end date
"""

from gantry.cli.main import app, main

__all__ = ["app", "main"]
