"""Workforce management backend: users, teams, boards, tasks and notifications"""

__version__ = "1.0.0"
