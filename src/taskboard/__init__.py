"""
Taskboard backend package.

Personal task lists served over a FastAPI JSON API, with a current-weather
panel backed by OpenWeatherMap. Build an application with
``taskboard.main.create_app`` or run one with ``python -m taskboard``.
"""

__version__ = "0.1.0"
