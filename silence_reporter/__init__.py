"""
Alertmanager Silences Slack Reporter

Fetches the current silences from Prometheus Alertmanager and posts a digest
to a Slack channel. Intended to be run once per invocation from cron, CI or a
container scheduler.
"""

__version__ = "1.0.0"
