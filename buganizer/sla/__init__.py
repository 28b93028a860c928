"""
SLA Module
==========

Bounded context for issue resolution targets.

Responsibilities:
- Calculate resolution targets from priority and severity
- Report issues at risk of missing, or already past, their due date
- Compute SLA compliance by priority and severity
- Hot-reload the SLA tables from YAML
- Notify Slack when an issue enters the risk window or breaches
"""

__version__ = "1.0.0"
