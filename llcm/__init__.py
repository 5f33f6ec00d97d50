"""
llcm - CloudWatch Logs lifecycle manager.

This package lists log groups across regions, previews the effect of a
retention policy and applies it, while staying under the service's
rate limits.
"""

__version__ = "0.1.0"
