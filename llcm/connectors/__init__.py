"""
Connectors package for llcm.

Provides the CloudWatch Logs capability interface, its boto3
implementation, the client factory and the throttling retry policy.
"""
