"""Infrastructure modules for the identity broker.

Centralized infrastructure components:
- configuration: Settings management (Settings)
- logging: Structured logging (get_module_logger, bind_request_context)
- operations: Operation results and error classification
- clients: AWS clients (Cognito Identity, Cognito Sync, SES)
- services: Application-scoped providers (get_settings, get_aws_clients)
"""
