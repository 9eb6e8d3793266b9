"""Infrastructure modules for the tracker notification service.

Centralized infrastructure components:
- configuration: Settings management (Settings, TrackerSettings, DispatchSettings)
- logging: Structured logging setup and dispatch context (configure_logging)
- notifications: Event canonicalization, enrichment, routing and providers
- operations: Operation results and error classification
- services: Application-scoped providers (get_settings, get_notification_service)
"""
