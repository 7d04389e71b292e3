"""
Domain layer shared by the Bistro services: configuration, persistence,
models, validation and the service classes.
"""
