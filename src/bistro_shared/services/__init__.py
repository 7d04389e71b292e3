"""
Domain services. Each service receives the :class:`~bistro_shared.db.Database`
(and, where it emits events, the realtime notifier) when it is constructed.
"""
