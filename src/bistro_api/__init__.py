"""
Bistro REST API (Flask).
"""
