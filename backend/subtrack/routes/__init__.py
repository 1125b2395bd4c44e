# Routes package init
"""
SubTrack Backend — API Routes Package
======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - subscriptions.py:  /api/subscriptions ...   (list, add, edit, delete, form helpers)
    - dashboard.py:      GET /api/dashboard       (next due, spending, reminders)
                         GET /api/me              (account information)
    - health.py:         GET /health              (service health check)

Routes stay thin: they resolve the user, the session and today's date,
call a service, and set response headers. Business rules live in services.
"""
