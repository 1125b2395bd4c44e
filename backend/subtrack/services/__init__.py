# Services package init
"""
SubTrack Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take the session, the current user's id and today's date,
       apply the billing rules, and return response schemas.

Service Inventory:
    - billing:               Pure money and calendar arithmetic (no I/O)
    - SubscriptionService:   Add, edit, delete, list, preview, form options
    - DashboardService:      Next due, monthly/yearly spending, reminders
"""
