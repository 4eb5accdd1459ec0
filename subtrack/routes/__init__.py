# Routes package init
"""
SubTrack Backend: API Routes Package
====================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles a specific resource.

Route Inventory:
    - subscriptions.py:  POST   /subscription
                         GET    /subscription/{id}
                         PATCH  /subscription/{id}
                         DELETE /subscription/{id}
                         GET    /subscriptions
                         GET    /subscriptions/total-cost
    - health.py:         GET    /health

Design Principle:
    Routes are THIN. They decode the request, call the validation rules and
    the service, and wrap the result in the status envelope. Business logic
    belongs in services, not routes.
"""
