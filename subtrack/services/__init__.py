# Services package init
"""
SubTrack Backend: Services Layer
================================

What:  Business logic layer sitting between routes (HTTP) and storage (persistence).
Why:   Routes handle HTTP, services handle business rules.

Service Inventory:
    - validation: Ordered request rules producing SubscriptionSpec,
                  SubscriptionUpdate and CostFilter
    - SubscriptionService: CRUD orchestration and total-cost aggregation
"""
