"""
Memory Journal Backend — Services Layer
=========================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - EngagementService: counters and badge awards (the only writer of either)
    - GroupService / PostService / CommentService: resource workflows
    - FileService / ImageService: upload validation, storage, records
    - AnniversaryScheduler: daily one-year badge sweep
    - access: shared-secret checks used by every protected mutation

Every service is a stateless singleton; the request session is passed in.
"""
