"""
Memory Journal Backend — API Routes Package
=============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - groups.py:   /api/groups[...]                  (group CRUD, like, visibility)
    - posts.py:    /api/groups/{id}/posts, /api/posts/{id}[...]
    - comments.py: /api/posts/{id}/comments, /api/comments/{id}
    - images.py:   POST /api/image, GET /uploads/{filename}
    - badges.py:   POST /api/createOneYearBadge      (manual anniversary sweep)
    - health.py:   GET /health

Routes stay thin: extract request data, call a service, return its schema.
"""
