"""
Postboard Backend — API Routes Package
========================================

Route Inventory:
    - users.py:   POST   /api/users                             (register)
    - auth.py:    POST   /api/auth                              (log in)
                  GET    /api/auth                              (current user)
    - posts.py:   GET    /api/posts, POST /api/posts
                  GET    /api/posts/{id}, DELETE /api/posts/{id}
                  PUT    /api/posts/like/{id}, /api/posts/unlike/{id}
                  POST   /api/posts/comment/{id}
                  DELETE /api/posts/comment/{id}/{comment_id}
    - health.py:  GET    /health

Routes stay thin: extract input, call a service, shape the response.
"""
