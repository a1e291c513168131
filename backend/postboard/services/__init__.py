"""
Postboard Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - TokenService:  signs/verifies session tokens (one instance per app)
    - UserDirectory: registration, credential checks, user lookup
    - PostStore:     posts and their embedded likes/comments

UserDirectory and PostStore are stateless singletons; the caller passes the
request's AsyncSession into every method.
"""
