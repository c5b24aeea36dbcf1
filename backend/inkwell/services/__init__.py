"""
Inkwell Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - PostService:   list/search, read, create, update, delete posts
    - UserService:   read, update (email uniqueness), delete (cascade), upsert
    - authorization: acting-identity resolution and ownership checks

Services receive the AsyncSession as an argument and never create engines,
so they run unchanged under the API, the seed command and the tests.
"""
