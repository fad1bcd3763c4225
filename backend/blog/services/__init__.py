# Services package init
"""
Blog Backend — Services Layer
===============================

Service Inventory:
    - Auth (auth.py): current user, login gate, ownership gate
    - UserService: registration, credential checks, user lookup
    - PostService: post validation and CRUD

Services receive the request's AsyncSession on every call and hold no
per-request state, so each is a module-level singleton.
"""
