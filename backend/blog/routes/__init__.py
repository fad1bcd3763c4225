# Routes package init
"""
Blog Backend — Routes Package
===============================

Route Inventory:
    - posts.py:     /, /posts and /posts/{id}[/edit]  (listing, detail, author CRUD)
    - users.py:     /users/new, /users                (registration)
    - sessions.py:  /login                            (login)
    - health.py:    /health                           (service health check)

Routes stay thin: they pull form input and gates in through dependencies,
call a service, and either render a view or redirect.
"""
