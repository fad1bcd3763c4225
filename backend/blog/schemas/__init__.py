# Schemas package init
"""
Blog Backend — Schemas Package
================================

Form inputs (post.py, user.py) and the shapes handed to views (view.py).
"""
