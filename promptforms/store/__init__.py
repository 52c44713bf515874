"""Relational store for forms, fields, resources and attachments.

- db: connection handling (SQLite or PostgreSQL) and schema creation
- form_store: forms with their fields and resource attachments
- resource_store: global reference resources
"""
