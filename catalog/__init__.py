"""
Local Library catalog web application.

This package provides a server-rendered catalog for:
- Authors, genres and books
- Book instances (physical copies) and their loan status
- Form validation and referential checks before deletion
"""
