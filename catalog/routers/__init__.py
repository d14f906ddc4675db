"""
Route modules, one per catalog resource.

- home: site root and catalog home page
- authors, genres, books, bookinstances: list, detail, create, update and delete
"""
