"""
FastAPI RESTful API for the Library Management System.

This module provides a REST API for:
- Author records (create, list, retrieve, update, delete)
- Book records referencing authors by id
- Paginated, sortable and searchable listings
- Consistent response envelopes and error messages
"""
