"""
Pagination for the trips API list endpoints.
"""

from rest_framework.pagination import PageNumberPagination


class TripPagination(PageNumberPagination):
    """Page number pagination driven by ``page`` and ``limit`` query parameters."""

    page_size_query_param = 'limit'
    max_page_size = 100
