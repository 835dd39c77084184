"""Pagination utilities for API v1."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Page number pagination with client-controlled page size."""

    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 100


class SubmissionPagination(StandardResultsSetPagination):
    """Intern submission history is browsed in shorter pages."""

    page_size = 10
