from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class ReviewPagination(PageNumberPagination):
    """
    Review pages carry the aggregate statistics of the whole filtered set.

    The view stores them in ``request.parser_context['statistics']``.
    """
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100
    page_query_param = 'page'

    def get_paginated_response(self, data):
        statistics = self.request.parser_context.get('statistics', {})

        return Response({
            'count': self.page.paginator.count,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'statistics': statistics,
            'results': data,
        })
