# trackvault/common/api/pagination.py
from __future__ import annotations

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    """
    ?page=N&page_size=M. Mobile list screens ask for larger pages than the
    default, capped at max_page_size.
    """
    page_size = settings.REST_FRAMEWORK.get("PAGE_SIZE") or 20
    page_size_query_param = "page_size"
    max_page_size = 200


def paginate(request, items, serializer_class, *, paginator_class=DefaultPagination) -> Response:
    """
    Paginated list response: {count, next, previous, results}.
    `items` may be a QuerySet or a plain list.
    """
    paginator = paginator_class()
    page = paginator.paginate_queryset(items, request)
    if page is None:
        return Response(serializer_class(items, many=True).data)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)
