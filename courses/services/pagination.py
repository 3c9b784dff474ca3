from django.conf import settings
from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class CustomPagination(PageNumberPagination):
    page_size = getattr(settings, 'DEFAULT_PAGE_SIZE', 9)
    page_size_query_param = 'page_size'
    max_page_size = getattr(settings, 'MAX_PAGE_SIZE', 100)


def _read_int(params, key, default):
    try:
        return int(params.get(key, default))
    except (ValueError, TypeError):
        return default


def paginate_queryset_or_list(request, queryset_or_list, serializer_class=None, serializer_kwargs=None, message="Records retrieved successfully."):
    """
    Paginate a queryset or list for function-based endpoints.

    Returns a Response in the standard envelope extended with paging info:
    {
        "success": True,
        "data": [...],
        "message": "...",
        "count": total_count,
        "next": next_page_url or None,
        "previous": previous_page_url or None,
        "page_size": page_size,
        "current_page": current_page,
        "total_pages": total_pages
    }
    """
    default_page_size = getattr(settings, 'DEFAULT_PAGE_SIZE', 9)
    max_page_size = getattr(settings, 'MAX_PAGE_SIZE', 100)

    page_number = _read_int(request.query_params, 'page', 1)
    page_size = min(max(_read_int(request.query_params, 'page_size', default_page_size), 1), max_page_size)

    paginator = Paginator(queryset_or_list, page_size)
    try:
        page = paginator.page(page_number)
    except PageNotAnInteger:
        page = paginator.page(1)
    except EmptyPage:
        page = paginator.page(paginator.num_pages)

    if serializer_class:
        serializer_kwargs = serializer_kwargs or {}
        data = serializer_class(page.object_list, many=True, **serializer_kwargs).data
    else:
        data = list(page.object_list)

    base_url = request.build_absolute_uri().split('?')[0]
    query_params = request.query_params.copy()

    next_url = None
    if page.has_next():
        query_params['page'] = page.next_page_number()
        next_url = f"{base_url}?{query_params.urlencode()}"

    previous_url = None
    if page.has_previous():
        query_params['page'] = page.previous_page_number()
        previous_url = f"{base_url}?{query_params.urlencode()}"

    return Response({
        "success": True,
        "data": data,
        "message": message,
        "count": paginator.count,
        "next": next_url,
        "previous": previous_url,
        "page_size": page_size,
        "current_page": page.number,
        "total_pages": paginator.num_pages
    })
