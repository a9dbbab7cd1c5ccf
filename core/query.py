"""
Search, filter, sort and paginate helpers shared by every listing endpoint.

Query string conventions:
    q=<keyword>               case-insensitive search across the view's search fields
    minPrice / maxPrice       range on the view's price field
    minRating / maxRating     range on the view's rating field
    <field>=true|false        boolean match
    <field>=<value>           exact match, only for whitelisted fields
    sort=-rating,name         comma separated, '-' for descending
    page=1&limit=10           limit is clamped to 1..100, page to 1..MAX_PAGE_NUMBER
"""
import math
import re
from decimal import Decimal, InvalidOperation
from django.core.exceptions import FieldError, ValidationError
from django.db.models import Q
from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_NUMBER, MAX_PAGE_SIZE

RESERVED_PARAMS = ('q', 'page', 'limit', 'sort')
RANGE_PARAMS = {
    'minPrice': ('price', 'gte'),
    'maxPrice': ('price', 'lte'),
    'minRating': ('rating', 'gte'),
    'maxRating': ('rating', 'lte'),
}
DEFAULT_SORT = '-created_at'


def sanitize_keyword(keyword):
    if not isinstance(keyword, str):
        return ''
    return re.sub(r'[^\w\s]', '', keyword).strip()


def _snake_case(name):
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def _to_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_decimal(value):
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def build_search_query(keyword, search_fields):
    """OR together an icontains lookup per field. Returns None when there is nothing to search."""
    keyword = sanitize_keyword(keyword)
    if not keyword or not search_fields:
        return None
    query = Q()
    for field in search_fields:
        query |= Q(**{f'{field}__icontains': keyword})
    return query


def build_filter_query(params, default_filters=None, filter_fields=None, price_field='base_price', rating_field='rating'):
    """Translate query params into ORM lookups. default_filters are merged last and always win."""
    filters = {}
    filter_fields = filter_fields or ()
    range_fields = {'price': price_field, 'rating': rating_field}
    for key in params.keys():
        if key in RESERVED_PARAMS:
            continue
        value = params.get(key)
        if value is None or value == '':
            continue

        if key in RANGE_PARAMS:
            kind, lookup = RANGE_PARAMS[key]
            field = range_fields[kind]
            number = _to_decimal(value)
            if field and number is not None:
                filters[f'{field}__{lookup}'] = number
            continue

        field = _snake_case(key)
        if field not in filter_fields:
            continue
        if value == 'true':
            filters[field] = True
        elif value == 'false':
            filters[field] = False
        else:
            filters[field] = value
    if default_filters:
        filters.update(default_filters)
    return filters


def build_sort_query(sort, sort_fields, default=DEFAULT_SORT):
    ordering = []
    if isinstance(sort, str):
        for part in sort.split(','):
            part = part.strip()
            if not part:
                continue
            descending = part.startswith('-')
            field = _snake_case(part.lstrip('-'))
            if field in sort_fields:
                ordering.append(f"-{field}" if descending else field)
    if not ordering and default:
        ordering = [default] if isinstance(default, str) else list(default)
    return ordering


def _model_fields(queryset):
    return {field.name for field in queryset.model._meta.concrete_fields}


def query_helper(queryset, params, search_fields=(), default_filters=None, filter_fields=None,
                 price_field='base_price', rating_field='rating', default_sort=DEFAULT_SORT):
    """
    Apply search, filters, ordering and pagination to a queryset.

    Returns (items, pagination) where pagination is {page, limit, total, pages}.
    Filters the caller passes in default_filters always win over the query string.
    Malformed values are dropped instead of raising.
    """
    model_fields = _model_fields(queryset)
    if filter_fields is None:
        filter_fields = model_fields

    search = build_search_query(params.get('q'), search_fields)
    if search is not None:
        queryset = queryset.filter(search)

    default_filters = default_filters or {}
    filters = build_filter_query(
        params, default_filters, filter_fields, price_field=price_field, rating_field=rating_field
    )
    for lookup, value in filters.items():
        if lookup in default_filters:
            continue
        try:
            queryset = queryset.filter(**{lookup: value})
        except (ValueError, TypeError, ValidationError, FieldError):
            continue
    if default_filters:
        queryset = queryset.filter(**default_filters)

    if isinstance(default_sort, str) and default_sort.lstrip('-') not in model_fields:
        default_sort = '-pk'
    ordering = build_sort_query(params.get('sort'), model_fields, default=default_sort)
    queryset = queryset.order_by(*ordering)

    page = min(MAX_PAGE_NUMBER, max(1, _to_int(params.get('page')) or 1))
    limit = min(MAX_PAGE_SIZE, max(1, _to_int(params.get('limit')) or DEFAULT_PAGE_SIZE))
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])

    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit),
    }
