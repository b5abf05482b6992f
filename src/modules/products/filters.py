import django_filters
from django.db.models import Q

from modules.products.constants import SORT_NEW, SORT_ORDERINGS
from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    """``keyword`` searches name and description; ``sort`` is ``new`` or ``priceAsc``.

    An unknown ``sort`` value falls back to ``new`` rather than failing.
    """

    keyword = django_filters.CharFilter(method="filter_keyword")
    sort = django_filters.CharFilter(method="filter_sort")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["keyword", "sort", "min_price", "max_price"]

    def filter_keyword(self, queryset, name, value):
        keyword = value.strip()
        if not keyword:
            return queryset
        return queryset.filter(
            Q(name__icontains=keyword) | Q(description__icontains=keyword)
        )

    def filter_sort(self, queryset, name, value):
        ordering = SORT_ORDERINGS.get(value, SORT_ORDERINGS[SORT_NEW])
        return queryset.order_by(*ordering)
