import json

import django_filters
from django.db import connection
from django.db.models import Q

from .models import Resource


def tag_lookup(tag):
    """Match resources whose tag list holds tag exactly (tags are stored lowercased)."""
    tag = tag.lower()
    if connection.features.supports_json_field_contains:
        return Q(tags__contains=[tag])
    # match the encoded JSON string, which escapes quotes and non-ASCII characters
    return Q(tags__icontains=json.dumps(tag))


class ResourceFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=Resource.TYPE_CHOICES)
    tags = django_filters.CharFilter(method='filter_tags')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Resource
        fields = ['type']

    def filter_tags(self, queryset, name, value):
        tags = [tag.strip() for tag in value.split(',') if tag.strip()]
        if not tags:
            return queryset
        query = Q()
        for tag in tags:
            query |= tag_lookup(tag)
        return queryset.filter(query)

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(title__icontains=value) |
            Q(description__icontains=value) |
            Q(tags__icontains=value)
        )
