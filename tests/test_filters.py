import pytest

from lead_tracker.filters import (
    CITY_KEYS,
    SUB_CATEGORY_KEYS,
    LeadFilter,
    distinct_values,
    lookup_value,
    paginate,
)
from lead_tracker.models import Lead, LeadStatus, SubStatus


@pytest.fixture()
def leads():
    return [
        Lead(fields={"Name": "Ada", "city": "London", "Sub-category": "Software"}, status=LeadStatus.CONTACTED),
        Lead(fields={"Name": "Grace", "Town": "Arlington"}, status=LeadStatus.WON, sub_status=SubStatus.GOOD),
        Lead(fields={"Name": "Alan", "Location": "London"}, notes=["met at expo"]),
    ]


def test_lookup_value_tries_keys_in_order_case_insensitively(leads):
    assert lookup_value(leads[0], CITY_KEYS) == "London"
    assert lookup_value(leads[1], CITY_KEYS) == "Arlington"
    assert lookup_value(leads[1], SUB_CATEGORY_KEYS) == ""


def test_distinct_values_are_sorted_and_skip_blanks(leads):
    assert distinct_values(leads, CITY_KEYS) == ["Arlington", "London"]
    assert distinct_values(leads, SUB_CATEGORY_KEYS) == ["Software"]


def test_empty_filter_accepts_everything(leads):
    assert LeadFilter().apply(leads) == leads


def test_search_covers_raw_values_and_pipeline_state(leads):
    assert LeadFilter(search="GRACE").apply(leads) == [leads[1]]
    assert LeadFilter(search="expo").apply(leads) == [leads[2]]
    assert LeadFilter(search="won").apply(leads) == [leads[1]]


def test_filters_combine(leads):
    assert LeadFilter(city="London").apply(leads) == [leads[0], leads[2]]
    assert LeadFilter(city="London", status=LeadStatus.NEW).apply(leads) == [leads[2]]
    assert LeadFilter(sub_status=SubStatus.GOOD).apply(leads) == [leads[1]]
    assert LeadFilter(sheet_sub_category="Software").apply(leads) == [leads[0]]


def test_paginate_defaults_to_pages_of_25():
    page = paginate(list(range(60)), page=3)

    assert page.items == list(range(50, 60))
    assert page.total_pages == 3
    assert (page.start_index, page.end_index) == (51, 60)


def test_paginate_clamps_page_number():
    items = list(range(5))

    assert paginate(items, page=0, per_page=2).page == 1
    assert paginate(items, page=99, per_page=2).items == [4]


def test_paginate_empty_list():
    page = paginate([])

    assert page.items == []
    assert page.page == 1
    assert (page.start_index, page.end_index) == (0, 0)


def test_paginate_rejects_non_positive_page_size():
    with pytest.raises(ValueError):
        paginate([1], per_page=0)
