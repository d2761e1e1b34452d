import math

from lead_tracker.ingestion.normalizer import clean_cell, normalise_rows, parse_csv
from lead_tracker.models import LeadStatus, SubStatus


def test_parse_csv_builds_leads_with_default_pipeline_state():
    leads = parse_csv("Name,Email\nAda,ada@example.com\nGrace,grace@example.com\n")

    assert len(leads) == 2
    first = leads[0]
    assert first.fields == {"Name": "Ada", "Email": "ada@example.com"}
    assert first.status is LeadStatus.NEW
    assert first.sub_status is SubStatus.NONE
    assert first.notes == []
    assert first.last_updated.tzinfo is not None
    assert len({lead.id for lead in leads}) == 2


def test_header_only_input_yields_no_leads():
    assert parse_csv("Name,Email\n") == []
    assert parse_csv("") == []
    assert parse_csv("\n\n") == []


def test_blank_header_cells_drop_their_column_and_short_rows_pad():
    leads = normalise_rows([["Name", "", "City"], ["Ada", "ignored", "London"], ["Grace"]])

    assert leads[0].fields == {"Name": "Ada", "City": "London"}
    assert leads[1].fields == {"Name": "Grace", "City": ""}


def test_reserved_columns_restore_pipeline_state():
    text = (
        "Name,STATUS(LEAD),STATUS(CALL),Activity & Notes\n"
        "Ada,won,Interested,call back | sent quote\n"
    )

    (lead,) = parse_csv(text)

    assert lead.status is LeadStatus.WON
    assert lead.sub_status is SubStatus.INTERESTED
    assert lead.notes == ["call back", "sent quote"]
    assert lead.fields["STATUS(LEAD)"] == "won"


def test_unknown_enum_values_keep_defaults():
    (lead,) = parse_csv("Name,STATUS(LEAD),STATUS(CALL)\nAda,MAYBE,???\n")

    assert lead.status is LeadStatus.NEW
    assert lead.sub_status is SubStatus.NONE


def test_spreadsheet_cells_are_coerced_to_strings():
    leads = normalise_rows([["Name", "Phone", 2024], ["Ada", 5551111.0, math.nan], [None, None, None]])

    assert len(leads) == 1
    assert leads[0].fields == {"Name": "Ada", "Phone": "5551111", "2024": ""}


def test_clean_cell():
    assert clean_cell(None) == ""
    assert clean_cell(float("nan")) == ""
    assert clean_cell(3.0) == "3"
    assert clean_cell(3.5) == "3.5"
    assert clean_cell("  padded ") == "padded"
