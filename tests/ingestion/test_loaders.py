import pandas as pd
import pytest

from lead_tracker.errors import NoLeadsFoundError, SpreadsheetParseError, UnsupportedFileTypeError
from lead_tracker.ingestion.loaders import load_leads, load_leads_from_text, load_leads_from_upload
from lead_tracker.models import LeadStatus


@pytest.fixture()
def sample_dataframe():
    return pd.DataFrame(
        [
            {
                "Name": "Ada Lovelace",
                "Email": "ada@example.com",
                "Phone": "555-1111",
                "Company": "Analytical Engines",
                "STATUS(LEAD)": "QUALIFIED",
            },
            {
                "Name": "Grace Hopper",
                "Email": "grace@example.com",
                "Phone": "",
                "Company": "US Navy",
                "STATUS(LEAD)": "",
            },
        ]
    )


def test_load_leads_from_csv(sample_dataframe, tmp_path):
    csv_path = tmp_path / "leads.csv"
    sample_dataframe.to_csv(csv_path, index=False)

    leads = load_leads(csv_path)

    assert len(leads) == 2
    first, second = leads
    assert first.fields["Name"] == "Ada Lovelace"
    assert first.fields["Company"] == "Analytical Engines"
    assert first.status is LeadStatus.QUALIFIED
    assert second.fields["Phone"] == ""
    assert second.status is LeadStatus.NEW


def test_load_leads_from_excel_reads_first_sheet(sample_dataframe, tmp_path):
    excel_path = tmp_path / "leads.xlsx"
    with pd.ExcelWriter(excel_path, engine="openpyxl") as writer:
        sample_dataframe.to_excel(writer, sheet_name="Leads", index=False)
        pd.DataFrame([{"Other": "ignored"}]).to_excel(writer, sheet_name="Other", index=False)

    leads = load_leads(excel_path)

    assert len(leads) == 2
    assert leads[0].fields["Email"] == "ada@example.com"
    assert leads[1].fields["Phone"] == ""
    assert leads[0].status is LeadStatus.QUALIFIED
    assert "Other" not in leads[0].fields


def test_load_leads_from_tsv(tmp_path):
    tsv_path = tmp_path / "leads.tsv"
    tsv_path.write_text("Name\tCity\nAda\tLondon\n", encoding="utf-8")

    leads = load_leads(tsv_path)

    assert [lead.fields for lead in leads] == [{"Name": "Ada", "City": "London"}]


def test_load_leads_from_upload_bytes():
    content = "\ufeffName,Email\nAda,ada@example.com\n".encode("utf-8")

    leads = load_leads_from_upload(content, "upload.csv")

    assert leads[0].fields == {"Name": "Ada", "Email": "ada@example.com"}


def test_load_leads_from_text_requires_rows():
    with pytest.raises(NoLeadsFoundError):
        load_leads_from_text("Name,Email\n")


def test_unsupported_file_extension(tmp_path):
    bad_path = tmp_path / "leads.json"
    bad_path.write_text("{}", encoding="utf-8")

    with pytest.raises(UnsupportedFileTypeError):
        load_leads(bad_path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_leads(tmp_path / "missing.csv")


@pytest.mark.parametrize(
    "filename, content",
    [
        ("leads.xlsx", b"not a workbook at all"),
        ("leads.xlsm", b"PK\x03\x04truncated"),
        ("leads.tsv", b""),
    ],
)
def test_unreadable_spreadsheet_raises_parse_error(tmp_path, filename, content):
    path = tmp_path / filename
    path.write_bytes(content)

    with pytest.raises(SpreadsheetParseError) as excinfo:
        load_leads(path)

    assert filename in str(excinfo.value)


@pytest.mark.parametrize("filename", ["legacy.xls", "binary.xlsb"])
def test_legacy_excel_formats_are_unsupported(filename):
    with pytest.raises(UnsupportedFileTypeError):
        load_leads_from_upload(b"irrelevant", filename)
