"""Shared fixtures for discharge letter tests."""
import io
from typing import List, Optional

import pytest
from docx import Document

from discharge_letter_generation.attachments import attachment_from_bytes
from discharge_letter_generation.core.config import PipelineConfiguration
from discharge_letter_generation.core.constants import DOCX_MIME_TYPE
from discharge_letter_generation.core.enums import AttachmentCategory
from discharge_letter_generation.core.models import (
    ClinicalRecord,
    ComposedRequest,
    PatientRecord,
)

# Smallest valid PNG: 1x1 transparent pixel
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)
PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


class FakeClient:
    """Records composed requests and returns a canned letter or raises."""

    def __init__(self, response: str = "LETTER", error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.requests: List[ComposedRequest] = []

    def generate(self, request: ComposedRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def model_name(self) -> str:
        return "fake-model"

    @property
    def provider_name(self) -> str:
        return "fake"


def build_docx(paragraphs, table_rows=()) -> bytes:
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for row, values in zip(table.rows, table_rows):
            for cell, value in zip(row.cells, values):
                cell.text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def docx_bytes() -> bytes:
    return build_docx(
        ["Operationsbericht", "Laparoskopische Appendektomie ohne Komplikationen."],
        table_rows=[("CRP", "12 mg/l"), ("Leukozyten", "11.2")],
    )


@pytest.fixture
def word_attachment(docx_bytes):
    return attachment_from_bytes("op_bericht.docx", docx_bytes, AttachmentCategory.OPREPORT)


@pytest.fixture
def tokenized_word_attachment():
    content = build_docx(["Befund {{language}} und {{dischargeDate}}"])
    return attachment_from_bytes("befund {{audience}}.docx", content, AttachmentCategory.LAB)


@pytest.fixture
def broken_word_attachment():
    return attachment_from_bytes(
        "vorbrief.docx", b"this is not a zip archive", AttachmentCategory.LETTER, DOCX_MIME_TYPE
    )


@pytest.fixture
def image_attachment():
    return attachment_from_bytes("wound.png", PNG_BYTES, AttachmentCategory.POSTOP)


@pytest.fixture
def pdf_attachment():
    return attachment_from_bytes("labor.pdf", PDF_BYTES, AttachmentCategory.LAB)


@pytest.fixture
def anna() -> PatientRecord:
    return PatientRecord(first_name="Anna", last_name="Muster", date_of_birth="1980-01-01")


@pytest.fixture
def appendicitis() -> ClinicalRecord:
    return ClinicalRecord(diagnosis="Appendicitis")


@pytest.fixture
def config() -> PipelineConfiguration:
    return PipelineConfiguration(gemini_api_key="test-key")


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def make_client():
    """Factory for fake clients with a custom response or error."""
    return FakeClient


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


CONFIG_ENV_VARS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "API_KEY",
    "OPENAI_API_KEY",
    "LLM_PROVIDER",
    "GEMINI_MODEL",
    "OPENAI_MODEL",
    "TEMPERATURE",
    "DEFAULT_LANGUAGE",
    "DEFAULT_AUDIENCE",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty configuration environment plus an empty .env file.

    Variables are set before deletion so anything load_dotenv writes
    during the test is undone afterwards.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return monkeypatch, str(env_file)
