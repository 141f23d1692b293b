from types import SimpleNamespace

import pytest

import config
from app.errors import ExtractionError
from app.services import extractor


class FakeResponses:
    def __init__(self, output_text=None, error=None):
        self.output_text = output_text
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(output_text=self.output_text)


@pytest.fixture
def fake_llm(monkeypatch):
    def install(output_text=None, error=None):
        responses = FakeResponses(output_text, error)
        monkeypatch.setattr(extractor, "_openai_client", lambda: SimpleNamespace(responses=responses))
        return responses

    return install


RECEIPT_JSON = (
    '{"merchant": "Netflix", "amount": 15.99, "currency": "USD", '
    '"date": "2024-10-25", "category": "Subscription", "summary": "Monthly plan"}'
)


def test_extracts_transaction(fake_llm):
    responses = fake_llm(RECEIPT_JSON)

    tx = extractor.extract_transaction("Your payment to Netflix for $15.99 ...")

    assert tx.merchant == "Netflix"
    assert tx.amount == 15.99
    assert tx.date == "2024-10-25"
    assert tx.id
    assert "Netflix for $15.99" in responses.requests[0]["input"][1]["content"]
    assert responses.requests[0]["model"] == config.EXTRACTION_MODEL


def test_accepts_fenced_json(fake_llm):
    fake_llm(f"```json\n{RECEIPT_JSON}\n```")
    assert extractor.extract_transaction("x").merchant == "Netflix"


def test_ids_are_random(fake_llm):
    fake_llm(RECEIPT_JSON)
    assert extractor.extract_transaction("x").id != extractor.extract_transaction("x").id


@pytest.mark.parametrize("text", ["null", "{}", "```json\nnull\n```"])
def test_not_a_transaction(fake_llm, text):
    fake_llm(text)
    assert extractor.extract_transaction("hello, lunch tomorrow?") is None


@pytest.mark.parametrize(
    "text",
    [
        "",
        "I could not find a transaction.",
        "[1, 2]",
        '{"merchant": "Netflix"}',
        RECEIPT_JSON.replace("15.99", '"a lot"'),
    ],
)
def test_malformed_output_raises(fake_llm, text):
    fake_llm(text)
    with pytest.raises(ExtractionError):
        extractor.extract_transaction("x")


def test_sdk_failure_raises(fake_llm):
    fake_llm(error=RuntimeError("rate limited"))
    with pytest.raises(ExtractionError, match="rate limited"):
        extractor.extract_transaction("x")


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    with pytest.raises(ExtractionError, match="not configured"):
        extractor.extract_transaction("x")


def test_demo_emails_are_split(fake_llm):
    fake_llm("Uber receipt $12\n---SPLIT---\n\n---SPLIT---  Netflix $15.99  ")
    assert extractor.generate_demo_emails(2) == ["Uber receipt $12", "Netflix $15.99"]


def test_demo_emails_empty_output(fake_llm):
    fake_llm("")
    assert extractor.generate_demo_emails() == []


def test_demo_emails_failure(fake_llm):
    fake_llm(error=RuntimeError("down"))
    with pytest.raises(ExtractionError):
        extractor.generate_demo_emails()


@pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_amount_raises(fake_llm, amount):
    fake_llm(RECEIPT_JSON.replace("15.99", amount))
    with pytest.raises(ExtractionError):
        extractor.extract_transaction("x")
