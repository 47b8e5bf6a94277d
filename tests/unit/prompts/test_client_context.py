"""Unit tests for the client context block of composed prompts."""

from datetime import UTC, datetime, timedelta

from quotewise.modules.clients.models import Client
from quotewise.modules.prompts.composer import build_client_context, format_amount
from quotewise.modules.quotes.models import Quote


def make_quotes(count: int) -> list[Quote]:
    start = datetime(2026, 1, 1, tzinfo=UTC)
    quotes = [
        Quote(
            quote_number=f"Q-{i:03d}",
            description=f"Job {i}" if i % 2 else None,
            amount=i * 10_000,
            date=start + timedelta(days=i),
        )
        for i in range(1, count + 1)
    ]
    return sorted(quotes, key=lambda q: q.date, reverse=True)


class TestBuildClientContext:
    """Tests for build_client_context."""

    def test_profile_fields(self):
        client = Client(
            company_name="Smith Renovations",
            contact_first_name="Jane",
            contact_last_name="Smith",
            email="jane@smith.example",
            phone=None,
        )

        context = build_client_context(client, [])

        assert context.startswith("CLIENT INFORMATION:")
        assert "Name: Smith Renovations" in context
        assert "Contact: Jane Smith" in context
        assert "Email: jane@smith.example" in context
        assert "Phone: Not provided" in context
        assert "RECENT QUOTES" not in context
        assert "NOTES" not in context

    def test_at_most_five_quotes_newest_first(self):
        client = Client(company_name="Smith Renovations")

        context = build_client_context(client, make_quotes(7))

        quote_lines = [line for line in context.splitlines() if line.startswith("- Q-")]
        assert [line.split(":")[0] for line in quote_lines] == [
            "- Q-007",
            "- Q-006",
            "- Q-005",
            "- Q-004",
            "- Q-003",
        ]

    def test_quote_line_format(self):
        client = Client(company_name="Smith Renovations")

        context = build_client_context(client, make_quotes(2))

        assert "- Q-002: No description ($200.00)" in context
        assert "- Q-001: Job 1 ($100.00)" in context

    def test_notes_come_last(self):
        client = Client(company_name="Smith Renovations", notes="Prefers email contact")

        context = build_client_context(client, make_quotes(1))

        assert context.endswith("NOTES:\nPrefers email contact")


class TestFormatAmount:
    def test_minor_units(self):
        assert format_amount(123450) == "$1,234.50"

    def test_zero(self):
        assert format_amount(0) == "$0.00"
