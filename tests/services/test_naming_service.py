"""
Tests for NamingService number series.
"""

import warnings

from sqlalchemy import select
from sqlalchemy.exc import SADeprecationWarning

from books_kernel.models import ReferenceType
from books_kernel.services.naming_service import DEFAULT_SERIES, NamingService, NumberSeries


class TestNextName:
    """Names are allocated per series, zero-padded and increasing."""

    def test_sequential_names(self, session):
        naming = NamingService(session)
        assert naming.next_name("SalesInvoice") == "SINV-0001"
        assert naming.next_name("SalesInvoice") == "SINV-0002"
        assert naming.next_name(ReferenceType.PAYMENT) == "PAY-0001"

    def test_every_reference_type_has_a_series(self):
        assert set(DEFAULT_SERIES) == {t.value for t in ReferenceType}

    def test_custom_series(self, session):
        naming = NamingService(session)
        assert naming.next_name("SalesInvoice", series="POS-") == "POS-0001"
        assert naming.next_name("SalesInvoice") == "SINV-0001"

    def test_unknown_type_uses_its_own_prefix(self, session):
        assert NamingService(session).next_name("Quotation") == "Quotation-0001"

    def test_series_start_respected(self, session):
        session.add(NumberSeries(name="JV-", reference_type="JournalEntry", start=500))
        session.commit()
        assert NamingService(session).next_name("JournalEntry") == "JV-0500"

    def test_counter_persisted_on_commit(self, session):
        naming = NamingService(session)
        naming.next_name("Payment")
        naming.next_name("Payment")
        session.commit()

        counter = session.execute(
            select(NumberSeries).where(NumberSeries.name == "PAY-")
        ).scalar_one()
        assert counter.current == 2
        assert counter.reference_type == "Payment"

    def test_rollback_releases_the_number(self, session):
        naming = NamingService(session)
        naming.next_name("Payment")
        session.commit()

        assert naming.next_name("Payment") == "PAY-0002"
        session.rollback()
        assert naming.next_name("Payment") == "PAY-0002"

    def test_allocation_logged(self, session, captured_logs):
        NamingService(session).next_name("JournalEntry")
        records = [r for r in captured_logs() if r["message"] == "document_name_allocated"]
        assert records[0]["document_name"] == "JV-0001"
        assert records[0]["series"] == "JV-"

    def test_counter_written_by_caller_flush(self, session):
        naming = NamingService(session)
        with warnings.catch_warnings():
            warnings.simplefilter("error", SADeprecationWarning)
            with session.no_autoflush:
                assert naming.next_name("JournalEntry") == "JV-0001"
            session.flush()

        counter = session.execute(
            select(NumberSeries).where(NumberSeries.name == "JV-")
        ).scalar_one()
        assert counter.current == 1
