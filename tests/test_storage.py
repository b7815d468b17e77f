"""Tests for the SQLite page and lead store."""

import pytest
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from leadpage_engine.errors import StorageError
from leadpage_engine.forms import FormField
from leadpage_engine.storage import (
    PageDatabase,
    LeadFilters,
    LeadStatus,
    PageStatus,
    VisitContext,
)
from leadpage_engine.storage.migrations import run_migrations


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db(temp_data_dir):
    return PageDatabase(temp_data_dir / "pages.db")


@pytest.fixture
def fields():
    return [
        FormField(id="f1", type="text", label="Name"),
        FormField(id="f2", type="email", label="Email", required=True),
    ]


class TestMigrations:

    def test_fresh_database_is_migrated(self, temp_data_dir):
        path = str(temp_data_dir / "fresh.db")
        assert run_migrations(path) == 1
        assert run_migrations(path) == 0

    def test_database_opens_migrated(self, db):
        assert run_migrations(str(db.db_path)) == 0
        db.ping()


class TestPages:
    """Tests for page CRUD."""

    def test_create_page_defaults(self, db, fields):
        page = db.create_page(user_id="u1", title="Webinar", form_fields=fields)

        stored = db.get_page(page.id)
        assert stored is not None
        assert stored.status == PageStatus.DRAFT
        assert stored.visits == 0
        assert stored.conversions == 0
        assert stored.conversion_rate == 0
        assert stored.button_text == "Submit"
        assert [f.label for f in stored.form_fields] == ["Name", "Email"]
        assert stored.form_fields[1].required is True

    def test_get_missing_page(self, db):
        assert db.get_page("nope") is None

    def test_create_with_content(self, db):
        page = db.create_page(
            user_id="u1", title="T", use_custom_html=True,
            custom_html="<p>hi</p>", button_color="#000000",
        )
        stored = db.get_page(page.id)
        assert stored.use_custom_html is True
        assert stored.custom_html == "<p>hi</p>"
        assert stored.button_color == "#000000"

    def test_unknown_content_field_rejected(self, db):
        with pytest.raises(ValueError):
            db.create_page(user_id="u1", title="T", visits=100)

    def test_list_pages_scoped_to_user(self, db):
        db.create_page(user_id="u1", title="A")
        db.create_page(user_id="u1", title="B")
        db.create_page(user_id="u2", title="C")

        assert {p.title for p in db.list_pages("u1")} == {"A", "B"}
        assert [p.title for p in db.list_pages("u2")] == ["C"]

    def test_list_pages_by_visits(self, db):
        a = db.create_page(user_id="u1", title="A")
        b = db.create_page(user_id="u1", title="B")
        db.update_page_counters(a.id, visits=3)
        db.update_page_counters(b.id, visits=10)

        assert [p.title for p in db.list_pages("u1", order_by="visits")] == ["B", "A"]

    def test_update_page_content(self, db, fields):
        page = db.create_page(user_id="u1", title="Old")
        updated = db.update_page(page.id, title="New", form_fields=fields)

        assert updated.title == "New"
        assert len(updated.form_fields) == 2
        assert db.update_page("nope", title="x") is None

    def test_set_status(self, db):
        page = db.create_page(user_id="u1", title="T")
        assert db.set_page_status(page.id, PageStatus.PUBLISHED).is_published
        assert not db.set_page_status(page.id, PageStatus.DRAFT).is_published

    def test_delete_page_cascades_to_leads(self, db, fields):
        page = db.create_page(user_id="u1", title="T", form_fields=fields)
        lead = db.insert_lead(page.id, fields, {"Name": "Ana", "Email": "a@b.com"})

        assert db.delete_page(page.id) is True
        assert db.get_page(page.id) is None
        assert db.get_lead(lead.id) is None
        assert db.delete_page(page.id) is False


class TestCounters:

    def test_update_page_counters(self, db):
        page = db.create_page(user_id="u1", title="T")
        db.update_page_counters(page.id, visits=10, conversions=2, conversion_rate=20.0)

        stored = db.get_page(page.id)
        assert (stored.visits, stored.conversions, stored.conversion_rate) == (10, 2, 20.0)
        assert stored.updated_at >= page.updated_at

    def test_update_missing_page_raises(self, db):
        with pytest.raises(StorageError):
            db.update_page_counters("nope", visits=1)

    def test_increment_page_counters(self, db):
        page = db.create_page(user_id="u1", title="T")
        db.update_page_counters(page.id, visits=4)

        updated = db.increment_page_counters(page.id, conversions=1)
        assert updated.conversions == 1
        assert updated.conversion_rate == 25.0

        updated = db.increment_page_counters(page.id, visits=1)
        assert updated.visits == 5
        assert updated.conversion_rate == 25.0  # only recomputed on conversions

    def test_increment_missing_page_raises(self, db):
        with pytest.raises(StorageError):
            db.increment_page_counters("nope", visits=1)


class TestLeads:

    def test_insert_lead(self, db, fields):
        page = db.create_page(user_id="u1", title="Webinar", form_fields=fields)
        context = VisitContext(utm_source="google", utm_medium="cpc", utm_campaign="spring")

        lead = db.insert_lead(page.id, fields, {"Name": "Ana", "Email": "a@b.com"}, context)

        stored = db.get_lead(lead.id)
        assert stored.status == LeadStatus.NEW
        assert stored.form_data == {"Name": "Ana", "Email": "a@b.com"}
        assert stored.source == "google"
        assert stored.utm_campaign == "spring"
        assert stored.landing_page_title == "Webinar"
        assert [f.id for f in stored.form_fields] == ["f1", "f2"]

    def test_insert_lead_requires_existing_page(self, db, fields):
        with pytest.raises(StorageError):
            db.insert_lead("missing-page", fields, {"Name": "Ana"})

    def test_default_source(self, db):
        page = db.create_page(user_id="u1", title="T")
        assert db.insert_lead(page.id, [], {}).source == "direct"

    def test_update_lead_status(self, db):
        page = db.create_page(user_id="u1", title="T")
        lead = db.insert_lead(page.id, [], {})

        assert db.update_lead_status(lead.id, LeadStatus.QUALIFIED) is True
        assert db.get_lead(lead.id).status == LeadStatus.QUALIFIED
        assert db.update_lead_status("nope", LeadStatus.CONTACTED) is False

    def test_list_leads_filters(self, db, fields):
        now = datetime.now(timezone.utc)
        p1 = db.create_page(user_id="u1", title="One", form_fields=fields)
        p2 = db.create_page(user_id="u1", title="Two", form_fields=fields)
        other = db.create_page(user_id="u2", title="Other", form_fields=fields)

        old = db.insert_lead(p1.id, fields, {"Name": "Old", "Email": "old@x.com"},
                             created_at=now - timedelta(days=10))
        ana = db.insert_lead(p1.id, fields, {"Name": "Ana Souza", "Email": "ana@x.com"})
        bob = db.insert_lead(p2.id, fields, {"Name": "Bob", "Email": "bob@y.com"})
        db.insert_lead(other.id, fields, {"Name": "Ana", "Email": "ana@z.com"})
        db.update_lead_status(bob.id, LeadStatus.CONTACTED)

        all_leads = db.list_leads("u1")
        assert [l.id for l in all_leads] == [bob.id, ana.id, old.id]

        recent = db.list_leads("u1", LeadFilters(start_date=now - timedelta(days=1)))
        assert {l.id for l in recent} == {ana.id, bob.id}

        older = db.list_leads("u1", LeadFilters(end_date=now - timedelta(days=5)))
        assert [l.id for l in older] == [old.id]

        by_page = db.list_leads("u1", LeadFilters(landing_page_id=p2.id))
        assert [l.id for l in by_page] == [bob.id]

        by_status = db.list_leads("u1", LeadFilters(status=LeadStatus.CONTACTED))
        assert [l.id for l in by_status] == [bob.id]

        by_search = db.list_leads("u1", LeadFilters(search="SOUZA"))
        assert [l.id for l in by_search] == [ana.id]

    def test_search_does_not_match_labels(self, db, fields):
        page = db.create_page(user_id="u1", title="T", form_fields=fields)
        db.insert_lead(page.id, fields, {"Name": "Ana", "Email": "a@b.com"})
        assert db.list_leads("u1", LeadFilters(search="Email")) == []
