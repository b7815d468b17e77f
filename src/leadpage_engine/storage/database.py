"""SQLite storage for landing pages and leads."""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any, Generator

from ..errors import StorageError
from ..forms.schema import parse_fields, fields_to_json, FormField
from .migrations import run_migrations
from .models import (
    LandingPage,
    Lead,
    LeadFilters,
    LeadStatus,
    PageStatus,
    VisitContext,
    compute_conversion_rate,
    utcnow,
)

logger = logging.getLogger(__name__)

# Columns an owner may edit directly
PAGE_CONTENT_FIELDS = (
    "title",
    "description",
    "logo_url",
    "background_url",
    "form_fields",
    "custom_html",
    "use_custom_html",
    "button_text",
    "button_color",
)


def _ts(value: datetime) -> str:
    """Serialize a timestamp as UTC ISO-8601 so stored values sort as text."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_ts(value: Optional[str]) -> datetime:
    if not value:
        return utcnow()
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class PageDatabase:
    """SQLite database for landing pages and their captured leads."""

    def __init__(self, db_path: Optional[Path] = None):
        """Open (and migrate) the database at db_path."""
        if db_path is None:
            db_path = Path.home() / ".leadpage-engine" / "pages.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            run_migrations(str(self.db_path))
        except sqlite3.Error as e:
            raise StorageError(f"Could not initialize database: {e}") from e

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a connection that commits on success and rolls back on error."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys=ON")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ping(self):
        """Raise StorageError if the database cannot be queried."""
        with self._get_connection() as conn:
            conn.execute("SELECT 1")

    # === ROW CONVERSION ===

    def _row_to_page(self, row: sqlite3.Row) -> LandingPage:
        return LandingPage(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            logo_url=row["logo_url"],
            background_url=row["background_url"],
            form_fields=parse_fields(json.loads(row["form_fields"] or "[]")),
            custom_html=row["custom_html"],
            use_custom_html=bool(row["use_custom_html"]),
            button_text=row["button_text"],
            button_color=row["button_color"],
            status=PageStatus(row["status"]),
            visits=row["visits"] or 0,
            conversions=row["conversions"] or 0,
            conversion_rate=row["conversion_rate"] or 0.0,
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )

    def _row_to_lead(self, row: sqlite3.Row) -> Lead:
        keys = row.keys()
        return Lead(
            id=row["id"],
            landing_page_id=row["landing_page_id"],
            form_fields=parse_fields(json.loads(row["form_fields"] or "[]")),
            form_data=json.loads(row["form_data"] or "{}"),
            status=LeadStatus(row["status"]),
            source=row["source"],
            utm_source=row["utm_source"],
            utm_medium=row["utm_medium"],
            utm_campaign=row["utm_campaign"],
            referrer=row["referrer"],
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
            landing_page_title=row["landing_page_title"] if "landing_page_title" in keys else None,
        )

    # === PAGES ===

    def create_page(
        self,
        user_id: str,
        title: str,
        description: str = "",
        form_fields: Optional[List[FormField]] = None,
        **content: Any,
    ) -> LandingPage:
        """Create a new draft page owned by user_id."""
        page = LandingPage(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            description=description,
            form_fields=form_fields or [],
        )
        for key, value in content.items():
            if key not in PAGE_CONTENT_FIELDS:
                raise ValueError(f"Unknown page field: {key}")
            setattr(page, key, value)

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO landing_pages (
                    id, user_id, title, description, logo_url, background_url,
                    form_fields, custom_html, use_custom_html, button_text,
                    button_color, status, visits, conversions, conversion_rate,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, 0, 0, ?, ?)
            """, (
                page.id,
                page.user_id,
                page.title,
                page.description,
                page.logo_url,
                page.background_url,
                json.dumps(fields_to_json(page.form_fields)),
                page.custom_html,
                int(page.use_custom_html),
                page.button_text,
                page.button_color,
                page.status.value,
                _ts(page.created_at),
                _ts(page.updated_at),
            ))

        logger.info("Created landing page %s for user %s", page.id, user_id)
        return page

    def get_page(self, page_id: str) -> Optional[LandingPage]:
        """Get a page by id, or None if it does not exist."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM landing_pages WHERE id = ?", (page_id,)
            ).fetchone()
            return self._row_to_page(row) if row else None

    def list_pages(self, user_id: str, order_by: str = "created_at") -> List[LandingPage]:
        """List a user's pages, newest first or by visits."""
        order = {
            "created_at": "created_at DESC",
            "visits": "visits DESC, created_at DESC",
            "title": "title COLLATE NOCASE",
        }.get(order_by)
        if order is None:
            raise ValueError(f"Cannot order pages by {order_by}")

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"SELECT * FROM landing_pages WHERE user_id = ? ORDER BY {order}",
                (user_id,),
            )
            return [self._row_to_page(row) for row in cursor.fetchall()]

    def update_page(self, page_id: str, **content: Any) -> Optional[LandingPage]:
        """Update content columns of a page. Counters and status are not editable here."""
        sets = []
        params: List[Any] = []
        for key, value in content.items():
            if key not in PAGE_CONTENT_FIELDS:
                raise ValueError(f"Unknown page field: {key}")
            if key == "form_fields":
                value = json.dumps(fields_to_json(value))
            elif key == "use_custom_html":
                value = int(bool(value))
            sets.append(f"{key} = ?")
            params.append(value)

        if not sets:
            return self.get_page(page_id)

        sets.append("updated_at = ?")
        params.extend([_ts(utcnow()), page_id])

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE landing_pages SET {', '.join(sets)} WHERE id = ?", params
            )
            if cursor.rowcount == 0:
                return None
        return self.get_page(page_id)

    def set_page_status(self, page_id: str, status: PageStatus) -> Optional[LandingPage]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE landing_pages SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, _ts(utcnow()), page_id),
            )
            if cursor.rowcount == 0:
                return None
        logger.info("Landing page %s is now %s", page_id, status.value)
        return self.get_page(page_id)

    def delete_page(self, page_id: str) -> bool:
        """Delete a page. Its leads are removed by the foreign key cascade."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM landing_pages WHERE id = ?", (page_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted landing page %s and its leads", page_id)
        return deleted

    # === COUNTERS ===

    def update_page_counters(
        self,
        page_id: str,
        visits: Optional[int] = None,
        conversions: Optional[int] = None,
        conversion_rate: Optional[float] = None,
    ) -> None:
        """Write the given counter values as-is."""
        sets = []
        params: List[Any] = []
        if visits is not None:
            sets.append("visits = ?")
            params.append(visits)
        if conversions is not None:
            sets.append("conversions = ?")
            params.append(conversions)
        if conversion_rate is not None:
            sets.append("conversion_rate = ?")
            params.append(conversion_rate)
        if not sets:
            return

        sets.append("updated_at = ?")
        params.extend([_ts(utcnow()), page_id])

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE landing_pages SET {', '.join(sets)} WHERE id = ?", params
            )
            if cursor.rowcount == 0:
                raise StorageError(f"Landing page {page_id} not found")

    def increment_page_counters(
        self, page_id: str, visits: int = 0, conversions: int = 0
    ) -> LandingPage:
        """Increment counters inside one write transaction.

        The conversion rate is recomputed from the values read under the
        same lock, so concurrent callers cannot lose updates.
        """
        with self._get_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT visits, conversions, conversion_rate FROM landing_pages WHERE id = ?",
                (page_id,),
            ).fetchone()
            if row is None:
                raise StorageError(f"Landing page {page_id} not found")

            new_visits = row["visits"] + visits
            new_conversions = row["conversions"] + conversions
            rate = row["conversion_rate"]
            if conversions:
                rate = compute_conversion_rate(new_conversions, new_visits)

            conn.execute("""
                UPDATE landing_pages
                SET visits = ?, conversions = ?, conversion_rate = ?, updated_at = ?
                WHERE id = ?
            """, (new_visits, new_conversions, rate, _ts(utcnow()), page_id))

        return self.get_page(page_id)

    # === LEADS ===

    def insert_lead(
        self,
        landing_page_id: str,
        form_fields: List[FormField],
        form_data: Dict[str, Any],
        context: Optional[VisitContext] = None,
        status: LeadStatus = LeadStatus.NEW,
        created_at: Optional[datetime] = None,
    ) -> Lead:
        """Insert one lead row."""
        context = context or VisitContext()
        now = created_at or utcnow()
        lead = Lead(
            id=str(uuid.uuid4()),
            landing_page_id=landing_page_id,
            form_fields=list(form_fields),
            form_data=dict(form_data),
            status=status,
            source=context.resolved_source,
            utm_source=context.utm_source,
            utm_medium=context.utm_medium,
            utm_campaign=context.utm_campaign,
            referrer=context.referrer,
            created_at=now,
            updated_at=now,
        )

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO leads (
                    id, landing_page_id, form_fields, form_data, status, source,
                    utm_source, utm_medium, utm_campaign, referrer,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                lead.id,
                lead.landing_page_id,
                json.dumps(fields_to_json(lead.form_fields)),
                json.dumps(lead.form_data),
                lead.status.value,
                lead.source,
                lead.utm_source,
                lead.utm_medium,
                lead.utm_campaign,
                lead.referrer,
                _ts(lead.created_at),
                _ts(lead.updated_at),
            ))

        return lead

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT l.*, p.title AS landing_page_title
                FROM leads l JOIN landing_pages p ON p.id = l.landing_page_id
                WHERE l.id = ?
            """, (lead_id,)).fetchone()
            return self._row_to_lead(row) if row else None

    def list_leads(self, user_id: str, filters: Optional[LeadFilters] = None) -> List[Lead]:
        """List leads on the user's pages, newest first."""
        filters = filters or LeadFilters()
        query = """
            SELECT l.*, p.title AS landing_page_title
            FROM leads l JOIN landing_pages p ON p.id = l.landing_page_id
        """
        wheres = ["p.user_id = ?"]
        params: List[Any] = [user_id]

        if filters.start_date:
            wheres.append("l.created_at >= ?")
            params.append(_ts(filters.start_date))
        if filters.end_date:
            wheres.append("l.created_at <= ?")
            params.append(_ts(filters.end_date))
        if filters.landing_page_id:
            wheres.append("l.landing_page_id = ?")
            params.append(filters.landing_page_id)
        if filters.status:
            wheres.append("l.status = ?")
            params.append(filters.status.value)
        if filters.search:
            wheres.append("""EXISTS (
                SELECT 1 FROM json_each(l.form_data)
                WHERE CAST(json_each.value AS TEXT) LIKE ?
            )""")
            params.append(f"%{filters.search}%")

        query += " WHERE " + " AND ".join(wheres)
        query += " ORDER BY l.created_at DESC LIMIT ? OFFSET ?"
        params.extend([filters.limit, filters.offset])

        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_lead(row) for row in cursor.fetchall()]

    def list_leads_since(self, user_id: str, since: datetime) -> List[Lead]:
        """All of a user's leads created at or after since (for reporting)."""
        with self._get_connection() as conn:
            cursor = conn.execute("""
                SELECT l.*, p.title AS landing_page_title
                FROM leads l JOIN landing_pages p ON p.id = l.landing_page_id
                WHERE p.user_id = ? AND l.created_at >= ?
                ORDER BY l.created_at
            """, (user_id, _ts(since)))
            return [self._row_to_lead(row) for row in cursor.fetchall()]

    def update_lead_status(self, lead_id: str, status: LeadStatus) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE leads SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, _ts(utcnow()), lead_id),
            )
            return cursor.rowcount > 0
