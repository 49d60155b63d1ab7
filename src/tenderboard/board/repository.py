"""Tender record and business-rule persistence"""
import json
from datetime import datetime
from typing import Dict, List, Optional

import psycopg2

from .records import TenderRecord
from ..documents import DocumentFile
from ..errors import TenderNotFoundError
from ..storage import get_connection

RULES_KEY = 'business_rules'


def save_tender(record: TenderRecord) -> None:
    """Insert or update a record together with its attached files."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("""
                INSERT INTO tenderboard.tbl_tenders (tender_id, record, updated_at)
                VALUES (%s, %s, %s)
                ON CONFLICT (tender_id) DO UPDATE
                SET record = EXCLUDED.record,
                    updated_at = EXCLUDED.updated_at
            """, (record.id, json.dumps(record.to_dict()), datetime.now()))

            files = record.files()
            cur.execute("""
                DELETE FROM tenderboard.tbl_tender_files
                WHERE tender_id = %s AND NOT (slot = ANY(%s))
            """, (record.id, list(files)))

            for slot, f in files.items():
                cur.execute("""
                    INSERT INTO tenderboard.tbl_tender_files
                    (tender_id, slot, filename, content_type, content)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (tender_id, slot) DO UPDATE
                    SET filename = EXCLUDED.filename,
                        content_type = EXCLUDED.content_type,
                        content = EXCLUDED.content
                """, (record.id, slot, f.name, f.content_type, psycopg2.Binary(f.content)))


def _load_files(cur, tender_id: str) -> Dict[str, DocumentFile]:
    cur.execute("""
        SELECT slot, filename, content_type, content
        FROM tenderboard.tbl_tender_files
        WHERE tender_id = %s
    """, (tender_id,))
    return {
        slot: DocumentFile(name=filename, content_type=content_type, content=bytes(content))
        for slot, filename, content_type, content in cur.fetchall()
    }


def load_tender(tender_id: str, with_files: bool = True) -> Optional[TenderRecord]:
    """Load a record by ID (None if it does not exist)."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("""
                SELECT record FROM tenderboard.tbl_tenders
                WHERE tender_id = %s
            """, (tender_id,))
            row = cur.fetchone()
            if not row:
                return None
            files = _load_files(cur, tender_id) if with_files else {}
            return TenderRecord.from_dict(row[0], files)


def get_tender(tender_id: str, with_files: bool = True) -> TenderRecord:
    """Like load_tender, but raises TenderNotFoundError."""
    record = load_tender(tender_id, with_files=with_files)
    if record is None:
        raise TenderNotFoundError(tender_id)
    return record


def list_tenders() -> List[TenderRecord]:
    """All records, newest first. File contents are not loaded."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("""
                SELECT record FROM tenderboard.tbl_tenders
                ORDER BY (record->>'createdAt')::BIGINT DESC
            """)
            return [TenderRecord.from_dict(row[0]) for row in cur.fetchall()]


def find_tender_id(prefix: str) -> Optional[str]:
    """Resolve a (possibly abbreviated) ID. None unless exactly one match."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("""
                SELECT tender_id FROM tenderboard.tbl_tenders
                WHERE tender_id LIKE %s
                LIMIT 2
            """, (prefix + '%',))
            rows = cur.fetchall()
            return rows[0][0] if len(rows) == 1 else None


def load_rules(default: str) -> str:
    """Business rules text, or `default` if none saved yet."""
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT value FROM tenderboard.tbl_settings WHERE key = %s", (RULES_KEY,))
            row = cur.fetchone()
            return row[0] if row else default


def save_rules(rules: str) -> None:
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("""
                INSERT INTO tenderboard.tbl_settings (key, value, updated_at)
                VALUES (%s, %s, NOW())
                ON CONFLICT (key) DO UPDATE
                SET value = EXCLUDED.value,
                    updated_at = EXCLUDED.updated_at
            """, (RULES_KEY, rules))
