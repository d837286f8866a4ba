"""Legacy database reader built on SQLAlchemy Core."""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import and_, create_engine, select
from sqlalchemy.engine import Engine

from .base import BaseLegacyReader
from .tables import (
    node,
    webform,
    webform_component,
    webform_emails,
    webform_submissions,
    webform_submitted_data,
)
from ..exceptions import LegacySourceError
from ..models.legacy import (
    LegacyComponent,
    LegacyEmail,
    LegacyForm,
    LegacySubmission,
)
from ..services.serialized import decode_extra, flag
from ..services.submission_mapper import collect_values

logger = logging.getLogger(__name__)


class LegacyDatabaseReader(BaseLegacyReader):
    """
    Reads legacy webforms straight from the legacy database.

    Works with any database SQLAlchemy can connect to; the legacy site is
    usually MySQL, tests use SQLite.
    """

    def __init__(self, engine: Union[Engine, str]):
        """
        Initialize the reader.

        Args:
            engine: SQLAlchemy engine or database URL
        """
        super().__init__()
        if isinstance(engine, str):
            if not engine:
                raise LegacySourceError("No legacy database URL configured")
            engine = create_engine(engine)
        self.engine = engine

    def _fetch(self, statement) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            return [dict(row) for row in conn.execute(statement).mappings()]

    def list_form_ids(self) -> List[int]:
        """List the node ids of all legacy webforms."""
        rows = self._fetch(select(webform.c.nid).order_by(webform.c.nid))
        return [int(row["nid"]) for row in rows]

    def get_form(self, nid: int) -> Optional[LegacyForm]:
        """Read a legacy form together with its node title."""
        statement = (
            select(
                webform.c.nid,
                webform.c.confirmation,
                webform.c.redirect_url,
                webform.c.submit_text,
                node.c.title,
            )
            .select_from(webform.outerjoin(node, node.c.nid == webform.c.nid))
            .where(webform.c.nid == nid)
        )
        rows = self._fetch(statement)
        if not rows:
            return None

        row = rows[0]
        title = row["title"]
        if not title:
            title = f"Webform {nid}"
            self.add_warning(f"Form {nid} has no node title, using '{title}'")

        return LegacyForm(
            nid=int(row["nid"]),
            title=title,
            confirmation=row["confirmation"] or "",
            redirect_url=row["redirect_url"] or "",
            submit_text=row["submit_text"] or "",
        )

    def get_components(self, nid: int) -> List[LegacyComponent]:
        """Read the components of a form, ordered by weight."""
        statement = (
            select(
                webform_component.c.cid,
                webform_component.c.form_key,
                webform_component.c.name,
                webform_component.c.type,
                webform_component.c.value,
                webform_component.c.extra,
                webform_component.c.mandatory,
                webform_component.c.weight,
            )
            .where(webform_component.c.nid == nid)
            .order_by(webform_component.c.weight, webform_component.c.cid)
        )

        components = []
        for row in self._fetch(statement):
            components.append(LegacyComponent(
                cid=int(row["cid"]),
                form_key=row["form_key"],
                name=row["name"] or "",
                type=row["type"],
                extra=decode_extra(row["extra"], cid=row["cid"], form_key=row["form_key"]),
                required=bool(flag(row["mandatory"])),
                value=row["value"] or "",
                weight=int(row["weight"] or 0),
                nid=nid,
            ))

        logger.debug(f"Form {nid}: read {len(components)} components")
        return components

    def get_component_keys(self, nid: int) -> Dict[int, str]:
        """Map component ids of a form to their form keys."""
        statement = (
            select(webform_component.c.cid, webform_component.c.form_key)
            .where(webform_component.c.nid == nid)
        )
        return {int(row["cid"]): row["form_key"] for row in self._fetch(statement)}

    def get_submissions(
        self,
        nid: int,
        after_sid: int = 0,
        limit: Optional[int] = None
    ) -> List[LegacySubmission]:
        """Read submission headers with sid above after_sid."""
        statement = (
            select(
                webform_submissions.c.sid,
                webform_submissions.c.uid,
                webform_submissions.c.remote_addr,
                webform_submissions.c.submitted,
            )
            .where(webform_submissions.c.nid == nid)
            .where(webform_submissions.c.sid > after_sid)
            .order_by(webform_submissions.c.sid)
        )
        if limit is not None:
            statement = statement.limit(limit)

        submissions = []
        for row in self._fetch(statement):
            submitted = None
            if row["submitted"]:
                submitted = datetime.fromtimestamp(int(row["submitted"]), tz=timezone.utc)
            submissions.append(LegacySubmission(
                sid=int(row["sid"]),
                uid=int(row["uid"] or 0),
                remote_addr=row["remote_addr"] or "",
                submitted=submitted,
            ))
        return submissions

    def get_submitted_data(self, nid: int) -> Dict[int, Dict[str, Any]]:
        """Read every submitted value of a form, grouped by sid and form key."""
        statement = (
            select(
                webform_component.c.form_key,
                webform_submitted_data.c.sid,
                webform_submitted_data.c.data,
            )
            .select_from(
                webform_submitted_data.join(
                    webform_component,
                    and_(
                        webform_component.c.cid == webform_submitted_data.c.cid,
                        webform_component.c.nid == webform_submitted_data.c.nid,
                    ),
                )
            )
            .where(webform_submitted_data.c.nid == nid)
            .order_by(
                webform_submitted_data.c.sid,
                webform_submitted_data.c.cid,
                webform_submitted_data.c.no,
            )
        )

        rows_by_sid: Dict[int, List[Tuple[str, Any]]] = defaultdict(list)
        for row in self._fetch(statement):
            rows_by_sid[int(row["sid"])].append((row["form_key"], row["data"]))

        return {sid: collect_values(rows) for sid, rows in rows_by_sid.items()}

    def get_emails(self, nid: int) -> List[LegacyEmail]:
        """Read the email configuration rows of a form."""
        statement = (
            select(webform_emails)
            .where(webform_emails.c.nid == nid)
            .order_by(webform_emails.c.eid)
        )
        return [
            LegacyEmail(
                eid=int(row["eid"]),
                email=str(row["email"] or ""),
                subject=row["subject"] if row["subject"] is not None else "default",
                from_name=row["from_name"],
                from_address=row["from_address"] or "default",
                template=row["template"] if row["template"] is not None else "default",
            )
            for row in self._fetch(statement)
        ]
