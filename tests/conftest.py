"""Shared fixtures: a SQLite legacy database and an in-memory target platform."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import phpserialize
import pytest
from sqlalchemy import create_engine, insert

from webform_migrate.exceptions import TargetPlatformError
from webform_migrate.extractors import tables
from webform_migrate.extractors.legacy_db import LegacyDatabaseReader
from webform_migrate.loaders.base import BaseTargetPlatform, SubmissionResult
from webform_migrate.models.target import EmailHandlerConfig, TargetSubmission


def serialize(extra: Dict[str, Any]) -> str:
    return phpserialize.dumps(extra).decode("utf-8")


class FakeTargetPlatform(BaseTargetPlatform):
    def __init__(self, dry_run: bool = False) -> None:
        super().__init__(dry_run=dry_run)
        self.webforms: Dict[str, Dict[str, Any]] = {}
        self.elements: Dict[str, Dict[str, Any]] = {}
        self.submissions: Dict[str, List[TargetSubmission]] = {}
        self.handlers: Dict[str, List[EmailHandlerConfig]] = {}
        self.nodes: Dict[int, Dict[str, Any]] = {}
        self.failing_sids: set[int] = set()
        self.fail_link = False
        self.deleted_chunks: List[List[int]] = []

    def get_webform(self, webform_id: str) -> Optional[Dict[str, Any]]:
        return self.webforms.get(webform_id)

    def save_webform(self, webform_id, values, create=False):
        webform = self.webforms.setdefault(webform_id, {"id": webform_id})
        webform.update(values)
        return webform

    def set_elements(self, webform_id, elements):
        self.elements[webform_id] = elements

    def create_submission(self, submission: TargetSubmission) -> SubmissionResult:
        if submission.sid in self.failing_sids:
            raise TargetPlatformError(f"Submission {submission.sid} rejected", status_code=422)
        self.submissions.setdefault(submission.webform_id, []).append(submission)
        return SubmissionResult(sid=submission.sid, target_id=str(submission.sid))

    def get_node(self, nid):
        return self.nodes.get(nid)

    def link_node(self, nid, webform_id):
        if self.fail_link:
            raise TargetPlatformError("Node has no webform field", status_code=422)
        self.nodes[nid]["webform"] = webform_id

    def add_handler(self, webform_id, handler):
        self.handlers.setdefault(webform_id, []).append(handler)

    def list_submission_ids(self, webform_id):
        return [s.sid for s in self.submissions.get(webform_id, [])]

    def delete_submissions(self, webform_id, sids):
        self.deleted_chunks.append(list(sids))
        remaining = [s for s in self.submissions.get(webform_id, []) if s.sid not in sids]
        deleted = len(self.submissions.get(webform_id, [])) - len(remaining)
        self.submissions[webform_id] = remaining
        return deleted


class LegacySite:
    """Helper that writes rows into the legacy tables."""

    def __init__(self, engine) -> None:
        self.engine = engine

    def _insert(self, table, **values) -> None:
        with self.engine.begin() as conn:
            conn.execute(insert(table).values(**values))

    def add_form(self, nid, title="Contact us", confirmation="", redirect_url="", submit_text=""):
        self._insert(tables.node, nid=nid, type="webform", title=title)
        self._insert(
            tables.webform,
            nid=nid,
            confirmation=confirmation,
            redirect_url=redirect_url,
            submit_text=submit_text,
        )

    def add_component(self, nid, cid, form_key, type="textfield", name=None, extra=None,
                      mandatory=0, value="", weight=0):
        self._insert(
            tables.webform_component,
            nid=nid,
            cid=cid,
            pid=0,
            form_key=form_key,
            name=name if name is not None else form_key.replace("_", " ").title(),
            type=type,
            value=value,
            extra=extra if isinstance(extra, str) else serialize(extra or {}),
            mandatory=mandatory,
            weight=weight,
        )

    def add_submission(self, nid, sid, uid=1, remote_addr="127.0.0.1", submitted=1500000000, data=None):
        self._insert(
            tables.webform_submissions,
            nid=nid,
            sid=sid,
            uid=uid,
            remote_addr=remote_addr,
            submitted=submitted,
        )
        for cid, value in (data or {}).items():
            values = value if isinstance(value, list) else [value]
            for no, item in enumerate(values):
                self._insert(tables.webform_submitted_data, nid=nid, sid=sid, cid=cid, no=str(no), data=item)

    def add_email(self, nid, eid, email, subject="default", from_name=None,
                  from_address="default", template="default"):
        self._insert(
            tables.webform_emails,
            nid=nid,
            eid=eid,
            email=email,
            subject=subject,
            from_name=from_name,
            from_address=from_address,
            template=template,
        )


@pytest.fixture
def legacy_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    tables.legacy_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def legacy_site(legacy_engine):
    return LegacySite(legacy_engine)


@pytest.fixture
def reader(legacy_engine):
    return LegacyDatabaseReader(legacy_engine)


@pytest.fixture
def target():
    return FakeTargetPlatform()
