"""Webform migrator - coordinates the migration of legacy webforms."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .exceptions import LegacySourceError
from .models.legacy import LegacyForm, LegacySubmission
from .models.migration import (
    FormStep,
    MigrationConfig,
    MigrationRun,
    MigrationStatus,
)
from .extractors.base import BaseLegacyReader
from .extractors.legacy_db import LegacyDatabaseReader
from .loaders.base import BaseTargetPlatform
from .loaders.webform_api import WebformAPIClient
from .services.component_mapper import ComponentMapper, with_synthetic_components
from .services.confirmation import build_confirmation
from .services.email_mapper import EmailHandlerMapper
from .services.submission_mapper import map_submission
from .storage import StateStore

logger = logging.getLogger(__name__)


class WebformMigrator:
    """
    Migrates legacy webforms one at a time.

    For each legacy form:
    - Create or update the target webform
    - Set its confirmation behaviour
    - Import its components (unless an existing webform is left alone)
    - Import its submissions above the persisted low-water-mark
    - Link the originating node to the new webform
    - Attach one email handler per legacy email row
    """

    def __init__(
        self,
        config: MigrationConfig,
        reader: Optional[BaseLegacyReader] = None,
        target: Optional[BaseTargetPlatform] = None,
        state: Optional[StateStore] = None
    ):
        """
        Initialize the migrator.

        Args:
            config: Migration configuration
            reader: Legacy reader (defaults to the configured legacy database)
            target: Target platform client (defaults to the configured REST API)
            state: Persisted state (defaults to the configured state file)
        """
        self.config = config
        self._reader = reader
        self.target = target or WebformAPIClient(
            base_url=config.target_url,
            api_key=config.target_api_key,
            auth_type=config.target_auth_type,
            endpoints=config.target_endpoints,
            dry_run=config.simulate,
        )
        self.state = state or StateStore(config.state_file)
        self.run: Optional[MigrationRun] = None

    @property
    def reader(self) -> BaseLegacyReader:
        """Legacy reader, connected on first use; deletion never needs it."""
        if self._reader is None:
            self._reader = LegacyDatabaseReader(self.config.legacy_db_url)
        return self._reader

    def run_migration(self) -> MigrationRun:
        """
        Migrate the configured form, or every legacy form.

        A failing form is recorded and the run moves on to the next one.

        Returns:
            MigrationRun with per-form results and the error report
        """
        self.run = MigrationRun(simulate=self.config.simulate)
        self.run.started_at = datetime.utcnow()

        try:
            if self.config.nid is not None:
                nids = [self.config.nid]
            else:
                nids = self.reader.list_form_ids()
            logger.info(f"Migrating {len(nids)} webform(s)")

            for nid in nids:
                self.process_form(nid)

            failed = [f for f in self.run.forms if f.status == MigrationStatus.FAILED]
            self.run.status = MigrationStatus.FAILED if failed else MigrationStatus.COMPLETED

        except Exception as e:
            logger.error(f"Migration failed: {e}")
            self.run.status = MigrationStatus.FAILED
            self.run.add_error(str(e))

        finally:
            self.run.completed_at = datetime.utcnow()
            self.run.update_totals()
            self._log_error_report()
            if self.config.save_report:
                self._save_report()

        return self.run

    def process_form(self, nid: int) -> FormStep:
        """
        Import one legacy form, its components, submissions and handlers.

        Args:
            nid: Legacy node id of the form

        Returns:
            FormStep describing what happened
        """
        if self.run is None:
            self.run = MigrationRun(simulate=self.config.simulate)

        step = self.run.add_form(nid)
        step.started_at = datetime.utcnow()

        try:
            self.reader.reset()
            form = self.reader.get_form(nid)
            if form is None:
                raise LegacySourceError(f"No legacy webform found for node {nid}")
            step.warnings.extend(self.reader.warnings)

            step.status = MigrationStatus.CREATING_FORM
            _, should_continue = self.target.ensure_webform(
                form.webform_id, form.title, new_only=self.config.new_only
            )
            self._set_confirmation(form)

            step.status = MigrationStatus.IMPORTING_COMPONENTS
            if should_continue:
                logger.info(f"Form {nid}: Processing components")
                step.components_imported = self._import_components(form)
            else:
                logger.info(f"Form {nid}: NOT processing components")
                step.components_skipped = True

            step.status = MigrationStatus.IMPORTING_SUBMISSIONS
            self._import_submissions(form, step)

            step.status = MigrationStatus.LINKING_NODE
            self._link_node(form, step)

            step.status = MigrationStatus.ATTACHING_HANDLERS
            logger.info("Adding email handlers associated with this webform")
            step.handlers_attached = self._attach_email_handlers(form)

            step.status = MigrationStatus.COMPLETED
            logger.info(
                f"Form {nid}: imported {step.submissions_succeeded}/{step.submissions_processed} submissions"
            )

        except Exception as e:
            logger.error(f"Form {nid} failed during {step.status.value}: {e}")
            step.errors.append({"phase": step.status.value, "error": str(e)})
            self.run.add_error(str(e), nid=nid, phase=step.status.value)
            step.status = MigrationStatus.FAILED

        finally:
            step.completed_at = datetime.utcnow()

        return step

    def _set_confirmation(self, form: LegacyForm) -> None:
        settings = build_confirmation(form)
        logger.debug(f"Form {form.nid}: confirmation type {settings.confirmation_type.value}")
        self.target.save_webform(
            form.webform_id,
            {"title": form.title, "settings": settings.to_dict()},
            create=False,
        )

    def build_elements(self, form: LegacyForm) -> Dict[str, Dict[str, Any]]:
        """Map the components of a form to target elements without writing them."""
        components = with_synthetic_components(form, self.reader.get_components(form.nid))
        return ComponentMapper(form, components).to_form_array()

    def _import_components(self, form: LegacyForm) -> int:
        elements = self.build_elements(form)
        self.target.set_elements(form.webform_id, elements)
        return len(elements)

    def select_submissions(self, form: LegacyForm, step: Optional[FormStep] = None) -> List[LegacySubmission]:
        """
        Read the submissions of a form that still need importing.

        Honors max_submissions, skips ids at or below the low-water-mark, and
        drops submissions that have no submitted data.
        """
        max_submissions = self.config.max_submissions
        if max_submissions == 0:
            logger.info("max_submissions is 0, so no submissions will be loaded")
            return []

        first_sid = self.state.first_sid()
        logger.info(f"Only getting submission ids > {first_sid} because we have already imported the others")
        if max_submissions is not None:
            logger.info(f"max_submissions is {max_submissions}, so only some submissions will be processed")

        headers = self.reader.get_submissions(form.nid, after_sid=first_sid, limit=max_submissions)
        submitted_data = self.reader.get_submitted_data(form.nid)

        submissions = []
        for submission in headers:
            data = submitted_data.get(submission.sid)
            if not data:
                logger.info(f"Legacy submission {submission.sid} has no associated data, ignoring it")
                if step is not None:
                    step.submissions_skipped += 1
                continue
            submission.data = data
            submissions.append(submission)

        return submissions

    def _import_submissions(self, form: LegacyForm, step: FormStep) -> None:
        for submission in self.select_submissions(form, step):
            logger.info(
                f"Form {form.nid}: Processing submission {submission.sid} with user {submission.uid}"
            )
            step.submissions_processed += 1
            try:
                result = self.target.create_submission(map_submission(form, submission))
                step.target_ids[submission.sid] = result.target_id
                step.submissions_succeeded += 1
                step.last_sid = max(step.last_sid or 0, submission.sid)
            except Exception as e:
                logger.error(
                    f"ERROR with submission {submission.sid} "
                    f"(errors and possible fixes will be shown at the end of the process)"
                )
                step.submissions_failed += 1
                self.run.add_error(str(e), nid=form.nid, sid=submission.sid)

    def _link_node(self, form: LegacyForm, step: FormStep) -> None:
        if self.config.simulate:
            logger.info("SIMULATE: Linking node to the webform we just created.")
            return

        try:
            node = self.target.get_node(form.nid)
            if node is None:
                logger.info(f"Node {form.nid} does not exist on the target environment, moving on...")
                return
            logger.info(f"Linking node {form.nid} to the webform we just created.")
            self.target.link_node(form.nid, form.webform_id)
            step.node_linked = True
        except Exception as e:
            message = (
                f"Node {form.nid} exists on the target environment, but we could not set "
                f"the webform field to the appropriate webform, moving on... ({e})"
            )
            logger.warning(message)
            step.warnings.append(message)

    def _attach_email_handlers(self, form: LegacyForm) -> int:
        emails = self.reader.get_emails(form.nid)
        if not emails:
            return 0

        mapper = EmailHandlerMapper(form, self.reader.get_component_keys(form.nid))
        handlers = mapper.map_all(emails)
        for handler in handlers:
            self.target.add_handler(form.webform_id, handler)
        return len(handlers)

    def delete_submissions(self, nid: int) -> int:
        """
        Delete every migrated submission of a form, in chunks.

        The chunk size comes from the persisted 'max_delete_items' state.

        Returns:
            Number of submissions deleted
        """
        if self.config.simulate:
            logger.info("SIMULATE: Delete submissions for webform before reimporting them.")
            return 0

        webform_id = f"webform_{nid}"
        sids = self.target.list_submission_ids(webform_id)
        chunk_size = self.state.max_delete_items()
        if chunk_size < 1:
            raise ValueError(f"max_delete_items must be at least 1, got {chunk_size}")

        chunks = list(self._chunk_iterator(sids, chunk_size))
        logger.info(
            f"Will delete {len(sids)} submissions in chunks of {chunk_size} "
            f"to avoid out of memory errors; {len(chunks)} chunks generated."
        )

        deleted = 0
        for chunk in chunks:
            logger.info(f"Deleting {len(chunk)} submissions for webform {nid}")
            deleted += self.target.delete_submissions(webform_id, chunk)
        return deleted

    def _chunk_iterator(self, items: List[int], chunk_size: int) -> Iterator[List[int]]:
        """Iterate over items in chunks."""
        for i in range(0, len(items), chunk_size):
            yield items[i:i + chunk_size]

    def _log_error_report(self) -> None:
        if not self.run.errors:
            return
        logger.error(f"{len(self.run.errors)} error(s) occurred during the migration:")
        for error in self.run.errors:
            where = ", ".join(f"{k}={v}" for k, v in error.items() if k in ("nid", "sid", "phase"))
            logger.error(f"  - {error['error']}" + (f" ({where})" if where else ""))

    def _save_report(self) -> None:
        """Save the migration report."""
        logs_dir = Path(self.config.output_dir) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        filepath = logs_dir / f"migration_report_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.json"
        with open(filepath, 'w') as f:
            json.dump(self.run.to_dict(), f, indent=2, default=str)
        logger.info(f"Saved migration report to {filepath}")
