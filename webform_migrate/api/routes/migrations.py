"""Migration execution endpoints."""

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException

from ..models import (
    DeleteSubmissionsResponse,
    FormResult,
    MigrationRunRequest,
    MigrationRunResponse,
)
from ...exceptions import MigrationError
from ...models.migration import MigrationConfig
from ...orchestrator import WebformMigrator

router = APIRouter()


def get_migrator_factory() -> Callable[[MigrationConfig], WebformMigrator]:
    """Dependency returning a callable that builds a migrator for a config."""
    return WebformMigrator


def _config_for(data: MigrationRunRequest) -> MigrationConfig:
    config = MigrationConfig.from_dict({})
    config.nid = data.nid
    config.simulate = data.simulate
    config.new_only = data.new_only
    config.max_submissions = data.max_submissions
    return config


@router.post("/run", response_model=MigrationRunResponse)
def run_migration(
    data: MigrationRunRequest,
    factory: Callable[[MigrationConfig], WebformMigrator] = Depends(get_migrator_factory),
):
    """Run a migration for one legacy form or all of them."""
    try:
        migrator = factory(_config_for(data))
    except MigrationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    run = migrator.run_migration()

    return MigrationRunResponse(
        id=run.id,
        status=run.status.value,
        simulate=run.simulate,
        forms=[
            FormResult(
                nid=step.nid,
                webform_id=step.webform_id,
                status=step.status.value,
                components_imported=step.components_imported,
                components_skipped=step.components_skipped,
                submissions_processed=step.submissions_processed,
                submissions_succeeded=step.submissions_succeeded,
                submissions_failed=step.submissions_failed,
                submissions_skipped=step.submissions_skipped,
                node_linked=step.node_linked,
                handlers_attached=step.handlers_attached,
                warnings=step.warnings,
            )
            for step in run.forms
        ],
        total_submissions_processed=run.total_submissions_processed,
        total_submissions_succeeded=run.total_submissions_succeeded,
        total_submissions_failed=run.total_submissions_failed,
        errors=run.errors,
    )


@router.post("/{nid}/delete-submissions", response_model=DeleteSubmissionsResponse)
def delete_submissions(
    nid: int,
    simulate: bool = True,
    factory: Callable[[MigrationConfig], WebformMigrator] = Depends(get_migrator_factory),
):
    """Delete the migrated submissions of a webform."""
    config = MigrationConfig.from_dict({})
    config.simulate = simulate
    try:
        deleted = factory(config).delete_submissions(nid)
    except MigrationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return DeleteSubmissionsResponse(webform_id=f"webform_{nid}", deleted=deleted)
