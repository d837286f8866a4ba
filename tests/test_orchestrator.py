import json
from unittest.mock import MagicMock

import pytest
import requests

from webform_migrate.loaders.webform_api import WebformAPIClient
from webform_migrate.models.migration import MigrationConfig, MigrationStatus
from webform_migrate.orchestrator import WebformMigrator
from webform_migrate.storage import LAST_IMPORTED_SID, MAX_DELETE_ITEMS, StateStore
from webform_migrate.models.target import TargetSubmission


@pytest.fixture
def make_migrator(reader, target, tmp_path):
    def factory(**options):
        config = MigrationConfig(output_dir=str(tmp_path / "out"), state_file="", **options)
        return WebformMigrator(config, reader=reader, target=target, state=StateStore())
    return factory


def test_end_to_end_form_42(legacy_site, target, make_migrator):
    legacy_site.add_form(42, title="Download the report", confirmation="Thanks!", redirect_url="<none>")
    legacy_site.add_component(42, 1, "email", type="email", name="Email", weight=0)
    legacy_site.add_component(42, 2, "utm_source", type="hidden", name="UTM source", weight=1)
    legacy_site.add_submission(42, 100, data={1: "ada@example.com", 2: "newsletter"})
    legacy_site.add_email(42, 1, "1", subject="New download: %title")
    target.nodes[42] = {"nid": 42}

    run = make_migrator(nid=42).run_migration()

    assert run.status == MigrationStatus.COMPLETED
    elements = target.elements["webform_42"]
    assert elements["email"]["#default_value"] == "[current-user:mail]"
    assert elements["utm_source"]["#default_value"] == "[current-page:query:utm_source:clear]"
    assert list(elements) == ["email", "utm_source", "actions", "add_to_schedule"]

    webform = target.webforms["webform_42"]
    assert webform["title"] == "Download the report"
    assert webform["settings"]["confirmation_type"] == "message"

    [submission] = target.submissions["webform_42"]
    assert submission.data == {"email": "ada@example.com", "utm_source": "newsletter"}

    assert target.nodes[42]["webform"] == "webform_42"

    [handler] = target.handlers["webform_42"]
    assert handler.to_mail == "[webform_submission:values:email:raw]"
    assert handler.subject == "New download: [webform_submission:source-title]"

    step = run.get_form(42)
    assert step.components_imported == 4
    assert step.submissions_succeeded == 1
    assert step.node_linked is True
    assert step.handlers_attached == 1


def test_submission_without_data_is_skipped(legacy_site, target, make_migrator):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "name")
    legacy_site.add_submission(1, 10, data={1: "Ada"})
    legacy_site.add_submission(1, 11, data={})

    run = make_migrator(nid=1).run_migration()

    assert [s.sid for s in target.submissions["webform_1"]] == [10]
    assert run.get_form(1).submissions_skipped == 1
    assert run.get_form(1).submissions_processed == 1


def test_failed_submission_does_not_abort_the_batch(legacy_site, target, make_migrator):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "name")
    for sid in (10, 11, 12):
        legacy_site.add_submission(1, sid, data={1: f"user {sid}"})
    target.failing_sids.add(11)

    run = make_migrator(nid=1).run_migration()

    assert [s.sid for s in target.submissions["webform_1"]] == [10, 12]
    step = run.get_form(1)
    assert step.status == MigrationStatus.COMPLETED
    assert step.submissions_failed == 1
    assert step.last_sid == 12
    assert run.total_submissions_failed == 1
    assert run.errors[0]["error"] == "Submission 11 rejected"
    assert run.errors[0]["sid"] == 11


def test_max_submissions_caps_and_zero_loads_nothing(legacy_site, target, make_migrator):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "name")
    for sid in (10, 11, 12):
        legacy_site.add_submission(1, sid, data={1: "x"})

    make_migrator(nid=1, max_submissions=0).run_migration()
    assert "webform_1" not in target.submissions

    make_migrator(nid=1, max_submissions=2).run_migration()
    assert [s.sid for s in target.submissions["webform_1"]] == [10, 11]


def test_low_water_mark_skips_imported_submissions(legacy_site, reader, target, tmp_path):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "name")
    for sid in (10, 11, 12):
        legacy_site.add_submission(1, sid, data={1: "x"})
    state = StateStore(tmp_path / "state.json")
    state.set(LAST_IMPORTED_SID, 11)

    config = MigrationConfig(nid=1, save_report=False)
    WebformMigrator(config, reader=reader, target=target, state=state).run_migration()

    assert [s.sid for s in target.submissions["webform_1"]] == [12]


def test_new_only_skips_components_of_existing_webform(legacy_site, target, make_migrator):
    legacy_site.add_form(1, title="Contact")
    legacy_site.add_component(1, 1, "name")
    legacy_site.add_submission(1, 10, data={1: "Ada"})
    target.webforms["webform_1"] = {"id": "webform_1", "title": "Old title"}

    run = make_migrator(nid=1, new_only=True).run_migration()

    step = run.get_form(1)
    assert step.components_skipped is True
    assert "webform_1" not in target.elements
    assert len(target.submissions["webform_1"]) == 1


def test_node_link_failure_is_not_fatal(legacy_site, target, make_migrator):
    legacy_site.add_form(1)
    legacy_site.add_email(1, 1, "sales@example.com")
    target.nodes[1] = {"nid": 1}
    target.fail_link = True

    run = make_migrator(nid=1).run_migration()

    step = run.get_form(1)
    assert step.status == MigrationStatus.COMPLETED
    assert step.node_linked is False
    assert "could not set the webform field" in step.warnings[0]
    assert step.handlers_attached == 1


def test_missing_node_is_skipped(legacy_site, target, make_migrator):
    legacy_site.add_form(1)

    run = make_migrator(nid=1).run_migration()

    assert run.get_form(1).node_linked is False
    assert run.status == MigrationStatus.COMPLETED


def test_malformed_component_fails_the_form_but_not_the_batch(legacy_site, target, make_migrator):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "broken", extra='a:1:{s:5:"items"')
    legacy_site.add_form(2)
    legacy_site.add_component(2, 1, "name")

    run = make_migrator().run_migration()

    assert run.get_form(1).status == MigrationStatus.FAILED
    assert run.get_form(1).errors[0]["phase"] == "importing_components"
    assert run.get_form(2).status == MigrationStatus.COMPLETED
    assert run.status == MigrationStatus.FAILED
    assert "webform_2" in target.elements


def test_unknown_form_is_reported(make_migrator):
    run = make_migrator(nid=404).run_migration()

    assert run.get_form(404).status == MigrationStatus.FAILED
    assert "No legacy webform found" in run.errors[0]["error"]


def test_report_is_saved(legacy_site, make_migrator, tmp_path):
    legacy_site.add_form(1)

    run = make_migrator(nid=1).run_migration()

    [report] = (tmp_path / "out" / "logs").glob("migration_report_*.json")
    assert json.loads(report.read_text())["id"] == run.id


def test_simulate_does_not_link_nodes(legacy_site, target, make_migrator):
    legacy_site.add_form(1)
    target.nodes[1] = {"nid": 1}

    make_migrator(nid=1, simulate=True).run_migration()

    assert "webform" not in target.nodes[1]


def test_delete_submissions_in_chunks(target, reader, tmp_path):
    target.submissions["webform_5"] = [TargetSubmission(webform_id="webform_5", sid=sid) for sid in range(1, 8)]
    state = StateStore()
    state.set(MAX_DELETE_ITEMS, 3)
    migrator = WebformMigrator(MigrationConfig(save_report=False), reader=reader, target=target, state=state)

    deleted = migrator.delete_submissions(5)

    assert deleted == 7
    assert target.deleted_chunks == [[1, 2, 3], [4, 5, 6], [7]]
    assert target.submissions["webform_5"] == []


def test_delete_submissions_simulated(target, reader):
    target.submissions["webform_5"] = [TargetSubmission(webform_id="webform_5", sid=1)]
    config = MigrationConfig(simulate=True, save_report=False)
    migrator = WebformMigrator(config, reader=reader, target=target, state=StateStore())

    assert migrator.delete_submissions(5) == 0
    assert target.deleted_chunks == []


def test_reader_warnings_are_reported_on_the_form(legacy_site, target, make_migrator):
    legacy_site.add_form(1, title="")

    run = make_migrator(nid=1).run_migration()

    assert target.webforms["webform_1"]["title"] == "Webform 1"
    assert run.get_form(1).warnings == ["Form 1 has no node title, using 'Webform 1'"]


def test_html_reply_to_node_link_is_not_fatal(legacy_site, reader):
    legacy_site.add_form(1)
    legacy_site.add_email(1, 1, "sales@example.com")

    def respond(method, url, **kwargs):
        response = requests.Response()
        response.status_code = 200
        response.url = url
        response.encoding = "utf-8"
        response._content = b"{}"
        if method == "GET" and url.endswith("/api/webform/webform_1"):
            response.status_code = 404
        elif method == "GET" and url.endswith("/api/node/1"):
            response._content = b'{"nid": 1}'
        elif method == "PATCH" and url.endswith("/api/node/1"):
            response._content = b"<html>Saved</html>"
        return response

    session = MagicMock(spec=requests.Session)
    session.request.side_effect = respond
    target = WebformAPIClient("https://target.example.com", session=session)
    config = MigrationConfig(nid=1, save_report=False)

    run = WebformMigrator(config, reader=reader, target=target, state=StateStore()).run_migration()

    step = run.get_form(1)
    assert step.status == MigrationStatus.COMPLETED
    assert step.node_linked is False
    assert "could not set the webform field" in step.warnings[0]
    assert step.handlers_attached == 1


def test_node_link_unexpected_error_is_not_fatal(legacy_site, target, make_migrator):
    legacy_site.add_form(1)
    target.nodes[1] = {"nid": 1}
    target.link_node = MagicMock(side_effect=KeyError("webform"))

    run = make_migrator(nid=1).run_migration()

    assert run.get_form(1).status == MigrationStatus.COMPLETED
    assert run.get_form(1).node_linked is False


def test_zero_delete_chunk_size_is_rejected(target, reader):
    target.submissions["webform_5"] = [TargetSubmission(webform_id="webform_5", sid=1)]
    state = StateStore()
    state.set(MAX_DELETE_ITEMS, 0)
    migrator = WebformMigrator(MigrationConfig(save_report=False), reader=reader, target=target, state=state)

    with pytest.raises(ValueError):
        migrator.delete_submissions(5)
    assert target.deleted_chunks == []


def test_target_ids_are_recorded_per_submission(legacy_site, make_migrator):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "name")
    legacy_site.add_submission(1, 10, data={1: "Ada"})
    legacy_site.add_submission(1, 11, data={1: "Grace"})

    run = make_migrator(nid=1).run_migration()

    step = run.get_form(1)
    assert step.target_ids == {10: "10", 11: "11"}
    assert step.to_dict()["target_ids"] == {10: "10", 11: "11"}
    assert step.to_dict()["duration_seconds"] is not None
