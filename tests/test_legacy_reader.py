from datetime import datetime, timezone

import pytest

from webform_migrate.exceptions import ComponentError, LegacySourceError
from webform_migrate.extractors.legacy_db import LegacyDatabaseReader


def test_empty_url_is_rejected():
    with pytest.raises(LegacySourceError):
        LegacyDatabaseReader("")


def test_list_and_get_form(legacy_site, reader):
    legacy_site.add_form(7, title="Newsletter", confirmation="Thanks", redirect_url="<none>", submit_text="Join")
    legacy_site.add_form(3, title="Contact")

    assert reader.list_form_ids() == [3, 7]

    form = reader.get_form(7)
    assert form.title == "Newsletter"
    assert form.confirmation == "Thanks"
    assert form.redirect_url == "<none>"
    assert form.submit_text == "Join"
    assert form.webform_id == "webform_7"
    assert reader.get_form(99) is None


def test_components_are_ordered_by_weight_and_decoded(legacy_site, reader):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 2, "last_name", weight=5, mandatory=1)
    legacy_site.add_component(1, 1, "topics", type="select", weight=1,
                              extra={"items": "a|A\nb|B", "aslist": 0, "multiple": 1})

    components = reader.get_components(1)

    assert [c.form_key for c in components] == ["topics", "last_name"]
    assert components[0].extra == {"items": "a|A\nb|B", "aslist": 0, "multiple": 1}
    assert components[1].required is True
    assert reader.get_component_keys(1) == {1: "topics", 2: "last_name"}


def test_malformed_extra_raises_component_error(legacy_site, reader):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "broken", extra='a:2:{s:5:"items"')

    with pytest.raises(ComponentError):
        reader.get_components(1)


def test_submissions_after_low_water_mark(legacy_site, reader):
    legacy_site.add_form(1)
    for sid in (10, 11, 12, 13):
        legacy_site.add_submission(1, sid, uid=sid, submitted=1500000000)

    submissions = reader.get_submissions(1, after_sid=11)
    assert [s.sid for s in submissions] == [12, 13]
    assert submissions[0].submitted == datetime.fromtimestamp(1500000000, tz=timezone.utc)

    assert [s.sid for s in reader.get_submissions(1, limit=2)] == [10, 11]


def test_submitted_data_grouped_by_sid_and_form_key(legacy_site, reader):
    legacy_site.add_form(1)
    legacy_site.add_component(1, 1, "name")
    legacy_site.add_component(1, 2, "topics", type="select")
    legacy_site.add_submission(1, 10, data={1: "Ada", 2: ["a", "b"]})
    legacy_site.add_submission(1, 11, data={1: "Grace"})

    data = reader.get_submitted_data(1)

    assert data == {
        10: {"name": "Ada", "topics": ["a", "b"]},
        11: {"name": "Grace"},
    }


def test_emails(legacy_site, reader):
    legacy_site.add_form(1)
    legacy_site.add_email(1, 2, "sales@example.com", subject="%title")
    legacy_site.add_email(1, 1, "3")

    emails = reader.get_emails(1)

    assert [e.eid for e in emails] == [1, 2]
    assert emails[0].subject == "default"
    assert emails[0].from_name is None
    assert emails[1].subject == "%title"


def test_empty_email_subject_is_not_treated_as_default(legacy_site, reader):
    legacy_site.add_form(1)
    legacy_site.add_email(1, 1, "sales@example.com", subject="", template="")

    [email] = reader.get_emails(1)

    assert email.subject == ""
    assert email.template == ""
