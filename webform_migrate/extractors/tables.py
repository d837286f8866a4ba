"""Legacy webform tables, described for SQLAlchemy Core queries."""

from sqlalchemy import Column, Integer, MetaData, String, Table, Text

legacy_metadata = MetaData()

node = Table(
    "node",
    legacy_metadata,
    Column("nid", Integer, primary_key=True),
    Column("type", String(32)),
    Column("title", String(255)),
)

webform = Table(
    "webform",
    legacy_metadata,
    Column("nid", Integer, primary_key=True),
    Column("confirmation", Text),
    Column("redirect_url", String(255)),
    Column("submit_text", String(255)),
)

webform_component = Table(
    "webform_component",
    legacy_metadata,
    Column("nid", Integer, primary_key=True),
    Column("cid", Integer, primary_key=True),
    Column("pid", Integer, default=0),
    Column("form_key", String(128)),
    Column("name", String(255)),
    Column("type", String(16)),
    Column("value", Text),
    Column("extra", Text),
    Column("mandatory", Integer, default=0),
    Column("weight", Integer, default=0),
)

webform_submissions = Table(
    "webform_submissions",
    legacy_metadata,
    Column("sid", Integer, primary_key=True),
    Column("nid", Integer),
    Column("uid", Integer, default=0),
    Column("submitted", Integer),
    Column("remote_addr", String(128)),
)

webform_submitted_data = Table(
    "webform_submitted_data",
    legacy_metadata,
    Column("nid", Integer, primary_key=True),
    Column("sid", Integer, primary_key=True),
    Column("cid", Integer, primary_key=True),
    Column("no", String(128), primary_key=True, default="0"),
    Column("data", Text),
)

webform_emails = Table(
    "webform_emails",
    legacy_metadata,
    Column("nid", Integer, primary_key=True),
    Column("eid", Integer, primary_key=True),
    Column("email", Text),
    Column("subject", String(255)),
    Column("from_name", String(255)),
    Column("from_address", String(255)),
    Column("template", Text),
)
