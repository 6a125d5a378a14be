"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- user
- page, pagemeta
- revision
- link
- search
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # user table
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("refid", sa.String(32), nullable=False, unique=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("firstname", sa.Text(), nullable=False, server_default=""),
        sa.Column("lastname", sa.Text(), nullable=False, server_default=""),
        sa.Column("initials", sa.Text(), nullable=False, server_default=""),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )

    # page table
    op.create_table(
        "page",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("refid", sa.String(32), nullable=False, unique=True),
        sa.Column("orgid", sa.String(32), nullable=False),
        sa.Column("documentid", sa.String(32), nullable=False),
        sa.Column("userid", sa.String(32), nullable=False, server_default=""),
        sa.Column("contenttype", sa.String(20), nullable=False, server_default="wysiwyg"),
        sa.Column("pagetype", sa.String(10), nullable=False, server_default="section"),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("title", sa.Text(), nullable=False, server_default=""),
        sa.Column("body", sa.Text(), nullable=False, server_default=""),
        sa.Column("revisions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sequence", sa.Float(), nullable=False, server_default="0"),
        sa.Column("blockid", sa.String(32), nullable=False, server_default=""),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revised", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_page_org_doc", "page", ["orgid", "documentid", "sequence"])

    # pagemeta table
    op.create_table(
        "pagemeta",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("pageid", sa.String(32), nullable=False),
        sa.Column("orgid", sa.String(32), nullable=False),
        sa.Column("userid", sa.String(32), nullable=False, server_default=""),
        sa.Column("documentid", sa.String(32), nullable=False),
        sa.Column("rawbody", sa.Text(), nullable=False, server_default=""),
        sa.Column("config", sa.Text(), nullable=True),
        sa.Column("externalsource", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revised", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("orgid", "pageid", name="uq_pagemeta_org_page"),
    )
    op.create_index("idx_pagemeta_org_doc", "pagemeta", ["orgid", "documentid"])

    # revision table
    op.create_table(
        "revision",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("refid", sa.String(32), nullable=False, unique=True),
        sa.Column("orgid", sa.String(32), nullable=False),
        sa.Column("documentid", sa.String(32), nullable=False),
        sa.Column("ownerid", sa.String(32), nullable=False),
        sa.Column("pageid", sa.String(32), nullable=False),
        sa.Column("userid", sa.String(32), nullable=False),
        sa.Column("contenttype", sa.String(20), nullable=False),
        sa.Column("pagetype", sa.String(10), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("rawbody", sa.Text(), nullable=True),
        sa.Column("config", sa.Text(), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revised", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_revision_org_doc", "revision", ["orgid", "documentid"])
    op.create_index("idx_revision_org_page", "revision", ["orgid", "pageid"])

    # link table
    op.create_table(
        "link",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("refid", sa.String(32), nullable=False, unique=True),
        sa.Column("orgid", sa.String(32), nullable=False),
        sa.Column("spaceid", sa.String(32), nullable=False, server_default=""),
        sa.Column("userid", sa.String(32), nullable=False),
        sa.Column("linktype", sa.String(20), nullable=False),
        sa.Column("sourcedocumentid", sa.String(32), nullable=False),
        sa.Column("sourcepageid", sa.String(32), nullable=False),
        sa.Column("targetdocumentid", sa.String(32), nullable=False),
        sa.Column("targetid", sa.String(32), nullable=False, server_default=""),
        sa.Column("orphan", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revised", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_link_org_source", "link", ["orgid", "sourcedocumentid", "sourcepageid"])
    op.create_index("idx_link_org_target", "link", ["orgid", "targetdocumentid", "targetid"])

    # search table
    op.create_table(
        "search",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("orgid", sa.String(32), nullable=False),
        sa.Column("documentid", sa.String(32), nullable=False),
        sa.Column("pageid", sa.String(32), nullable=False),
        sa.Column("pagetitle", sa.Text(), nullable=False, server_default=""),
        sa.Column("body", sa.Text(), nullable=False, server_default=""),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("sequence", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revised", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("orgid", "pageid", name="uq_search_org_page"),
    )
    op.create_index("idx_search_org_doc", "search", ["orgid", "documentid"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("search")
    op.drop_table("link")
    op.drop_table("revision")
    op.drop_table("pagemeta")
    op.drop_table("page")
    op.drop_table("user")
