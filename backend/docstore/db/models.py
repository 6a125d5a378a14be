"""SQLAlchemy ORM models for pages, page meta, revisions, links and search."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

REF_ID_LENGTH = 32


def new_ref_id() -> str:
    """Generate a fresh reference id."""
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class User(Base):
    """User table - author display fields joined into revision listings."""

    __tablename__ = "user"
    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    refid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    firstname: Mapped[str] = mapped_column(Text, nullable=False, default="")
    lastname: Mapped[str] = mapped_column(Text, nullable=False, default="")
    initials: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class Page(Base):
    """Page table - one titled section of a document."""

    __tablename__ = "page"
    __table_args__ = (Index("idx_page_org_doc", "orgid", "documentid", "sequence"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    refid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), unique=True, nullable=False)
    orgid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    documentid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    userid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False, default="")
    contenttype: Mapped[str] = mapped_column(String(20), nullable=False, default="wysiwyg")
    pagetype: Mapped[str] = mapped_column(String(10), nullable=False, default="section")
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    revisions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sequence: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    blockid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False, default="")
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revised: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PageMeta(Base):
    """Page meta table - raw body and config sidecar, 1:1 with page."""

    __tablename__ = "pagemeta"
    __table_args__ = (
        UniqueConstraint("orgid", "pageid", name="uq_pagemeta_org_page"),
        Index("idx_pagemeta_org_doc", "orgid", "documentid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pageid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    orgid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    userid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False, default="")
    documentid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    rawbody: Mapped[str] = mapped_column(Text, nullable=False, default="")
    config: Mapped[str | None] = mapped_column(Text, nullable=True)
    externalsource: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revised: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Revision(Base):
    """Revision table - immutable snapshot of page + page meta."""

    __tablename__ = "revision"
    __table_args__ = (
        Index("idx_revision_org_doc", "orgid", "documentid"),
        Index("idx_revision_org_page", "orgid", "pageid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    refid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), unique=True, nullable=False)
    orgid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    documentid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    ownerid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    pageid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    userid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    contenttype: Mapped[str] = mapped_column(String(20), nullable=False)
    pagetype: Mapped[str] = mapped_column(String(10), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    rawbody: Mapped[str | None] = mapped_column(Text, nullable=True)
    config: Mapped[str | None] = mapped_column(Text, nullable=True)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revised: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Link(Base):
    """Content link table - directed reference from a page to a page or document."""

    __tablename__ = "link"
    __table_args__ = (
        Index("idx_link_org_source", "orgid", "sourcedocumentid", "sourcepageid"),
        Index("idx_link_org_target", "orgid", "targetdocumentid", "targetid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    refid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), unique=True, nullable=False)
    orgid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    spaceid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False, default="")
    userid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    linktype: Mapped[str] = mapped_column(String(20), nullable=False)
    sourcedocumentid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    sourcepageid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    targetdocumentid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    targetid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False, default="")
    orphan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revised: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SearchEntry(Base):
    """Search table - plain-text index of page content, one row per page."""

    __tablename__ = "search"
    __table_args__ = (
        UniqueConstraint("orgid", "pageid", name="uq_search_org_page"),
        Index("idx_search_org_doc", "orgid", "documentid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    orgid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    documentid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    pageid: Mapped[str] = mapped_column(String(REF_ID_LENGTH), nullable=False)
    pagetitle: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    sequence: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revised: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
