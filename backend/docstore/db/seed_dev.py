"""Dev seeding helper: a demo user and a small linked document."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

from backend.docstore.config import get_settings
from backend.docstore.db.context import unit_of_work
from backend.docstore.db.engine import get_async_engine
from backend.docstore.db.pages import SqlPageRepository
from backend.docstore.db.users import ensure_user
from backend.docstore.models.pages import Page, PageMeta, PageModel
from backend.docstore.search.factory import build_search_index

DEV_ORG_ID = "00000000000000000000000000000001"
DEV_USER_EMAIL = "dev@example.com"
DEV_DOCUMENT_ID = "00000000000000000000000000000100"


async def seed_dev_document(engine: AsyncEngine | None = None) -> list[str]:
    """Seed the dev user and, if the demo document is empty, two linked pages.

    Safe to run multiple times.

    Returns:
        Page ids of the demo document, in sequence order
    """
    engine = engine or get_async_engine()

    async with unit_of_work(DEV_ORG_ID, "seed", engine) as ctx:
        user = await ensure_user(ctx.session, DEV_USER_EMAIL, "Dev", "User", "DU")

    async with unit_of_work(DEV_ORG_ID, user.refid, engine) as ctx:
        repo = SqlPageRepository(ctx, build_search_index(get_settings(), ctx.session))

        pages = await repo.get_pages_without_content(DEV_DOCUMENT_ID)
        if pages:
            print(f"Demo document already has {len(pages)} pages")
            return [p.ref_id for p in pages]

        intro = await repo.add_page(
            PageModel(
                page=Page(document_id=DEV_DOCUMENT_ID, title="Introduction", body="<p>Welcome</p>"),
                meta=PageMeta(raw_body="Welcome"),
            )
        )
        details = await repo.add_page(
            PageModel(
                page=Page(
                    document_id=DEV_DOCUMENT_ID,
                    title="Details",
                    level=2,
                    body=(
                        "<p>Back to the "
                        f'<a data-content-link data-link-target-document-id="{DEV_DOCUMENT_ID}" '
                        f'data-link-target-id="{intro.page.ref_id}" data-link-type="section">'
                        "introduction</a></p>"
                    ),
                ),
            )
        )
        # Record the outgoing link from the page body
        await repo.update_page(details.page, "", user.refid, skip_revision=True)

    print("✅ Dev seeding complete")
    return [intro.page.ref_id, details.page.ref_id]


if __name__ == "__main__":
    asyncio.run(seed_dev_document())
