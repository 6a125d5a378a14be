"""Export JSON schemas for the page, revision and link models."""

import json
from pathlib import Path

from backend.docstore.models import ContentLink, PageModel, Revision, RevisionSummary


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in (PageModel, Revision, RevisionSummary, ContentLink):
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(), f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
