"""HTML helpers shared by link extraction and search indexing."""

from bs4 import BeautifulSoup

# BeautifulSoup tree builder for rendered page bodies
HTML_PARSER = "lxml"


def html_to_text(body: str, parser: str = HTML_PARSER) -> str:
    """Strip markup from rendered HTML, keeping visible text."""
    if not body:
        return ""
    return BeautifulSoup(body, parser).get_text(" ", strip=True)
