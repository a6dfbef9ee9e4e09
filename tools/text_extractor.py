"""
Text Extractor Tool — turns provider description fields into clean plain text.
Uses BeautifulSoup when the text carries HTML markup.
"""

import re
from bs4 import BeautifulSoup


_HTML_TAG = re.compile(r"<[a-zA-Z/][^>]*>")


def clean_description(text, max_length: int = 5000) -> str:
    """
    Convert a description (plain text or HTML) into readable plain text.

    Removes scripts and styles, keeps paragraph breaks as single newlines,
    collapses runs of spaces, and truncates very long descriptions.

    Args:
        text: Raw description from the provider.
        max_length: Maximum character length of the result.

    Returns:
        Cleaned text ("" for empty or non-string input).
    """
    if not text or not isinstance(text, str):
        return ""

    if _HTML_TAG.search(text):
        soup = BeautifulSoup(text, "html.parser")

        # Remove elements that don't contain readable content
        for element in soup.find_all(["script", "style", "noscript", "svg", "iframe"]):
            element.decompose()

        text = soup.get_text(separator="\n", strip=True)

    # Collapse multiple blank lines and spaces
    text = re.sub(r"[ \t\r\f\v]+", " ", text)
    text = re.sub(r"\n\s*\n+", "\n", text)
    text = text.strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip() + "..."

    return text
