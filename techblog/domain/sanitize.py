import html
import re

_BLOCK_PATTERN = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_PATTERN = re.compile(r"</?[a-zA-Z][^>]*>")


def strip_markup(text: str) -> str:
    """
    Reduce user input to plain text.

    Script/style blocks are dropped with their bodies, other tags are removed
    and entities decoded. Repeats until stable so encoded markup such as
    "&lt;b&gt;" cannot survive as a tag.
    """
    previous = None
    while previous != text:
        previous = text
        text = _BLOCK_PATTERN.sub("", text)
        text = _COMMENT_PATTERN.sub("", text)
        text = _TAG_PATTERN.sub("", text)
        text = html.unescape(text)
    return text.strip()
