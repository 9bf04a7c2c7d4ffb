import re

SEO_DESCRIPTION_LENGTH = 160
IMPORT_DESCRIPTION_LENGTH = 155


def strip_markdown(markdown: str) -> str:
    """Plain text from Markdown: headers, emphasis, links, images, quotes, code, rules."""
    if not markdown:
        return ""

    text = markdown
    text = re.sub(r"^#+\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"(\*\*|__)(.*?)\1", r"\2", text)
    text = re.sub(r"(\*|_)(.*?)\1", r"\2", text)
    # Images before links, otherwise the link rule eats the image's brackets
    text = re.sub(r"!\[([^\]]*)\]\([^)]+\)", r"\1", text)
    text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text)
    text = re.sub(r"^>\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"```[\s\S]*?```", "", text)
    text = re.sub(r"`([^`]+)`", r"\1", text)
    text = re.sub(r"^---$", "", text, flags=re.MULTILINE)
    return re.sub(r"\s+", " ", text).strip()


def default_seo_description(content: str) -> str:
    return strip_markdown(content)[:SEO_DESCRIPTION_LENGTH]


def import_seo_description(content: str) -> str:
    """Description for imported posts: markers removed, 155 chars, ellipsis."""
    if not content:
        return ""
    return re.sub(r"[#*`]", "", content)[:IMPORT_DESCRIPTION_LENGTH].strip() + "..."
