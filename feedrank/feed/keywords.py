"""
Keyword extraction from titles, channel names and descriptions.
"""
import re
from typing import Optional

# One pass over the text keeps tokens in source order.
_TOKEN_PATTERN = re.compile(
    r"(#[^\s#]+)"        # hashtag, kept verbatim
    r"|\[([^\]]*)\]"     # [bracketed]
    r"|【([^】]*)】"      # 【fullwidth bracketed】
    r"|([^\W_]+)",       # plain word (letters/digits, any script)
)

# URL fragments; any word starting with one of these is dropped.
BOILERPLATE_PREFIXES = ("http", "www", "com", "jp")


def _keep_word(word: str) -> bool:
    return len(word) > 1 and not word.lower().startswith(BOILERPLATE_PREFIXES)


def extract_keywords(text: Optional[str]) -> list[str]:
    """Split text into keyword tokens.

    Hashtags are returned verbatim, bracketed segments without their
    brackets, and the rest of the text as words split on punctuation and
    whitespace. Case is preserved.

    Args:
        text: Title, channel name or description. None is allowed.

    Returns:
        Tokens in source order, duplicates included.
    """
    if not text:
        return []

    tokens = []
    for match in _TOKEN_PATTERN.finditer(text):
        hashtag, bracket, fw_bracket, word = match.groups()
        if hashtag:
            tokens.append(hashtag)
        elif bracket is not None or fw_bracket is not None:
            segment = (bracket if bracket is not None else fw_bracket).strip()
            if segment:
                tokens.append(segment)
        elif word and _keep_word(word):
            tokens.append(word)
    return tokens


def normalized_keywords(text: Optional[str]) -> list[str]:
    """Lower-cased keywords, as used for profile and penalty lookups."""
    return [token.lower() for token in extract_keywords(text)]
