# =============================================================================
# core/truncation.py  —  Bounded Tool Responses
# =============================================================================
#
# Every string a tool returns inline passes through truncate_response().
# Under the limit it comes back untouched.  Over the limit it is cut at
# ``limit`` characters and a trailer is appended:
#
#   <first `limit` characters>
#
#   --- TRUNCATED ---
#   Response truncated from 48,213 to 25,000 characters.
#   <hint>
#
# Downstream consumers pattern-match on "--- TRUNCATED ---", so the trailer
# format must stay byte-for-byte stable.  The hint is where a tool tells the
# caller how to get the rest: a resource URI, a narrower tool, or the
# default advice below.
# =============================================================================

from core.config import CHARACTER_LIMIT
from core.models import TruncationResult


TRUNCATION_MARKER = "--- TRUNCATED ---"

DEFAULT_TRUNCATION_HINT = "Use returnMode: 'summary' or narrower parameters to manage response size."


def truncation_trailer(original_length: int, limit: int, hint: str) -> str:
    return (
        f"\n\n{TRUNCATION_MARKER}\n"
        f"Response truncated from {original_length:,} to {limit:,} characters.\n"
        f"{hint}"
    )


def truncate_response(
    content: str,
    limit: int = CHARACTER_LIMIT,
    hint: str = DEFAULT_TRUNCATION_HINT,
) -> TruncationResult:
    """Cap ``content`` at ``limit`` characters.

    ``limit=0`` is allowed: any non-empty content is replaced by the
    trailer alone.
    """
    if len(content) <= limit:
        return TruncationResult(text=content, truncated=False)

    return TruncationResult(
        text=content[:limit] + truncation_trailer(len(content), limit, hint),
        truncated=True,
        original_length=len(content),
    )
