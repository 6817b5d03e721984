"""Goal slug helpers."""
import re
import unicodedata
from typing import Optional

FALLBACK_SLUG = "goal"


def slugify(text: str) -> str:
    """
    Turn a goal title into a lowercase, hyphen-separated slug.

    Accents are folded to ASCII; titles with nothing usable left become "goal".

    Examples:
        >>> slugify("Launch Q3 Campaign")
        'launch-q3-campaign'
        >>> slugify("Café  Opening!")
        'cafe-opening'
        >>> slugify("???")
        'goal'
    """
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    words = re.findall(r"[a-z0-9]+", folded.lower())
    return "-".join(words) or FALLBACK_SLUG


async def generate_unique_slug(
    collection,
    base_slug: str,
    user_id: str,
    exclude_id: Optional[object] = None,
) -> str:
    """
    Pick a slug not used by any of the user's live goals.

    Taken slugs are looked up in one query; the first free candidate of
    base_slug, base_slug-2, base_slug-3, ... is returned.

    Args:
        collection: Goals collection
        base_slug: Slug derived from the title
        user_id: Owner the slug must be unique for
        exclude_id: Goal being renamed, so it does not collide with itself
    """
    query = {
        "user_id": user_id,
        "deleted": False,
        "slug": {"$regex": f"^{re.escape(base_slug)}(-[0-9]+)?$"},
    }
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}

    docs = await collection.find(query, {"slug": 1}).to_list(length=None)
    taken = {doc["slug"] for doc in docs}

    if base_slug not in taken:
        return base_slug

    suffix = 2
    while f"{base_slug}-{suffix}" in taken:
        suffix += 1
    return f"{base_slug}-{suffix}"
