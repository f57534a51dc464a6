from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal


UNSPECIFIED_LABEL = "Unspecified"
COMPLETED_STATUS = "completed"

# in-progress status per category
IN_PROGRESS_STATUS = {
    "series": "watching",
    "game": "playing",
    "book": "reading",
}

CATEGORY_LABELS = {
    "series": "Movie",
    "game": "Game",
    "book": "Book",
}


def round_half_up(value: float, digits: int = 0):
    """
    Round with ties going away from zero, the way dashboard figures are shown.

    Args:
        value (float): Number to round.
        digits (int): Decimal places to keep.

    Returns:
        float | int: Rounded value, an int when no decimals are kept.
    """
    rounded = Decimal(str(value)).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    return float(rounded) if digits else int(rounded)


def normalize_title(title: str | None):
    return (title or "").strip().lower()


def is_duplicate_title(projects: list[dict], title: str):
    """
    Tell whether a title already exists in a list.

    Args:
        projects (list[dict]): Items of one category.
        title (str): Candidate title.

    Returns:
        bool: True when a stored title matches ignoring case and surrounding spaces.
    """
    wanted = normalize_title(title)
    return any(normalize_title(project.get("title")) == wanted for project in projects)


def safe_float(value, default=0.0):
    """
    Convert arbitrary values into floats while guarding against failures.

    Args:
        value (Any): Raw value to convert.
        default (float): Fallback value when parsing is unsuccessful.

    Returns:
        float: Parsed float or the provided default.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(str(value).replace(",", "."))
    except (TypeError, ValueError):
        return default


def average_rating(items: list[dict]):
    """
    Average the ratings of rated items.

    Zero or missing ratings mean "unrated" and are left out.

    Args:
        items (list[dict]): Items to aggregate.

    Returns:
        float: Mean rounded to one decimal, 0.0 when nothing is rated.
    """
    ratings = [safe_float(item.get("rating")) for item in items]
    rated = [rating for rating in ratings if rating > 0]
    if not rated:
        return 0.0
    return round_half_up(sum(rated) / len(rated), 1)


def count_status(items: list[dict], status: str):
    return sum(1 for item in items if item.get("status") == status)


def completion_rate(items: list[dict]):
    if not items:
        return 0
    return round_half_up(count_status(items, COMPLETED_STATUS) / len(items) * 100)


def group_by_key(items: list[dict], key: str):
    """
    Count items per value of one field, for genre and status charts.

    Args:
        items (list[dict]): Items to group.
        key (str): Field to group on.

    Returns:
        dict[str, int]: Count per value, in first-seen order.
    """
    groups = {}
    for item in items:
        label = item.get(key) or UNSPECIFIED_LABEL
        groups[label] = groups.get(label, 0) + 1
    return groups


def build_dashboard_stats(items: list[dict], in_progress_status: str):
    return {
        "total": len(items),
        "completed": count_status(items, COMPLETED_STATUS),
        "inProgress": count_status(items, in_progress_status),
        "averageRating": average_rating(items),
    }


def build_overview(movies: list[dict], games: list[dict], books: list[dict]):
    """
    Summarize the whole collection for the home dashboard.

    Args:
        movies (list[dict]): Movies and series.
        games (list[dict]): Games.
        books (list[dict]): Books.

    Returns:
        dict: Totals, completion rate, in-progress count, average rating and
        per-category counts.
    """
    categories = {"series": movies, "game": games, "book": books}
    everything = [*movies, *games, *books]
    in_progress = sum(count_status(items, IN_PROGRESS_STATUS[type_tag]) for type_tag, items in categories.items())
    return {
        "total": len(everything),
        "completed": count_status(everything, COMPLETED_STATUS),
        "completionRate": completion_rate(everything),
        "inProgress": in_progress,
        "averageRating": average_rating(everything),
        "categories": {
            type_tag: {"count": len(items), "completed": count_status(items, COMPLETED_STATUS)}
            for type_tag, items in categories.items()
        },
    }


def parse_created_at(item: dict):
    raw_value = item.get("createdAt")
    if isinstance(raw_value, datetime):
        return raw_value.replace(tzinfo=None)
    if isinstance(raw_value, str) and raw_value:
        try:
            return datetime.fromisoformat(raw_value.replace("Z", "+00:00")).replace(tzinfo=None)
        except ValueError:
            return datetime.min
    return datetime.min


def recent_activity(movies: list[dict], games: list[dict], books: list[dict], limit: int = 4):
    """
    Pick the newest items across every category.

    Args:
        movies (list[dict]): Movies and series.
        games (list[dict]): Games.
        books (list[dict]): Books.
        limit (int): Number of items to keep.

    Returns:
        list[dict]: Copies tagged with ``type``, newest first.
    """
    tagged = []
    for type_tag, items in (("series", movies), ("game", games), ("book", books)):
        tagged.extend({**item, "type": CATEGORY_LABELS[type_tag]} for item in items)
    tagged.sort(key=parse_created_at, reverse=True)
    return tagged[: max(limit, 0)]
