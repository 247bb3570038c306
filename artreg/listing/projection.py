"""Listing projection — pure read-only rows derived from the registry index.

Nothing here touches the filesystem or the console.  ``ListingRenderer``
turns the rows into Rich output.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict

from artreg.models.registry import RegistryIndex

NONE_TAG = "<none>"

# Mon Jan 2 15:04:05 MST 2006 as RFC 850: "Monday, 02-Jan-06 15:04:05 MST"
RFC850_FORMAT = "%A, %d-%b-%y %H:%M:%S"

_SECOND = 1
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_WEEK = 7 * _DAY
_MONTH = 4 * _WEEK
_YEAR = 12 * _MONTH


class ListRow(BaseModel):
    """One line of ``artreg ls``: a (repository, tag) pair."""

    model_config = ConfigDict(frozen=True)

    repository: str
    tag: str
    artifact_id: str  # short id
    artifact_type: str
    created: str  # relative age label
    size: str


def build_rows(index: RegistryIndex, now: datetime | None = None) -> list[ListRow]:
    """One row per tag; a dangling artifact gets a single ``<none>`` row."""
    rows: list[ListRow] = []
    for repo, artifact in index.iter_artifacts():
        age = elapsed_label(artifact.created, now=now)
        for tag in artifact.tags or [NONE_TAG]:
            rows.append(
                ListRow(
                    repository=repo.repository,
                    tag=tag,
                    artifact_id=artifact.short_id,
                    artifact_type=artifact.type,
                    created=age,
                    size=artifact.size,
                )
            )
    return rows


def quiet_ids(index: RegistryIndex) -> list[str]:
    """One short id per artifact record, in document order."""
    return [artifact.short_id for _, artifact in index.iter_artifacts()]


def parse_created(value: str) -> datetime:
    """Parse a creation-time label (RFC 850 or ISO 8601) as an aware datetime.

    The RFC 850 zone abbreviation is ignored and the time taken as UTC,
    which is how seals are stamped.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        stamp = text.rsplit(" ", 1)[0] if text.count(" ") >= 3 else text
        try:
            parsed = datetime.strptime(stamp, RFC850_FORMAT)
        except ValueError as exc:
            raise ValueError(f"unrecognised creation time {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_created(moment: datetime) -> str:
    """Render *moment* as an RFC 850 label in UTC."""
    return moment.astimezone(timezone.utc).strftime(RFC850_FORMAT) + " UTC"


def elapsed_label(created: str, now: datetime | None = None) -> str:
    """Human friendly age, e.g. ``"3 hours ago"``.

    Uses the largest whole unit among years, months, weeks, days, hours,
    minutes and seconds.  Weeks start at two so that up to 13 days still
    read in days.  Unparseable labels are shown as they are.
    """
    try:
        then = parse_created(created)
    except ValueError:
        return created
    now = now or datetime.now(timezone.utc)
    seconds = max(int((now - then).total_seconds()), 0)

    if seconds >= _YEAR:
        value, unit = seconds // _YEAR, "year"
    elif seconds >= _MONTH:
        value, unit = seconds // _MONTH, "month"
    elif seconds >= 2 * _WEEK:
        value, unit = seconds // _WEEK, "week"
    elif seconds >= _DAY:
        value, unit = seconds // _DAY, "day"
    elif seconds >= _HOUR:
        value, unit = seconds // _HOUR, "hour"
    elif seconds >= _MINUTE:
        value, unit = seconds // _MINUTE, "minute"
    else:
        value, unit = seconds, "second"
    return f"{value} {plural(value, unit)} ago"


def plural(value: int, label: str) -> str:
    """Pluralize *label* when *value* is greater than one."""
    return f"{label}s" if value > 1 else label
