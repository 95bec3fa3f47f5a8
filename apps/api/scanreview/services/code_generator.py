"""Short code generation, label schemes and batch validation.

Nothing here touches the database; ``CodeRegistryService`` persists what
these functions produce.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from scanreview.core.config import settings
from scanreview.core.security import generate_short_code
from scanreview.schemas.codes import LabelScheme
from scanreview.services.artifact_service import build_code_url, is_resolvable_url

LABEL_MAX_LENGTH = 255


@dataclass
class CodeCandidate:
    """A code that has been generated but not yet persisted."""

    short_code: str
    label: str
    url: str


def draw_unique_codes(
    count: int,
    exclude: Iterable[str] = (),
    generator: Callable[[], str] | None = None,
) -> list[str]:
    """Draw ``count`` short codes that are distinct from each other and from ``exclude``."""
    generator = generator or generate_short_code
    taken = set(exclude)
    codes: list[str] = []
    while len(codes) < count:
        code = generator()
        if code in taken:
            continue
        taken.add(code)
        codes.append(code)
    return codes


def build_labels(
    prefix: str,
    count: int,
    scheme: LabelScheme,
    *,
    location_name: str | None = None,
    tenant_name: str | None = None,
    issued_at: datetime | None = None,
) -> list[str]:
    """Build ``count`` labels following ``scheme``.

    Numbering starts at 1 and is zero-padded to two digits.
    """
    prefix = prefix.strip()
    numbered = [f"{prefix} {i:02d}" for i in range(1, count + 1)]

    if scheme == LabelScheme.SEQUENTIAL:
        return numbered

    if scheme == LabelScheme.LOCATION:
        if not location_name:
            raise ValueError("location label scheme requires a location")
        return [f"{location_name} - {label}" for label in numbered]

    if not tenant_name or issued_at is None:
        raise ValueError("tenant_timestamp label scheme requires a tenant name and timestamp")
    stamp = issued_at.strftime("%Y-%m-%d %H:%M")
    return [f"{tenant_name} {label} ({stamp})" for label in numbered]


def build_candidates(short_codes: list[str], labels: list[str]) -> list[CodeCandidate]:
    return [
        CodeCandidate(short_code=code, label=label, url=build_code_url(code))
        for code, label in zip(short_codes, labels, strict=True)
    ]


def validate_candidates(candidates: list[CodeCandidate]) -> list[str]:
    """Validate a batch before it is written.

    Returns a list of human-readable errors; empty means the batch is valid.
    Any error fails the whole batch.
    """
    errors: list[str] = []
    seen: set[str] = set()

    for index, candidate in enumerate(candidates, start=1):
        code = candidate.short_code
        if not code or len(code) < settings.short_code_length:
            errors.append(f"Code {index}: Invalid short code")
        elif any(ch not in settings.short_code_alphabet for ch in code):
            errors.append(f"Code {index}: Short code uses characters outside the alphabet")

        if code in seen:
            errors.append(f"Code {index}: Duplicate short code '{code}'")
        seen.add(code)

        if not candidate.label or not candidate.label.strip():
            errors.append(f"Code {index}: Label is required")
        elif len(candidate.label) > LABEL_MAX_LENGTH:
            errors.append(f"Code {index}: Label is longer than {LABEL_MAX_LENGTH} characters")

        if not is_resolvable_url(candidate.url, code):
            errors.append(f"Code {index}: Invalid URL")

    return errors
