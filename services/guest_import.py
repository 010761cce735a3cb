"""
CSV guest import.

Parses an uploaded guest list into candidate guests for one wedding.
Malformed rows never abort the import: each one is skipped and reported
as a line-numbered warning.

Duplicate emails keep the first occurrence, both within the uploaded
batch and against guests already on the wedding's list.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator
from sqlalchemy.orm import Session

from core.clock import utcnow
from core.config import get_settings, Settings
from core.database import atomic
from models.enums import RSVPStatus
from models.guest import Guest
from models.wedding import Wedding
from services.capacity import lock_wedding, confirmed_count
from services.exceptions import InvalidInputError
from services.guest_service import generate_rsvp_token

logger = logging.getLogger(__name__)

HEADER_ALIASES = {
    "name": "name",
    "full name": "name",
    "full_name": "name",
    "guest": "name",
    "guest name": "name",
    "email": "email",
    "e-mail": "email",
    "email address": "email",
    "phone": "phone",
    "phone number": "phone",
    "mobile": "phone",
    "notes": "notes",
    "note": "notes",
    "comments": "notes",
    "rsvp": "rsvp_status",
    "rsvp status": "rsvp_status",
    "rsvp_status": "rsvp_status",
    "status": "rsvp_status",
}

STATUS_ALIASES = {
    "": RSVPStatus.PENDING,
    "pending": RSVPStatus.PENDING,
    "invited": RSVPStatus.PENDING,
    "confirmed": RSVPStatus.CONFIRMED,
    "yes": RSVPStatus.CONFIRMED,
    "attending": RSVPStatus.CONFIRMED,
    "accepted": RSVPStatus.CONFIRMED,
    "declined": RSVPStatus.DECLINED,
    "no": RSVPStatus.DECLINED,
    "not attending": RSVPStatus.DECLINED,
    "regrets": RSVPStatus.DECLINED,
}


class GuestRow(BaseModel):
    """One validated CSV row"""
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    rsvp_status: RSVPStatus = RSVPStatus.PENDING

    @field_validator("name", "email", "phone", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v

    @field_validator("rsvp_status", mode="before")
    @classmethod
    def parse_status(cls, v):
        if v is None:
            return RSVPStatus.PENDING
        if isinstance(v, str):
            key = v.strip().lower()
            if key not in STATUS_ALIASES:
                raise ValueError(f"unknown RSVP status {v.strip()!r}")
            return STATUS_ALIASES[key]
        return v


@dataclass
class ParsedImport:
    rows: List[Tuple[int, GuestRow]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped: int = 0


@dataclass
class ImportResult:
    created: int = 0
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)


def _decode(content: Union[bytes, str]) -> str:
    if isinstance(content, bytes):
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise InvalidInputError("The file is not valid UTF-8 text. Export it as CSV (UTF-8) and try again.")
    return content.lstrip("\ufeff")


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    field_name = first["loc"][0] if first["loc"] else "row"
    if field_name == "name" and first["type"] in ("missing", "string_type", "string_too_short"):
        return "name is required"
    message = first["msg"]
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"invalid {field_name}: {message}"


def _map_header(header: List[str]) -> Dict[str, int]:
    columns: Dict[str, int] = {}
    for index, title in enumerate(header):
        key = HEADER_ALIASES.get(title.strip().lower())
        if key and key not in columns:
            columns[key] = index
    return columns


def parse_guest_csv(content: Union[bytes, str], max_rows: int = 5000) -> ParsedImport:
    """
    Parse CSV content into validated guest rows

    The first row is the header. Column names are matched
    case-insensitively against a set of common aliases ("Full Name",
    "E-mail", ...); unknown columns are ignored.

    Args:
        content: Raw upload (bytes are decoded as UTF-8, BOM allowed)
        max_rows: Data rows beyond this count are dropped with a warning

    Returns:
        ParsedImport: Accepted rows with their line numbers, warnings and
        the number of skipped rows

    Raises:
        InvalidInputError: If the content is not decodable CSV text
    """
    parsed = ParsedImport()
    text = _decode(content)

    if not text.strip():
        parsed.warnings.append("The file is empty; no guests were imported.")
        return parsed

    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header = next(reader, None)
        while header is not None and not any(cell.strip() for cell in header):
            header = next(reader, None)
        if header is None:
            parsed.warnings.append("The file is empty; no guests were imported.")
            return parsed

        columns = _map_header(header)
        if "name" not in columns:
            parsed.warnings.append(
                "The file has no name column. Expected a header row such as: name,email,phone,notes"
            )
            return parsed

        seen_emails: Dict[str, int] = {}
        data_rows = 0
        overflow = 0

        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                data_rows += 1
                if data_rows > max_rows:
                    overflow += 1
                    continue
                parsed.warnings.append(f"Line {reader.line_num}: could not be read ({e}); row skipped.")
                parsed.skipped += 1
                continue

            line = reader.line_num
            if not any(cell.strip() for cell in row):
                continue

            data_rows += 1
            if data_rows > max_rows:
                overflow += 1
                continue

            if len(row) > len(header):
                parsed.warnings.append(
                    f"Line {line}: too many fields ({len(row)} for {len(header)} columns); row skipped."
                )
                parsed.skipped += 1
                continue

            values = {key: row[index] if index < len(row) else None for key, index in columns.items()}
            try:
                guest_row = GuestRow.model_validate(values)
            except ValidationError as e:
                parsed.warnings.append(f"Line {line}: {_describe(e)}; row skipped.")
                parsed.skipped += 1
                continue

            if guest_row.email:
                first_line = seen_emails.get(guest_row.email)
                if first_line is not None:
                    parsed.warnings.append(
                        f"Line {line}: duplicate email {guest_row.email} "
                        f"(first seen on line {first_line}); row skipped."
                    )
                    parsed.skipped += 1
                    continue
                seen_emails[guest_row.email] = line

            parsed.rows.append((line, guest_row))
    except csv.Error as e:
        raise InvalidInputError(f"The file could not be read as CSV: {e}")

    if overflow:
        parsed.warnings.append(
            f"Only the first {max_rows} rows were processed; {overflow} more rows were ignored."
        )
        parsed.skipped += overflow

    if data_rows == 0:
        parsed.warnings.append("No guest rows found in the file.")

    return parsed


def import_guests(
    db: Session,
    wedding: Wedding,
    content: Union[bytes, str],
    settings: Optional[Settings] = None,
) -> ImportResult:
    """
    Import a CSV guest list into a wedding

    All accepted rows are inserted in one transaction. Rows whose email is
    already on the wedding's list are skipped. Rows marked confirmed
    beyond the wedding's capacity are imported as pending.

    Args:
        db: Database session
        wedding: Wedding owned by the current planner
        content: Raw CSV content
        settings: Optional settings override

    Returns:
        ImportResult: Created and skipped counts plus warnings
    """
    settings = settings or get_settings()
    parsed = parse_guest_csv(content, max_rows=settings.CSV_IMPORT_MAX_ROWS)
    result = ImportResult(skipped=parsed.skipped, warnings=list(parsed.warnings))

    if not parsed.rows:
        logger.info(f"CSV import for wedding {wedding.id} found no importable rows")
        return result

    with atomic(db):
        locked_wedding = lock_wedding(db, wedding.id)

        batch_emails = [row.email for _, row in parsed.rows if row.email]
        existing = set()
        if batch_emails:
            existing = {
                email for (email,) in db.query(Guest.email).filter(
                    Guest.wedding_id == wedding.id,
                    Guest.email.in_(batch_emails),
                )
            }

        confirmed = confirmed_count(db, wedding.id)
        capacity = locked_wedding.guest_capacity

        for line, row in parsed.rows:
            if row.email and row.email in existing:
                result.warnings.append(f"Line {line}: {row.email} is already on the guest list; row skipped.")
                result.skipped += 1
                continue

            status = row.rsvp_status
            if status == RSVPStatus.CONFIRMED:
                if capacity is not None and confirmed >= capacity:
                    result.warnings.append(
                        f"Line {line}: wedding is at capacity; {row.name} imported as pending."
                    )
                    status = RSVPStatus.PENDING
                else:
                    confirmed += 1

            db.add(Guest(
                wedding_id=wedding.id,
                name=row.name,
                email=row.email,
                phone=row.phone,
                notes=row.notes,
                rsvp_status=status,
                responded_at=utcnow() if status != RSVPStatus.PENDING else None,
                rsvp_token=generate_rsvp_token(),
            ))
            result.created += 1

    logger.info(
        f"CSV import for wedding {wedding.id}: {result.created} created, "
        f"{result.skipped} skipped, {len(result.warnings)} warnings"
    )
    return result
