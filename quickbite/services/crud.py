# Generic list/get/create/update/delete used by every /api/<entity> blueprint
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from quickbite import db
from quickbite.errors import Conflict, NotFound, ValidationFailed
from quickbite.models.models import utcnow
from quickbite.models.schemas import MAX_DB_INT, dump, validate_body


@dataclass(frozen=True)
class Resource:
    model: Any
    record: Any
    create_schema: Any
    update_schema: Any
    key: str  # name of the record in delete responses
    label: str
    not_found_code: str
    search_columns: Tuple[str, ...] = ()
    unique_column: Optional[str] = None
    duplicate_code: Optional[str] = None
    duplicate_message: Optional[str] = None
    newest_first: bool = False
    tracks_updates: bool = False
    require_changes: bool = False

    def serialize(self, row):
        return dump(self.record, row)


def parse_id(args):
    raw = args.get('id', '')
    try:
        record_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationFailed('Valid ID is required', 'INVALID_ID')
    if not 0 < record_id <= MAX_DB_INT:
        raise ValidationFailed('Valid ID is required', 'INVALID_ID')
    return record_id


def parse_int_filter(args, name):
    """Integer query filter; values that are not integers are ignored"""
    raw = args.get(name)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if abs(value) <= MAX_DB_INT else None


def parse_pagination(args):
    config = current_app.config
    try:
        limit = int(args.get('limit', config['DEFAULT_PAGE_SIZE']))
        offset = int(args.get('offset', 0))
    except (TypeError, ValueError):
        raise ValidationFailed('limit and offset must be integers', 'INVALID_PAGINATION')
    if limit < 0 or not 0 <= offset <= MAX_DB_INT:
        raise ValidationFailed('limit and offset must be non-negative integers in range', 'INVALID_PAGINATION')
    return min(limit, config['MAX_PAGE_SIZE']), offset


def get_or_404(resource, record_id):
    row = db.session.get(resource.model, record_id)
    if row is None:
        raise NotFound(f'{resource.label} not found', resource.not_found_code)
    return row


def list_records(resource, args, conditions=()):
    limit, offset = parse_pagination(args)
    query = resource.model.query

    search = args.get('search')
    if search and resource.search_columns:
        query = query.filter(or_(*[
            getattr(resource.model, column).contains(search, autoescape=True)
            for column in resource.search_columns
        ]))

    conditions = [condition for condition in conditions if condition is not None]
    if conditions:
        query = query.filter(*conditions)

    if resource.newest_first:
        query = query.order_by(resource.model.created_at.desc(), resource.model.id.desc())
    else:
        query = query.order_by(resource.model.id)

    return query.offset(offset).limit(limit).all()


def commit(resource):
    """Commit the session, mapping uniqueness violations to the resource's duplicate code"""
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        message = str(exc.orig).lower()
        if resource.unique_column and resource.unique_column in message and 'unique' in message:
            raise Conflict(resource.duplicate_message, resource.duplicate_code) from exc
        raise


def create_record(resource, data, prepare=None):
    payload = validate_body(resource.create_schema, data)
    fields = payload.model_dump()
    fields = {name: value for name, value in fields.items() if value is not None}
    if prepare is not None:
        prepare(fields)

    now = utcnow()
    row = resource.model(**fields, created_at=now)
    if resource.tracks_updates:
        row.updated_at = now

    db.session.add(row)
    commit(resource)
    current_app.logger.info(f"Created {resource.label.lower()} {row.id}")
    return row


def update_record(resource, record_id, data, prepare=None):
    """Apply a partial update; ``prepare(row, changes)`` may veto or adjust changes"""
    row = get_or_404(resource, record_id)
    payload = validate_body(resource.update_schema, data)
    changes = payload.model_dump(exclude_unset=True)

    if resource.require_changes and not changes:
        raise ValidationFailed('No valid fields to update', 'NO_UPDATE_FIELDS')
    if prepare is not None:
        prepare(row, changes)

    for name, value in changes.items():
        setattr(row, name, value)
    if resource.tracks_updates:
        row.updated_at = utcnow()

    commit(resource)
    current_app.logger.info(f"Updated {resource.label.lower()} {row.id}: {sorted(changes)}")
    return row


def delete_record(resource, record_id):
    row = get_or_404(resource, record_id)
    record = resource.serialize(row)
    db.session.delete(row)
    db.session.commit()
    current_app.logger.info(f"Deleted {resource.label.lower()} {record_id}")
    return {
        'message': f'{resource.label} deleted successfully',
        resource.key: record,
    }
