"""
Request and record schemas.

Every entity has a ``Create`` and an ``Update`` schema built from the field
rules below, and a ``Record`` schema used to serialise rows. Wire names are
camelCase, Python attributes are snake_case.
"""
import math
import re
from datetime import datetime, timezone
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from quickbite.errors import ValidationFailed
from quickbite.models.statuses import normalize_delivery_mode, normalize_payment_status


# Field rules

# Largest value an INTEGER column holds
MAX_DB_INT = 2 ** 63 - 1


def _fail(code, message):
    raise PydanticCustomError(code, message)


def _as_number(value, allow_strings=False):
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif allow_strings and isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _as_int(value):
    """Whole JSON numbers (``2`` or ``2.0``) within the INTEGER range, else None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not 0 < value <= MAX_DB_INT:
        return None
    return value


def parse_timestamp(value):
    """Parse an ISO-8601 string into a naive UTC datetime, or return None"""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text[-1] in 'Zz':
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def required_text(label, code, lower=False):
    def check(value):
        if not isinstance(value, str) or not value.strip():
            _fail(code, f'{label} is required and must not be empty')
        value = value.strip()
        return value.lower() if lower else value
    return BeforeValidator(check)


def nonblank_text(label, code, lower=False):
    def check(value):
        if not isinstance(value, str) or not value.strip():
            _fail(code, f'{label} must not be empty')
        value = value.strip()
        return value.lower() if lower else value
    return BeforeValidator(check)


def optional_text(label, code):
    def check(value):
        if value is None:
            return None
        if not isinstance(value, str):
            _fail(code, f'{label} must be text')
        return value.strip() or None
    return BeforeValidator(check)


def positive_number(label, code, missing_code=None, allow_strings=False):
    def check(value):
        if value is None and missing_code:
            _fail(missing_code, f'{label} is required')
        number = _as_number(value, allow_strings)
        if number is None or number <= 0:
            _fail(code, f'{label} must be a positive number')
        return number
    return BeforeValidator(check)


def non_negative_number(label, code):
    def check(value):
        number = _as_number(value)
        if number is None or number < 0:
            _fail(code, f'{label} must be a non-negative number')
        return number
    return BeforeValidator(check)


def percentage(label, code, missing_code=None):
    def check(value):
        if value is None and missing_code:
            _fail(missing_code, f'{label} is required')
        number = _as_number(value, allow_strings=True)
        if number is None or not 0 <= number <= 100:
            _fail(code, f'{label} must be a number between 0 and 100')
        return number
    return BeforeValidator(check)


def positive_int(label, code, missing_code=None, nullable=True):
    def check(value):
        if value is None:
            if missing_code:
                _fail(missing_code, f'{label} is required')
            if nullable:
                return None
        number = _as_int(value)
        if number is None:
            _fail(code, f'{label} must be a positive integer')
        return number
    return BeforeValidator(check)


def timestamp(label, code, missing_code=None):
    def check(value):
        if missing_code and (value is None or value == ''):
            _fail(missing_code, f'{label} is required')
        parsed = parse_timestamp(value)
        if parsed is None:
            _fail(code, f'{label} must be a valid ISO timestamp')
        return parsed
    return BeforeValidator(check)


def flag(label, code):
    def check(value):
        if not isinstance(value, bool):
            _fail(code, f'{label} must be true or false')
        return value
    return BeforeValidator(check)


def payment_status_rule(code, missing_code=None):
    def check(value):
        if missing_code and (value is None or (isinstance(value, str) and not value.strip())):
            _fail(missing_code, 'Payment status is required')
        status = normalize_payment_status(value) if isinstance(value, str) else None
        if status is None:
            _fail(code, 'Payment status must be one of Pending, Paid, Failed, Refunded')
        return status
    return BeforeValidator(check)


def delivery_mode_rule(code, missing_code=None):
    def check(value):
        if missing_code and (value is None or (isinstance(value, str) and not value.strip())):
            _fail(missing_code, 'Delivery mode is required')
        mode = normalize_delivery_mode(value) if isinstance(value, str) else None
        if mode is None:
            _fail(code, 'Delivery mode must be Pickup or Delivery')
        return mode
    return BeforeValidator(check)


def required():
    """Default for a required field: missing keys still go through the field rule"""
    return Field(default=None, validate_default=True)


class RequestSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


def _upper_snake(name):
    return re.sub(r'(?<!^)(?=[A-Z])', '_', str(name)).upper()


def validate_body(schema, data):
    """Validate a decoded JSON body against ``schema``.

    Raises ValidationFailed carrying the code of the first failing field.
    """
    if not isinstance(data, dict):
        raise ValidationFailed('Request body must be a JSON object', 'INVALID_BODY')
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        error = exc.errors()[0]
        code = error['type']
        if not code.isupper():
            field = next((part for part in reversed(error['loc']) if isinstance(part, str)), 'body')
            code = f'INVALID_{_upper_snake(field)}'
        raise ValidationFailed(error['msg'], code) from exc


# Record serialisation

def _iso_utc(value):
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec='milliseconds') + 'Z'


UtcDateTime = Annotated[datetime, PlainSerializer(_iso_utc, return_type=str, when_used='json')]


class RecordSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


def dump(record_schema, row):
    return record_schema.model_validate(row).model_dump(by_alias=True, mode='json')


# Shops

class ShopCreate(RequestSchema):
    name: Annotated[Optional[str], required_text('Name', 'MISSING_NAME')] = required()
    address: Annotated[Optional[str], required_text('Address', 'MISSING_ADDRESS')] = required()
    contact: Annotated[Optional[str], required_text('Contact', 'MISSING_CONTACT')] = required()
    email: Annotated[Optional[str], required_text('Email', 'MISSING_EMAIL', lower=True)] = required()


class ShopUpdate(RequestSchema):
    name: Annotated[Optional[str], nonblank_text('Name', 'INVALID_NAME')] = None
    address: Annotated[Optional[str], nonblank_text('Address', 'INVALID_ADDRESS')] = None
    contact: Annotated[Optional[str], nonblank_text('Contact', 'INVALID_CONTACT')] = None
    email: Annotated[Optional[str], nonblank_text('Email', 'INVALID_EMAIL', lower=True)] = None


class ShopRecord(RecordSchema):
    id: int
    name: str
    address: str
    contact: str
    email: str
    created_at: UtcDateTime


# Customers

def _coordinate(label, code):
    def check(value):
        if value is None:
            return None
        number = _as_number(value, allow_strings=True)
        if number is None:
            _fail(code, f'{label} must be a number')
        return number
    return BeforeValidator(check)


class CustomerCreate(RequestSchema):
    name: Annotated[Optional[str], required_text('Name', 'MISSING_NAME')] = required()
    email: Annotated[Optional[str], required_text('Email', 'MISSING_EMAIL', lower=True)] = required()
    phone: Annotated[Optional[str], required_text('Phone', 'MISSING_PHONE')] = required()
    address: Annotated[Optional[str], required_text('Address', 'MISSING_ADDRESS')] = required()
    latitude: Annotated[Optional[float], _coordinate('Latitude', 'INVALID_LATITUDE')] = None
    longitude: Annotated[Optional[float], _coordinate('Longitude', 'INVALID_LONGITUDE')] = None


class CustomerUpdate(RequestSchema):
    name: Annotated[Optional[str], nonblank_text('Name', 'INVALID_NAME')] = None
    email: Annotated[Optional[str], nonblank_text('Email', 'INVALID_EMAIL', lower=True)] = None
    phone: Annotated[Optional[str], nonblank_text('Phone', 'INVALID_PHONE')] = None
    address: Annotated[Optional[str], nonblank_text('Address', 'INVALID_ADDRESS')] = None
    latitude: Annotated[Optional[float], _coordinate('Latitude', 'INVALID_LATITUDE')] = None
    longitude: Annotated[Optional[float], _coordinate('Longitude', 'INVALID_LONGITUDE')] = None


class CustomerRecord(RecordSchema):
    id: int
    name: str
    email: str
    phone: str
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: UtcDateTime


# Menu items

class MenuItemCreate(RequestSchema):
    name: Annotated[Optional[str], required_text('Name', 'MISSING_NAME')] = required()
    category: Annotated[Optional[str], required_text('Category', 'MISSING_CATEGORY')] = required()
    price: Annotated[Optional[float], positive_number(
        'Price', 'INVALID_PRICE', missing_code='MISSING_PRICE', allow_strings=True)] = required()
    availability: Annotated[Optional[bool], flag('Availability', 'INVALID_AVAILABILITY')] = True
    description: Annotated[Optional[str], optional_text('Description', 'INVALID_DESCRIPTION')] = None
    image_url: Annotated[Optional[str], optional_text('Image URL', 'INVALID_IMAGE_URL')] = None


class MenuItemUpdate(RequestSchema):
    name: Annotated[Optional[str], nonblank_text('Name', 'INVALID_NAME')] = None
    category: Annotated[Optional[str], nonblank_text('Category', 'INVALID_CATEGORY')] = None
    price: Annotated[Optional[float], positive_number('Price', 'INVALID_PRICE', allow_strings=True)] = None
    availability: Annotated[Optional[bool], flag('Availability', 'INVALID_AVAILABILITY')] = None
    description: Annotated[Optional[str], optional_text('Description', 'INVALID_DESCRIPTION')] = None
    image_url: Annotated[Optional[str], optional_text('Image URL', 'INVALID_IMAGE_URL')] = None


class MenuItemRecord(RecordSchema):
    id: int
    name: str
    category: str
    price: float
    availability: bool
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: UtcDateTime


# Offers

class OfferCreate(RequestSchema):
    title: Annotated[Optional[str], BeforeValidator(
        lambda v: v.strip() if isinstance(v, str) and v.strip()
        else _fail('MISSING_REQUIRED_FIELD', 'Title is required and cannot be empty'))] = required()
    description: Annotated[Optional[str], optional_text('Description', 'INVALID_DESCRIPTION')] = None
    discount_percent: Annotated[Optional[float], percentage(
        'Discount percent', 'INVALID_DISCOUNT_PERCENT', missing_code='MISSING_REQUIRED_FIELD')] = required()
    valid_from: Annotated[Optional[datetime], timestamp(
        'Valid from', 'INVALID_DATE_FORMAT', missing_code='MISSING_REQUIRED_FIELD')] = required()
    valid_until: Annotated[Optional[datetime], timestamp(
        'Valid until', 'INVALID_DATE_FORMAT', missing_code='MISSING_REQUIRED_FIELD')] = required()


class OfferUpdate(RequestSchema):
    title: Annotated[Optional[str], nonblank_text('Title', 'INVALID_TITLE')] = None
    description: Annotated[Optional[str], optional_text('Description', 'INVALID_DESCRIPTION')] = None
    discount_percent: Annotated[Optional[float], percentage('Discount percent', 'INVALID_DISCOUNT_PERCENT')] = None
    valid_from: Annotated[Optional[datetime], timestamp('Valid from', 'INVALID_DATE_FORMAT')] = None
    valid_until: Annotated[Optional[datetime], timestamp('Valid until', 'INVALID_DATE_FORMAT')] = None


class OfferRecord(RecordSchema):
    id: int
    title: str
    description: Optional[str] = None
    discount_percent: float
    valid_from: UtcDateTime
    valid_until: UtcDateTime
    created_at: UtcDateTime


# Orders

class OrderCreate(RequestSchema):
    customer_id: Annotated[Optional[int], positive_int('Customer ID', 'INVALID_CUSTOMER_ID')] = None
    token_number: Annotated[Optional[str], required_text('Token number', 'MISSING_TOKEN_NUMBER')] = required()
    subtotal: Annotated[Optional[float], positive_number('Subtotal', 'INVALID_SUBTOTAL')] = required()
    discount: Annotated[Optional[float], non_negative_number('Discount', 'INVALID_DISCOUNT')] = 0
    final_amount: Annotated[Optional[float], positive_number('Final amount', 'INVALID_FINAL_AMOUNT')] = required()
    status: Annotated[Optional[str], nonblank_text('Status', 'INVALID_STATUS')] = None
    delivery_mode: Annotated[Optional[str], delivery_mode_rule(
        'INVALID_DELIVERY_MODE', missing_code='MISSING_DELIVERY_MODE')] = required()
    payment_status: Annotated[Optional[str], payment_status_rule('INVALID_PAYMENT_STATUS')] = None
    estimated_ready_time: Annotated[Optional[str], optional_text(
        'Estimated ready time', 'INVALID_ESTIMATED_READY_TIME')] = None


class OrderUpdate(RequestSchema):
    customer_id: Annotated[Optional[int], positive_int('Customer ID', 'INVALID_CUSTOMER_ID')] = None
    status: Annotated[Optional[str], nonblank_text('Status', 'INVALID_STATUS')] = None
    delivery_mode: Annotated[Optional[str], delivery_mode_rule('INVALID_DELIVERY_MODE')] = None
    payment_status: Annotated[Optional[str], payment_status_rule('INVALID_PAYMENT_STATUS')] = None
    estimated_ready_time: Annotated[Optional[str], optional_text(
        'Estimated ready time', 'INVALID_ESTIMATED_READY_TIME')] = None
    discount: Annotated[Optional[float], non_negative_number('Discount', 'INVALID_DISCOUNT')] = None
    final_amount: Annotated[Optional[float], positive_number('Final amount', 'INVALID_FINAL_AMOUNT')] = None


class OrderRecord(RecordSchema):
    id: int
    customer_id: Optional[int] = None
    token_number: str
    subtotal: float
    discount: float
    final_amount: float
    status: str
    delivery_mode: str
    payment_status: str
    estimated_ready_time: Optional[str] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


# Order items

class OrderItemCreate(RequestSchema):
    quantity: Annotated[Optional[int], positive_int(
        'Quantity', 'INVALID_QUANTITY', missing_code='MISSING_QUANTITY')] = required()
    price: Annotated[Optional[float], positive_number(
        'Price', 'INVALID_PRICE', missing_code='MISSING_PRICE')] = required()
    order_id: Annotated[Optional[int], positive_int('Order ID', 'INVALID_ORDER_ID')] = None
    menu_item_id: Annotated[Optional[int], positive_int('Menu item ID', 'INVALID_MENU_ITEM_ID')] = None


class OrderItemUpdate(RequestSchema):
    quantity: Annotated[Optional[int], positive_int('Quantity', 'INVALID_QUANTITY', nullable=False)] = None
    price: Annotated[Optional[float], positive_number('Price', 'INVALID_PRICE')] = None
    order_id: Annotated[Optional[int], positive_int('Order ID', 'INVALID_ORDER_ID')] = None
    menu_item_id: Annotated[Optional[int], positive_int('Menu item ID', 'INVALID_MENU_ITEM_ID')] = None


class OrderItemRecord(RecordSchema):
    id: int
    order_id: Optional[int] = None
    menu_item_id: Optional[int] = None
    quantity: int
    price: float
    created_at: UtcDateTime


# Payments

class PaymentCreate(RequestSchema):
    transaction_id: Annotated[Optional[str], required_text('Transaction ID', 'MISSING_TRANSACTION_ID')] = required()
    payment_mode: Annotated[Optional[str], required_text('Payment mode', 'MISSING_PAYMENT_MODE')] = required()
    amount_paid: Annotated[Optional[float], positive_number(
        'Amount paid', 'INVALID_AMOUNT_PAID', missing_code='MISSING_AMOUNT_PAID')] = required()
    payment_status: Annotated[Optional[str], payment_status_rule(
        'INVALID_PAYMENT_STATUS', missing_code='MISSING_PAYMENT_STATUS')] = required()
    order_id: Annotated[Optional[int], positive_int('Order ID', 'INVALID_ORDER_ID')] = None


class PaymentUpdate(RequestSchema):
    order_id: Annotated[Optional[int], positive_int('Order ID', 'INVALID_ORDER_ID')] = None
    payment_mode: Annotated[Optional[str], nonblank_text('Payment mode', 'INVALID_PAYMENT_MODE')] = None
    payment_status: Annotated[Optional[str], payment_status_rule('INVALID_PAYMENT_STATUS')] = None


class PaymentRecord(RecordSchema):
    id: int
    order_id: Optional[int] = None
    transaction_id: str
    payment_mode: str
    amount_paid: float
    payment_status: str
    created_at: UtcDateTime


# Receipts

def _receipt_data(missing_code=None):
    def check(value):
        if value is None and missing_code:
            _fail(missing_code, 'Receipt data is required')
        if not isinstance(value, str) or not value.strip():
            _fail('EMPTY_RECEIPT_DATA', 'Receipt data must not be empty')
        return value.strip()
    return BeforeValidator(check)


class ReceiptCreate(RequestSchema):
    receipt_data: Annotated[Optional[str], _receipt_data(missing_code='MISSING_RECEIPT_DATA')] = required()
    order_id: Annotated[Optional[int], positive_int('Order ID', 'INVALID_ORDER_ID')] = None


class ReceiptUpdate(RequestSchema):
    receipt_data: Annotated[Optional[str], _receipt_data()] = None
    order_id: Annotated[Optional[int], positive_int('Order ID', 'INVALID_ORDER_ID')] = None


class ReceiptRecord(RecordSchema):
    id: int
    order_id: Optional[int] = None
    receipt_data: str
    created_at: UtcDateTime


# Checkout

class CheckoutLine(RequestSchema):
    menu_item_id: Annotated[Optional[int], positive_int(
        'Menu item ID', 'INVALID_MENU_ITEM_ID', missing_code='MISSING_MENU_ITEM_ID')] = required()
    quantity: Annotated[Optional[int], positive_int(
        'Quantity', 'INVALID_QUANTITY', missing_code='MISSING_QUANTITY')] = required()
    unit_price: Annotated[Optional[float], positive_number('Unit price', 'INVALID_PRICE')] = None


def _cart(value):
    if not isinstance(value, list) or not value:
        _fail('EMPTY_CART', 'At least one item is required to check out')
    return value


def _request_id(value):
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip() or len(value.strip()) > 100:
        _fail('INVALID_REQUEST_ID', 'Request ID must be a non-empty string of at most 100 characters')
    return value.strip()


class CheckoutRequest(RequestSchema):
    request_id: Annotated[Optional[str], BeforeValidator(_request_id)] = None
    customer_id: Annotated[Optional[int], positive_int('Customer ID', 'INVALID_CUSTOMER_ID')] = None
    delivery_mode: Annotated[Optional[str], delivery_mode_rule(
        'INVALID_DELIVERY_MODE', missing_code='MISSING_DELIVERY_MODE')] = required()
    payment_mode: Annotated[Optional[str], required_text('Payment mode', 'MISSING_PAYMENT_MODE')] = required()
    offer_id: Annotated[Optional[int], positive_int('Offer ID', 'INVALID_OFFER_ID')] = None
    items: Annotated[Optional[List[CheckoutLine]], BeforeValidator(_cart)] = required()


# Staff

STAFF_ROLES = ('kitchen', 'admin')


def _role(value):
    if not isinstance(value, str) or value.strip().lower() not in STAFF_ROLES:
        _fail('INVALID_ROLE', 'Role must be kitchen or admin')
    return value.strip().lower()


class StaffLogin(RequestSchema):
    role: Annotated[Optional[str], BeforeValidator(_role)] = required()
    password: Annotated[Optional[str], BeforeValidator(
        lambda v: v if isinstance(v, str) and v
        else _fail('MISSING_PASSWORD', 'Password is required'))] = required()
