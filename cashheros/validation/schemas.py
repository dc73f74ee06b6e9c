"""
Marshmallow schemas for whole-payload validation.

Every schema excludes unknown keys, trims string input, lowercases email
fields and uppercases coupon codes before the field validators run, and
applies declared defaults. Nested objects (addresses, preference blocks,
social-media and contact details) and lists of strings are declared one level
deep.

Schema names in SCHEMAS match the payload names used by the API routes
(``couponCreate``, ``pagination``, ...).
"""

from datetime import datetime, timezone
from types import MappingProxyType

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

from cashheros.validation.checks import is_email, parse_iso8601

PERCENTAGE = validate.Range(min=0, max=100)
NON_NEGATIVE = validate.Range(min=0)
TRANSACTION_STATUSES = ("pending", "confirmed", "rejected", "paid")
TRANSACTION_TYPES = ("cashback", "referral", "bonus", "withdrawal")
REVIEW_ITEM_TYPES = ("store", "coupon", "cashback")
NOTIFICATION_FREQUENCIES = ("immediate", "daily", "weekly")


# =============================================================================
# NORMALIZING FIELDS
# =============================================================================

class Text(fields.String):
    """
    String field that trims surrounding whitespace and optionally folds case.

    Empty strings are rejected after trimming.
    """

    default_error_messages = {"empty": "Field may not be empty."}

    def __init__(self, *, trim: bool = True, case: str = None, **kwargs):
        if case not in (None, "lower", "upper"):
            raise ValueError(f"Unsupported case folding: {case!r}")
        super().__init__(**kwargs)
        self.trim = trim
        self.case = case

    def _deserialize(self, value, attr, data, **kwargs):
        value = super()._deserialize(value, attr, data, **kwargs)
        if self.trim:
            value = value.strip()
        if self.case == "lower":
            value = value.lower()
        elif self.case == "upper":
            value = value.upper()
        if value == "":
            raise self.make_error("empty")
        return value


class Code(Text):
    """Trimmed, uppercased code such as a coupon code."""

    def __init__(self, **kwargs):
        super().__init__(case="upper", **kwargs)


class EmailAddress(Text):
    """Trimmed, lowercased email address checked with email_validator."""

    default_error_messages = {"invalid_email": "Not a valid email address."}

    def __init__(self, **kwargs):
        super().__init__(case="lower", **kwargs)
        self.validators.insert(0, self._validate_email)

    def _validate_email(self, value):
        if not is_email(value):
            raise self.make_error("invalid_email")


class Link(Text):
    """Trimmed absolute URL."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.validators.insert(0, validate.URL(relative=False, error="Not a valid URL."))


class WholeNumber(fields.Integer):
    """Integer that accepts numeric strings but rejects fractional values."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise self.make_error("invalid")
        return super()._deserialize(value, attr, data, **kwargs)


class Flag(fields.Boolean):
    """Boolean accepting only true/false and the strings "true" and "false"."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value in ("true", "false"):
            return value == "true"
        raise self.make_error("invalid")


class Amount(fields.Float):
    """Finite number; numeric strings are parsed."""

    def __init__(self, **kwargs):
        kwargs.setdefault("allow_nan", False)
        super().__init__(**kwargs)


class IsoDateTime(fields.Field):
    """
    ISO-8601 date or date-time, loaded as a timezone-aware datetime.

    Values without an offset are read as UTC.
    """

    default_error_messages = {"invalid": "Not a valid ISO 8601 date."}

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        parsed = parse_iso8601(value)
        if parsed is None:
            raise self.make_error("invalid")
        return parsed

    def _serialize(self, value, attr, obj, **kwargs):
        return value.isoformat() if value is not None else None


class InFuture(validate.Validator):
    """Validator for datetimes that must be later than the current time."""

    error = "Date must be in the future."

    def __call__(self, value: datetime) -> datetime:
        if value <= datetime.now(timezone.utc):
            raise ValidationError(self.error)
        return value


# =============================================================================
# BASE AND NESTED SCHEMAS
# =============================================================================

class BaseSchema(Schema):
    """Base schema: unknown keys are dropped instead of reported."""

    class Meta:
        unknown = EXCLUDE


class AddressSchema(BaseSchema):
    street = Text()
    city = Text()
    state = Text()
    zipCode = Text()
    country = Text()


class PreferencesSchema(BaseSchema):
    emailNotifications = Flag()
    smsNotifications = Flag()
    pushNotifications = Flag()
    categories = fields.List(Text())
    notificationFrequency = Text(validate=validate.OneOf(NOTIFICATION_FREQUENCIES))
    emailDigest = Flag()


class SocialMediaSchema(BaseSchema):
    facebook = Link()
    twitter = Link()
    instagram = Link()
    pinterest = Link()


class ContactInfoSchema(BaseSchema):
    email = EmailAddress()
    phone = Text()
    address = Text()


# =============================================================================
# USER SCHEMAS
# =============================================================================

class UserRegistrationSchema(BaseSchema):
    email = EmailAddress(required=True)
    password = fields.String(required=True, validate=validate.Length(min=8))
    firstName = Text()
    lastName = Text()
    phone = Text()


class UserLoginSchema(BaseSchema):
    email = EmailAddress(required=True)
    password = fields.String(required=True, validate=validate.Length(min=1))


class UserUpdateSchema(BaseSchema):
    firstName = Text()
    lastName = Text()
    phone = Text()
    address = fields.Nested(AddressSchema)
    preferences = fields.Nested(PreferencesSchema)


# =============================================================================
# COUPON AND CASHBACK SCHEMAS
# =============================================================================

class CouponCreateSchema(BaseSchema):
    code = Code(required=True)
    title = Text(required=True)
    description = Text()
    discount = Amount(required=True, validate=PERCENTAGE)
    store = Text(required=True, trim=False)
    expiryDate = IsoDateTime(validate=InFuture())
    isActive = Flag()
    usageLimit = WholeNumber(allow_none=True, validate=NON_NEGATIVE)
    category = Text()


class CouponUpdateSchema(BaseSchema):
    code = Code()
    title = Text()
    description = Text()
    discount = Amount(validate=PERCENTAGE)
    store = Text(trim=False)
    expiryDate = IsoDateTime()
    isActive = Flag()
    usageLimit = WholeNumber(allow_none=True, validate=NON_NEGATIVE)
    category = Text()


class CashbackCreateSchema(BaseSchema):
    title = Text(required=True)
    description = Text()
    amount = Amount(required=True, validate=PERCENTAGE)
    store = Text(required=True, trim=False)
    category = Text()
    terms = Text()
    expiryDate = IsoDateTime(validate=InFuture())
    isActive = Flag()
    featured = Flag()


class CashbackUpdateSchema(BaseSchema):
    title = Text()
    description = Text()
    amount = Amount(validate=PERCENTAGE)
    store = Text(trim=False)
    category = Text()
    terms = Text()
    expiryDate = IsoDateTime()
    isActive = Flag()
    featured = Flag()


# =============================================================================
# STORE SCHEMAS
# =============================================================================

class StoreUpdateSchema(BaseSchema):
    name = Text()
    logo = Text()
    description = Text()
    website = Link()
    categories = fields.List(Text())
    affiliateLink = Link()
    cashbackPercentage = Amount(validate=PERCENTAGE)
    isActive = Flag()
    isFeatured = Flag()
    socialMedia = fields.Nested(SocialMediaSchema)
    contactInfo = fields.Nested(ContactInfoSchema)
    termsAndConditions = Text()


class StoreCreateSchema(StoreUpdateSchema):
    name = Text(required=True)
    logo = Text(required=True)


# =============================================================================
# TRANSACTION SCHEMAS
# =============================================================================

class TransactionCreateSchema(BaseSchema):
    user = Text(required=True, trim=False)
    store = Text(required=True, trim=False)
    amount = Amount(required=True, validate=NON_NEGATIVE)
    cashbackAmount = Amount(required=True, validate=NON_NEGATIVE)
    cashbackPercentage = Amount(required=True, validate=PERCENTAGE)
    orderReference = Text()
    status = Text(validate=validate.OneOf(TRANSACTION_STATUSES))
    type = Text(validate=validate.OneOf(TRANSACTION_TYPES))
    description = Text()
    purchaseDate = IsoDateTime()
    couponUsed = Text(trim=False)
    cashbackOffer = Text(trim=False)


class TransactionUpdateSchema(BaseSchema):
    status = Text(validate=validate.OneOf(TRANSACTION_STATUSES))
    confirmationDate = IsoDateTime()
    paymentDate = IsoDateTime()
    paymentMethod = Text()
    paymentReference = Text()
    notes = Text()


# =============================================================================
# REVIEW SCHEMAS
# =============================================================================

class ReviewUpdateSchema(BaseSchema):
    rating = WholeNumber(validate=validate.Range(min=1, max=5))
    title = Text()
    content = Text()
    pros = fields.List(Text())
    cons = fields.List(Text())
    images = fields.List(Text())


class ReviewCreateSchema(ReviewUpdateSchema):
    itemType = Text(required=True, validate=validate.OneOf(REVIEW_ITEM_TYPES))
    itemId = Text(required=True, trim=False)
    rating = WholeNumber(required=True, validate=validate.Range(min=1, max=5))


# =============================================================================
# PAGINATION AND FILTERING
# =============================================================================

class PaginationSchema(BaseSchema):
    page = WholeNumber(load_default=1, validate=validate.Range(min=1))
    limit = WholeNumber(load_default=20, validate=validate.Range(min=1, max=100))
    sort = Text()
    order = Text(load_default="desc", validate=validate.OneOf(("asc", "desc")))
    search = Text()
    category = Text()
    store = Text()
    startDate = IsoDateTime()
    endDate = IsoDateTime()

    @validates_schema(skip_on_field_errors=False)
    def validate_date_range(self, data, **kwargs):
        start, end = data.get("startDate"), data.get("endDate")
        if start is not None and end is not None and end < start:
            raise ValidationError("endDate must be on or after startDate", field_name="endDate")


SCHEMAS = MappingProxyType({
    "userRegistration": UserRegistrationSchema,
    "userLogin": UserLoginSchema,
    "userUpdate": UserUpdateSchema,
    "couponCreate": CouponCreateSchema,
    "couponUpdate": CouponUpdateSchema,
    "cashbackCreate": CashbackCreateSchema,
    "cashbackUpdate": CashbackUpdateSchema,
    "storeCreate": StoreCreateSchema,
    "storeUpdate": StoreUpdateSchema,
    "transactionCreate": TransactionCreateSchema,
    "transactionUpdate": TransactionUpdateSchema,
    "reviewCreate": ReviewCreateSchema,
    "reviewUpdate": ReviewUpdateSchema,
    "pagination": PaginationSchema,
})
