"""
Pydantic Models for Legendary Signatures API

This module contains the request models used throughout the application.
Field names follow the camelCase names of the Firestore documents they end up in.
"""

from datetime import datetime
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from typing import Any, Dict, List, Optional

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'

ORDER_STATUSES = ('pending', 'processing', 'shipped', 'delivered', 'cancelled')
PAYMENT_STATUSES = ('pending', 'paid', 'failed', 'refunded')
VIDEO_REQUEST_STATUSES = ('pending', 'accepted', 'completed', 'rejected')
PRODUCT_TYPES = ('shirt', 'ball', 'photo', 'boot', 'other')
BANNER_POSITIONS = ('home_hero', 'home_middle', 'shop_top', 'product_page', 'custom')
USER_ROLES = ('customer', 'admin', 'superadmin')


def _choice_pattern(choices) -> str:
    return f"^({'|'.join(choices)})$"


def parse_json_form(model_cls, raw: str):
    """Validate a JSON document sent as a multipart form field"""
    try:
        return model_cls.model_validate_json(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


class Address(BaseModel):
    """Postal address stored on users and orders"""
    line1: str = ''
    line2: Optional[str] = None
    city: str = ''
    state: Optional[str] = None
    postalCode: str = ''
    country: str = ''


# Checkout

class CheckoutItem(BaseModel):
    """One cart line submitted at checkout; the price comes from the product document"""
    productId: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)


class CheckoutCustomer(BaseModel):
    """Customer details collected by the checkout form"""
    firstName: str = Field(..., min_length=1)
    lastName: str = ''
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=7)
    address: str = Field(..., min_length=1)
    city: str = 'Dubai'
    zipCode: str = ''
    country: str = 'UAE'

    @field_validator('phone')
    @classmethod
    def validate_phone_digits(cls, v):
        if sum(c.isdigit() for c in v) < 7:
            raise ValueError('Phone number must contain at least 7 digits')
        return v


class CheckoutRequest(BaseModel):
    """Checkout request placing a product order"""
    customer: CheckoutCustomer
    items: List[CheckoutItem]
    paymentMethod: str = Field('credit-card', pattern='^(credit-card|cash-on-delivery)$')
    paymentMethodId: Optional[str] = None
    promoCode: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator('items')
    @classmethod
    def validate_cart_not_empty(cls, v):
        if not v:
            raise ValueError('Cart cannot be empty')
        return v


class QuoteRequest(BaseModel):
    """Price breakdown request for a cart"""
    items: List[CheckoutItem]
    promoCode: Optional[str] = None

    @field_validator('items')
    @classmethod
    def validate_cart_not_empty(cls, v):
        if not v:
            raise ValueError('Cart cannot be empty')
        return v


# Orders

class OrderStatusUpdate(BaseModel):
    """Admin update of an order's fulfilment status"""
    orderStatus: str = Field(..., pattern=_choice_pattern(ORDER_STATUSES))
    comment: Optional[str] = None
    trackingNumber: Optional[str] = None
    shippingMethod: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    """Admin update of an order's payment status"""
    paymentStatus: str = Field(..., pattern=_choice_pattern(PAYMENT_STATUSES))
    comment: Optional[str] = None


# Products

class Authenticity(BaseModel):
    verified: bool = False
    method: str = ''
    date: str = ''


class ProductCreate(BaseModel):
    """Signed memorabilia product"""
    title: str = Field(..., min_length=1)
    type: str = Field('other', pattern=_choice_pattern(PRODUCT_TYPES))
    signedBy: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    available: bool = True
    featured: bool = False
    description: str = ''
    shortDescription: Optional[str] = None
    categoryId: Optional[str] = None
    imageUrl: Optional[str] = None
    galleryImages: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    certificateNumber: Optional[str] = None
    authenticity: Optional[Authenticity] = None
    team: Optional[str] = None
    league: Optional[str] = None
    season: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)


class ProductUpdate(BaseModel):
    """Partial product update"""
    title: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = Field(None, pattern=_choice_pattern(PRODUCT_TYPES))
    signedBy: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    available: Optional[bool] = None
    featured: Optional[bool] = None
    description: Optional[str] = None
    shortDescription: Optional[str] = None
    categoryId: Optional[str] = None
    imageUrl: Optional[str] = None
    galleryImages: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    certificateNumber: Optional[str] = None
    authenticity: Optional[Authenticity] = None
    team: Optional[str] = None
    league: Optional[str] = None
    season: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)


# Categories

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = Field(None, pattern=r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
    description: str = ''
    imageUrl: Optional[str] = None
    featured: bool = False
    order: int = 0
    parentId: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, pattern=r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    featured: Optional[bool] = None
    order: Optional[int] = None
    parentId: Optional[str] = None


# Banners

class BannerCreate(BaseModel):
    """Promotional banner shown in a page slot between two dates"""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    mobileImageUrl: Optional[str] = None
    position: str = Field('home_hero', pattern=_choice_pattern(BANNER_POSITIONS))
    link: Optional[str] = None
    active: bool = True
    startDate: datetime
    endDate: datetime

    @model_validator(mode='after')
    def validate_window(self):
        if self.endDate <= self.startDate:
            raise ValueError('endDate must be after startDate')
        return self


class BannerUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    imageUrl: Optional[str] = None
    mobileImageUrl: Optional[str] = None
    position: Optional[str] = Field(None, pattern=_choice_pattern(BANNER_POSITIONS))
    link: Optional[str] = None
    active: Optional[bool] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None


# Promo codes

class PromoCodeCreate(BaseModel):
    """Promo code definition; a 6-digit code is generated when none is given"""
    code: Optional[str] = Field(None, pattern=r'^[A-Za-z0-9]{4,20}$')
    description: str = ''
    discountType: str = Field(..., pattern='^(percentage|fixed)$')
    discountValue: float = Field(..., gt=0)
    minOrderValue: Optional[float] = Field(None, ge=0)
    maxDiscount: Optional[float] = Field(None, gt=0)
    usageLimit: Optional[int] = Field(None, ge=1)
    startDate: datetime
    endDate: datetime
    isActive: bool = True

    @model_validator(mode='after')
    def validate_promo(self):
        if self.discountType == 'percentage' and self.discountValue > 100:
            raise ValueError('Percentage discount cannot exceed 100')
        if self.endDate <= self.startDate:
            raise ValueError('endDate must be after startDate')
        return self


class PromoCodeUpdate(BaseModel):
    code: Optional[str] = Field(None, pattern=r'^[A-Za-z0-9]{4,20}$')
    description: Optional[str] = None
    discountType: Optional[str] = Field(None, pattern='^(percentage|fixed)$')
    discountValue: Optional[float] = Field(None, gt=0)
    minOrderValue: Optional[float] = Field(None, ge=0)
    maxDiscount: Optional[float] = Field(None, gt=0)
    usageLimit: Optional[int] = Field(None, ge=1)
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    isActive: Optional[bool] = None


class PromoValidationRequest(BaseModel):
    code: str = Field(..., min_length=1)
    orderTotal: float = Field(..., ge=0)


# Users

class ProfileUpdate(BaseModel):
    """Fields a customer may change on their own profile"""
    displayName: Optional[str] = Field(None, min_length=1)
    photoURL: Optional[str] = None
    phoneNumber: Optional[str] = None
    address: Optional[Address] = None
    newsletter: Optional[bool] = None

    @field_validator('displayName')
    @classmethod
    def reject_null_name(cls, v):
        if v is None:
            raise ValueError('displayName cannot be null')
        return v


class CustomerCreate(BaseModel):
    """Customer record created from the admin console"""
    email: str = Field(..., pattern=EMAIL_PATTERN)
    displayName: str = Field(..., min_length=1)
    phoneNumber: Optional[str] = None
    photoURL: Optional[str] = None
    address: Optional[Address] = None
    newsletter: bool = False
    uid: Optional[str] = None


class CustomerUpdate(BaseModel):
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    displayName: Optional[str] = Field(None, min_length=1)
    phoneNumber: Optional[str] = None
    photoURL: Optional[str] = None
    address: Optional[Address] = None
    newsletter: Optional[bool] = None

    @field_validator('email', 'displayName')
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v


class AdminCreate(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    displayName: str = Field(..., min_length=1)
    role: str = Field('admin', pattern='^(admin|superadmin)$')
    uid: Optional[str] = None


class RoleUpdate(BaseModel):
    role: str = Field(..., pattern=_choice_pattern(USER_ROLES))


class WishlistItem(BaseModel):
    productId: str = Field(..., min_length=1)


# Cart

class CartItemAdd(BaseModel):
    productId: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


# Personalized videos

class VideoCreate(BaseModel):
    """Catalog video shown on the personalized videos page"""
    title: str = Field(..., min_length=1)
    description: str = ''
    thumbnailUrl: str = ''
    videoUrl: str = ''
    player: str = Field(..., min_length=1)
    featured: bool = False


class VideoUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    videoUrl: Optional[str] = None
    player: Optional[str] = None
    featured: Optional[bool] = None


class VideoPlayerCreate(BaseModel):
    """Player who records personalized videos"""
    name: str = Field(..., min_length=1)
    position: str = ''
    team: str = ''
    price: float = Field(..., gt=0)
    imageUrl: str = ''
    available: bool = True
    featured: bool = False
    description: str = ''


class VideoPlayerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    position: Optional[str] = None
    team: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    imageUrl: Optional[str] = None
    available: Optional[bool] = None
    featured: Optional[bool] = None
    description: Optional[str] = None


class VideoRequestCreate(BaseModel):
    """Customer request for a personalized video"""
    playerId: str = Field(..., min_length=1)
    occasion: str = Field(..., min_length=1)
    recipientName: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=1000)
    deliveryDate: str = Field(..., min_length=1)
    customerName: Optional[str] = None
    customerEmail: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    customerPhone: Optional[str] = None
    paymentMethod: str = Field('credit-card', pattern='^(credit-card|cash-on-delivery)$')


class VideoRequestStatusUpdate(BaseModel):
    status: str = Field(..., pattern=_choice_pattern(VIDEO_REQUEST_STATUSES))
    videoUrl: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    comment: Optional[str] = None


class VideoPaymentUpdate(BaseModel):
    paymentStatus: str = Field(..., pattern='^(paid|failed)$')


# Auctions

class AuctionCreate(BaseModel):
    playerName: str = Field(..., min_length=1)
    team: str = ''
    description: Optional[str] = None
    image: str = ''
    startingBid: float = Field(..., gt=0)
    endTime: datetime


class BidRequest(BaseModel):
    amount: float = Field(..., gt=0)


# Content

class TestimonialCreate(BaseModel):
    name: str = Field(..., min_length=1)
    role: Optional[str] = None
    content: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    imageUrl: Optional[str] = None
    featured: bool = False
    approved: bool = False
    productId: Optional[str] = None


class TestimonialUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    role: Optional[str] = None
    content: Optional[str] = Field(None, min_length=1)
    rating: Optional[int] = Field(None, ge=1, le=5)
    imageUrl: Optional[str] = None
    featured: Optional[bool] = None
    approved: Optional[bool] = None
    productId: Optional[str] = None


class SiteSettingsUpdate(BaseModel):
    data: Dict[str, Any]


class ContactMessage(BaseModel):
    """Message sent through the contact form"""
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    subject: str = ''
    message: str = Field(..., min_length=1, description="Message content cannot be empty")


class SeedRequest(BaseModel):
    collections: Optional[List[str]] = None
    force: bool = False
