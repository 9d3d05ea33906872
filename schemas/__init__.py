from .base import APIModel, UTCDatetime
from .user_schema import SignupRequest, LoginRequest, UserRead, TokenResponse
from .organization_schema import OrganizationSettings, OrganizationRead, OrganizationSettingsResponse
from .member_schema import MemberCreate, MemberUpdate, MemberRead
from .plan_schema import PlanCreate, PlanUpdate, PlanRead, PlanSummary
from .subscription_schema import SubscriptionCreate, SubscriptionUpdate, SubscriptionRead, MemberSummary
from .payment_schema import PaymentCreate, PaymentRead
from .image_schema import ImageUpload, ImageRead, ImageAttach, ImageAttachResponse, AttachTarget
from .event_schema import (
    EventCreate,
    EventUpdate,
    EventRead,
    RegistrationRead,
    PublicEventRead,
    PublicEventDetail,
    RegisterRequest,
    PublicRegisterRequest,
    RegistrationResult,
)
from .stats_schema import DashboardStats, DailyActivity, AnalyticsReport
