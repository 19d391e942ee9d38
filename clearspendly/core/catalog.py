"""Default seed data for new tenants.

Single source of truth for the tag taxonomy, email / invoice templates,
preferences, mileage rates and plan quotas written by the setup steps.
Unknown subscription plans fall back to the free tier.
"""

from datetime import date
from decimal import Decimal
from typing import Any

# ── Tag taxonomy ─────────────────────────────────────────────

DEFAULT_TAG_CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Project",
        "description": "Project or initiative this expense belongs to",
        "color": "#8b5cf6",
        "required": True,
        "multiple": False,
        "sort_order": 1,
        "tags": [
            "General", "Q1-2025", "Q2-2025", "Website-Redesign",
            "Product-Launch", "Marketing-Campaign",
        ],
    },
    {
        "name": "Department",
        "description": "Department responsible for this expense",
        "color": "#06b6d4",
        "required": True,
        "multiple": False,
        "sort_order": 2,
        "tags": [
            "General", "Engineering", "Marketing", "Sales",
            "Operations", "Finance", "HR", "Legal",
        ],
    },
    {
        "name": "Tax Status",
        "description": "Tax deductibility status",
        "color": "#10b981",
        "required": False,
        "multiple": False,
        "sort_order": 3,
        "tags": [
            "Fully Deductible", "Partially Deductible", "Non-Deductible",
            "Personal", "Mixed Use",
        ],
    },
    {
        "name": "Client",
        "description": "Client this expense was incurred for",
        "color": "#f59e0b",
        "required": False,
        "multiple": False,
        "sort_order": 4,
        "tags": ["Internal", "Client-A", "Client-B", "Prospect-Follow-up", "General-Business"],
    },
    {
        "name": "Expense Type",
        "description": "Type of business expense",
        "color": "#ef4444",
        "required": False,
        "multiple": True,
        "sort_order": 5,
        "tags": [
            "Travel", "Meals & Entertainment", "Office Supplies", "Equipment",
            "Software & Subscriptions", "Marketing & Advertising", "Professional Services",
            "Utilities", "Rent & Facilities", "Insurance", "Training & Education",
            "Communications", "Vehicle Expenses", "Bank Fees", "Other",
        ],
    },
]

# ── Email templates (one per template_type) ──────────────────

DEFAULT_EMAIL_TEMPLATES: list[dict[str, str]] = [
    {
        "template_type": "invoice",
        "name": "Professional Invoice",
        "description": "Clean, professional invoice template",
        "subject_template": "Invoice {{invoice_number}} from {{business_name}}",
        "greeting_message": "Thank you for your business! Please find your invoice details below.",
        "footer_message": (
            "Questions about this invoice? Contact us at {{business_email}} or {{business_phone}}."
        ),
        "primary_color": "#667eea",
        "secondary_color": "#764ba2",
        "accent_color": "#10b981",
    },
    {
        "template_type": "payment_reminder",
        "name": "Friendly Reminder",
        "description": "Professional but friendly payment reminder",
        "subject_template": (
            "Payment Reminder: Invoice {{invoice_number}} ({{days_overdue}} days overdue)"
        ),
        "greeting_message": (
            "We hope you're doing well! This is a friendly reminder about an outstanding invoice."
        ),
        "footer_message": (
            "If you have any questions or need assistance, please don't hesitate to reach out."
        ),
        "primary_color": "#f59e0b",
        "secondary_color": "#dc2626",
        "accent_color": "#10b981",
    },
    {
        "template_type": "payment_received",
        "name": "Payment Confirmation",
        "description": "Professional payment confirmation template",
        "subject_template": "Payment Received: Invoice {{invoice_number}} - Thank You!",
        "greeting_message": (
            "Thank you for your payment! We've successfully received and processed your payment."
        ),
        "footer_message": "We appreciate your business and look forward to serving you again.",
        "primary_color": "#10b981",
        "secondary_color": "#059669",
        "accent_color": "#667eea",
    },
]

# ── Invoice template ─────────────────────────────────────────

DEFAULT_INVOICE_TEMPLATE: dict[str, Any] = {
    "name": "Modern Professional",
    "description": "Clean, modern invoice template with professional styling",
    "is_default": True,
    "template_data": {
        "layout": "modern",
        "theme": "professional",
        "colors": {
            "primary": "#667eea",
            "secondary": "#764ba2",
            "accent": "#10b981",
            "text": "#1a1a1a",
            "background": "#ffffff",
        },
        "typography": {
            "font_family": "Inter, system-ui, sans-serif",
            "header_size": "xl",
            "body_size": "base",
        },
        "sections": {
            "header": {"show_logo": True, "show_business_info": True, "layout": "split"},
            "billing": {
                "show_billing_address": True,
                "show_shipping_address": False,
                "layout": "side_by_side",
            },
            "items": {
                "show_description": True,
                "show_quantity": True,
                "show_rate": True,
                "show_amount": True,
            },
            "totals": {
                "show_subtotal": True,
                "show_tax": True,
                "show_discount": False,
                "show_shipping": False,
            },
            "footer": {"show_payment_terms": True, "show_notes": True, "show_thank_you": True},
        },
        "branding": {"show_watermark": False, "custom_footer": False},
    },
}

# ── User preferences ─────────────────────────────────────────

DEFAULT_USER_PREFERENCES: dict[str, Any] = {
    "currency": "USD",
    "timezone": "America/New_York",
    "date_format": "MM/DD/YYYY",
    "time_format": "12h",
    "number_format": "en-US",
    "language": "en",
    "notifications": {
        "email_receipts": True,
        "email_reminders": True,
        "email_reports": False,
        "in_app_notifications": True,
        "mobile_notifications": False,
    },
    "business_settings": {
        "fiscal_year_start": "01-01",
        "business_type": "sole_proprietorship",
        "tax_id_required": False,
        "multi_currency": False,
    },
}

# ── IRS standard business mileage rates (USD / mile) ─────────

IRS_MILEAGE_RATES: list[dict[str, Any]] = [
    {"year": 2025, "rate": Decimal("0.7000"), "effective_date": date(2025, 1, 1)},
    {"year": 2024, "rate": Decimal("0.6700"), "effective_date": date(2024, 1, 1)},
    {"year": 2023, "rate": Decimal("0.6550"), "effective_date": date(2023, 1, 1)},
    {"year": 2022, "rate": Decimal("0.5850"), "effective_date": date(2022, 1, 1)},
    {"year": 2021, "rate": Decimal("0.5600"), "effective_date": date(2021, 1, 1)},
]

# ── Plan quotas (-1 = unlimited) ─────────────────────────────

DEFAULT_USAGE_LIMITS: dict[str, dict[str, int]] = {
    "free": {
        "receipts_per_month": 50,
        "invoices_per_month": 10,
        "team_members": 1,
        "storage_mb": 100,
        "api_calls_per_day": 100,
    },
    "starter": {
        "receipts_per_month": 200,
        "invoices_per_month": 50,
        "team_members": 3,
        "storage_mb": 1000,
        "api_calls_per_day": 1000,
    },
    "professional": {
        "receipts_per_month": 1000,
        "invoices_per_month": 200,
        "team_members": 10,
        "storage_mb": 5000,
        "api_calls_per_day": 5000,
    },
    "enterprise": {
        "receipts_per_month": -1,
        "invoices_per_month": -1,
        "team_members": -1,
        "storage_mb": -1,
        "api_calls_per_day": -1,
    },
}

EMPTY_USAGE_COUNTERS: dict[str, int] = {
    "receipts_this_month": 0,
    "invoices_this_month": 0,
    "storage_used_mb": 0,
    "api_calls_today": 0,
}

BILLING_PERIOD_DAYS = 30

# ── Vendor categories ────────────────────────────────────────

DEFAULT_VENDOR_CATEGORIES: list[str] = [
    "Office Supplies",
    "Software & Subscriptions",
    "Professional Services",
    "Travel & Transportation",
    "Meals & Entertainment",
    "Utilities",
    "Equipment & Technology",
    "Marketing & Advertising",
    "Insurance",
    "Banking & Finance",
]


def get_usage_limits(plan: str) -> dict[str, int]:
    """Quotas for a subscription plan; unknown plans get the free tier."""
    return dict(DEFAULT_USAGE_LIMITS.get(plan, DEFAULT_USAGE_LIMITS["free"]))


def mileage_rate_note(year: int) -> str:
    return f"Standard mileage rate for {year}"


def build_tenant_settings(company_name: str, plan: str) -> dict[str, Any]:
    """The ``tenant.settings`` document written by the branding step."""
    return {
        "branding": {
            "primary_color": "#667eea",
            "secondary_color": "#764ba2",
            "logo_url": None,
            "company_name": company_name,
        },
        "features": {
            "ai_enhanced_ocr": True,
            "multi_currency": False,
            "team_collaboration": True,
            "advanced_analytics": plan != "free",
        },
        "defaults": {
            "currency": DEFAULT_USER_PREFERENCES["currency"],
            "timezone": DEFAULT_USER_PREFERENCES["timezone"],
            "date_format": DEFAULT_USER_PREFERENCES["date_format"],
        },
    }
