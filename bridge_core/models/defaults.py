# =============================================================================
# bridge_core/models/defaults.py
# Default Site Settings and Seed Catalog
# =============================================================================
"""
Defaults used before any data has been loaded, and the seed records written
to a freshly provisioned remote database.
"""

from __future__ import annotations
import copy
from typing import Any, Dict, List

from bridge_core.models.tables import SETTINGS_ID

DEFAULT_SETTINGS: Dict[str, Any] = {
    "id": SETTINGS_ID,

    # Brand
    "companyName": "Kasi Couture",
    "slogan": "Personal Luxury Wardrobe",
    "companyLogo": "KC",
    "companyLogoUrl": "",
    "primaryColor": "#D4AF37",
    "secondaryColor": "#1E293B",
    "accentColor": "#F59E0B",
    "backgroundColor": "#FDFCFB",
    "textColor": "#0f172a",

    # Navigation
    "navHomeLabel": "Home",
    "navProductsLabel": "My Picks",
    "navAboutLabel": "My Story",
    "navContactLabel": "Ask Me",
    "navDashboardLabel": "Portal",

    # Contact
    "contactEmail": "hello@kasicouture.com",
    "contactPhone": "+27 11 900 2000",
    "whatsappNumber": "+27119002000",
    "address": "Melrose Arch, Johannesburg",
    "socialLinks": [
        {"id": "1", "name": "Instagram", "url": "https://instagram.com/kasicouture", "iconUrl": ""},
    ],

    # Footer
    "footerDescription": "This isn't just a store. It's a collection of the things I love.",
    "footerCopyrightText": "All rights reserved. Curated with love.",

    # Home
    "homeHeroBadge": "Curated by Kasi",
    "homeAboutTitle": "Hi, I'm the Curator.",
    "homeAboutDescription": "A bridge to the finest pieces I trust and wear myself.",
    "homeAboutImage": "",
    "homeAboutCta": "Read My Full Story",
    "homeCategorySectionTitle": "Curated Categories",
    "homeCategorySectionSubtitle": "The Collection",
    "homeTrustSectionTitle": "Why I Chose These",
    "homeTrustItem1Title": "Personally Vetted",
    "homeTrustItem1Desc": "Every link leads to a trusted retailer.",
    "homeTrustItem1Icon": "ShieldCheck",
    "homeTrustItem2Title": "Authentic Style",
    "homeTrustItem2Desc": "Unique expression over fast fashion trends.",
    "homeTrustItem2Icon": "Sparkles",
    "homeTrustItem3Title": "Direct Access",
    "homeTrustItem3Desc": "Your bridge to global and local luxury.",
    "homeTrustItem3Icon": "Link",

    # Products
    "productsHeroTitle": "The Edit",
    "productsHeroSubtitle": "A hand-picked selection of essentials.",
    "productsHeroImage": "",
    "productsHeroImages": [],
    "productsSearchPlaceholder": "Find something special...",

    # About
    "aboutHeroTitle": "From Passion to Platform.",
    "aboutHeroSubtitle": "A personal curation platform.",
    "aboutMainImage": "",
    "aboutEstablishedYear": "2024",
    "aboutFounderName": "",
    "aboutLocation": "South Africa",
    "aboutHistoryTitle": "My Journey",
    "aboutHistoryBody": "",
    "aboutMissionTitle": "My Promise",
    "aboutMissionBody": "",
    "aboutMissionIcon": "Heart",
    "aboutCommunityTitle": "The Vision",
    "aboutCommunityBody": "",
    "aboutCommunityIcon": "Users",
    "aboutIntegrityTitle": "Transparency",
    "aboutIntegrityBody": "",
    "aboutIntegrityIcon": "Award",
    "aboutSignatureImage": "",
    "aboutGalleryImages": [],

    # Contact page
    "contactHeroTitle": "Let's Connect.",
    "contactHeroSubtitle": "I read every message.",
    "contactFormNameLabel": "Your Name",
    "contactFormEmailLabel": "Your Email",
    "contactFormSubjectLabel": "Subject",
    "contactFormMessageLabel": "Message",
    "contactFormButtonText": "Send Message",
    "contactInfoTitle": "Contact Info",
    "contactAddressLabel": "Based In",
    "contactHoursLabel": "Online Hours",
    "contactHoursWeekdays": "Mon - Fri: 09:00 - 18:00",
    "contactHoursWeekends": "Sat: 10:00 - 14:00",

    # Legal
    "disclosureTitle": "Affiliate Disclosure",
    "disclosureContent": "",
    "privacyTitle": "Privacy Policy",
    "privacyContent": "",
    "termsTitle": "Terms of Service",
    "termsContent": "",

    # Integrations
    "emailJsServiceId": "",
    "emailJsTemplateId": "",
    "emailJsPublicKey": "",
    "googleAnalyticsId": "",
    "facebookPixelId": "",
    "tiktokPixelId": "",
    "pinterestTagId": "",
    "amazonAssociateId": "",
    "webhookUrl": "",

    # Commerce
    "enableDirectSales": False,
    "currency": "ZAR",
    "yocoPublicKey": "",
    "payfastMerchantId": "",
    "payfastMerchantKey": "",
    "payfastSaltPassphrase": "",
    "zapierWebhookUrl": "",
    "bankDetails": "",
}

SEED_CATEGORIES: List[Dict[str, Any]] = [
    {"id": "cat1", "name": "Apparel", "icon": "Shirt", "image": "", "description": "Luxury ready-to-wear."},
    {"id": "cat2", "name": "Accessories", "icon": "Watch", "image": "", "description": "The finishing touch."},
    {"id": "cat3", "name": "Footwear", "icon": "Footprints", "image": "", "description": "Walk in confidence."},
    {"id": "cat4", "name": "Home Living", "icon": "Home", "image": "", "description": "Couture for your space."},
]

SEED_SUBCATEGORIES: List[Dict[str, Any]] = [
    {"id": "sub1", "categoryId": "cat1", "name": "Silk Dresses"},
    {"id": "sub2", "categoryId": "cat1", "name": "Tailored Blazers"},
    {"id": "sub3", "categoryId": "cat2", "name": "Leather Bags"},
    {"id": "sub4", "categoryId": "cat3", "name": "Stilettos"},
]

SEED_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "p1",
        "name": "Midnight Silk Wrap",
        "sku": "KC-APP-001",
        "price": 3450,
        "affiliateLink": "https://example.com/midnight-silk",
        "categoryId": "cat1",
        "subCategoryId": "sub1",
        "description": "A luxurious 100% silk wrap dress that transitions from brunch to ballroom.",
        "features": ["100% Premium Mulberry Silk", "Hand-finished seams", "Adjustable wrap closure"],
        "specifications": {"Material": "100% Mulberry Silk", "Care": "Dry Clean Only"},
        "media": [],
        "discountRules": [{"id": "d1", "type": "percentage", "value": 15, "description": "Season Launch"}],
        "reviews": [],
        "createdAt": 1709251200000,
    },
]

SEED_SLIDES: List[Dict[str, Any]] = [
    {"id": "1", "image": "", "type": "image", "title": "The Curator's Edit",
     "subtitle": "A personal selection of this season's most compelling pieces.", "cta": "View My Picks"},
    {"id": "2", "image": "", "type": "image", "title": "Modern Heritage",
     "subtitle": "Bridging traditional craft and contemporary style.", "cta": "Read the Story"},
]

SEED_DATA: Dict[str, List[Dict[str, Any]]] = {
    "products": SEED_PRODUCTS,
    "categories": SEED_CATEGORIES,
    "subcategories": SEED_SUBCATEGORIES,
    "carousel_slides": SEED_SLIDES,
}


def default_settings() -> Dict[str, Any]:
    """Fresh copy of DEFAULT_SETTINGS."""
    return copy.deepcopy(DEFAULT_SETTINGS)
