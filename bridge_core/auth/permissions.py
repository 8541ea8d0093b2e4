# =============================================================================
# bridge_core/auth/permissions.py
# Admin permission tree and checks
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List, Optional

WILDCARD = "*"

PERMISSION_TREE: List[Dict[str, Any]] = [
    {
        "id": "dashboard",
        "label": "Dashboard & Reports",
        "description": "Access to the main command center.",
        "children": [
            {"id": "dashboard.view", "label": "View Analytics Overview"},
            {"id": "dashboard.export", "label": "Export Reports"},
        ],
    },
    {
        "id": "sales",
        "label": "Sales & Enquiries",
        "description": "Manage incoming leads and communications.",
        "children": [
            {"id": "sales.view", "label": "View Inbox"},
            {"id": "sales.reply", "label": "Reply to Enquiries"},
            {"id": "sales.status", "label": "Update Status"},
            {"id": "sales.delete", "label": "Delete Messages"},
            {"id": "sales.export", "label": "Export Enquiries"},
        ],
    },
    {
        "id": "orders",
        "label": "Orders & Fulfilment",
        "description": "Track payments and dispatch parcels.",
        "children": [
            {"id": "orders.view", "label": "View Orders"},
            {"id": "orders.status", "label": "Update Order Status"},
            {"id": "orders.fulfil", "label": "Courier & Tracking"},
        ],
    },
    {
        "id": "catalog",
        "label": "Catalog Management",
        "description": "Control products and categories.",
        "children": [
            {"id": "catalog.products.view", "label": "View Products"},
            {"id": "catalog.products.create", "label": "Create Products"},
            {"id": "catalog.products.edit", "label": "Edit Products"},
            {"id": "catalog.products.delete", "label": "Delete Products"},
            {"id": "catalog.categories.manage", "label": "Manage Departments"},
            {"id": "catalog.subcategories.manage", "label": "Manage Sub-Categories"},
            {"id": "catalog.reviews.moderate", "label": "Moderate Reviews"},
            {"id": "catalog.ads", "label": "Generate Ad Copy"},
        ],
    },
    {
        "id": "content",
        "label": "Site Content & Visuals",
        "description": "Edit pages and visual elements.",
        "children": [
            {"id": "content.hero", "label": "Manage Hero Slides"},
            {"id": "content.brand", "label": "Brand Identity (Logo/Colors)"},
            {"id": "content.nav", "label": "Navigation & Footer"},
            {"id": "content.home", "label": "Home Page Sections"},
            {"id": "content.about", "label": "About Page Story"},
            {"id": "content.contact", "label": "Contact Page Details"},
            {"id": "content.legal", "label": "Legal Pages"},
            {"id": "content.articles", "label": "Journal Articles"},
            {"id": "content.training", "label": "Training Modules"},
        ],
    },
    {
        "id": "system",
        "label": "System Administration",
        "description": "Advanced settings and team management.",
        "children": [
            {"id": "system.team.view", "label": "View Team Members"},
            {"id": "system.team.manage", "label": "Add/Edit Members"},
            {"id": "system.team.delete", "label": "Remove Members"},
            {"id": "system.integrations", "label": "Manage Integrations (API Keys)"},
            {"id": "system.logs", "label": "View System Logs"},
        ],
    },
]


def flatten_permissions(tree: Optional[List[Dict[str, Any]]] = None) -> List[str]:
    """Leaf permission ids, depth first."""
    ids: List[str] = []
    for node in PERMISSION_TREE if tree is None else tree:
        children = node.get("children")
        if children:
            ids.extend(flatten_permissions(children))
        else:
            ids.append(node["id"])
    return ids


def has_permission(admin: Optional[Dict[str, Any]], permission_id: str) -> bool:
    """
    Whether ``admin`` may use ``permission_id``.

    Owners and holders of ``*`` have every permission. Holding a group id
    (e.g. "catalog") grants every permission below it.
    """
    if not admin:
        return False
    if admin.get("role") == "owner":
        return True
    granted = admin.get("permissions") or []
    if WILDCARD in granted:
        return True
    return any(permission_id == g or permission_id.startswith(f"{g}.") for g in granted)
