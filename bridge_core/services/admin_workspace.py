# =============================================================================
# bridge_core/services/admin_workspace.py
# Admin surface: catalogue, orders, content, inbox, team and maintenance actions
# =============================================================================
"""
AdminWorkspace - the admin portal's working copy of the catalogue.

The workspace keeps its own collections (catalogue, slides, enquiries,
orders, articles, training modules, admins, stats). Every action:

1. changes the workspace collection (the optimistic local action)
2. mirrors the collections to the local store
3. hands the remote write to OptimisticMutator.perform_save

A failed remote write leaves the local change in place; the store is
refreshed afterwards so storefront readers converge on the server state.
"""

from __future__ import annotations
import json
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import pandas as pd

from bridge_core.auth import ADMIN_AREA, hash_password
from bridge_core.errors import AuthenticationError, LocalStorageError
from bridge_core.models import (
    SETTINGS_TABLE,
    AdminRole,
    EnquiryStatus,
    OrderStatus,
    SaveStatus,
    key_field,
    local_key,
    now_ms,
)
from bridge_core.services.analytics_service import engagement_frame
from bridge_core.services.base_service import BaseService, ServiceResult, ResultCode

if TYPE_CHECKING:
    from bridge_core.auth import SessionGate
    from bridge_core.offline.local_store import LocalStore
    from bridge_core.offline.remote_gateway import RemoteGateway
    from bridge_core.offline.sync_store import SyncStore
    from bridge_core.services.mutations import OptimisticMutator

WORKSPACE_TABLES = (
    "products",
    "categories",
    "subcategories",
    "carousel_slides",
    "enquiries",
    "admin_users",
    "product_stats",
    "orders",
    "articles",
    "training_modules",
)

# Tables the admin portal pulls on load()
LOADED_TABLES = (
    "products", "categories", "subcategories", "carousel_slides",
    "admin_users", "product_stats", "orders", "articles", "training_modules",
)

ENQUIRY_CSV_COLUMNS = ["Name", "Email", "Subject", "Message", "Date"]


class AdminWorkspace(BaseService):
    """
    Admin CRUD on top of the sync store.

    Usage:
        workspace = AdminWorkspace(store, gateway, local_store, mutator, session)
        workspace.load()
        result = workspace.save_product({"name": "Silk Wrap", "price": 450})
        if not result:
            print(result.error)
    """

    def __init__(
        self,
        store: SyncStore,
        gateway: RemoteGateway,
        local_store: LocalStore,
        mutator: OptimisticMutator,
        session: SessionGate,
    ):
        super().__init__()
        self.store = store
        self.gateway = gateway
        self.local_store = local_store
        self.mutator = mutator
        self.session = session
        self._collections: Dict[str, List[Dict[str, Any]]] = {}
        self._read_local()

    # =========================================================================
    # COLLECTIONS
    # =========================================================================

    def _read_local(self) -> None:
        for table in WORKSPACE_TABLES:
            value = self.local_store.get(local_key(table), [])
            self._collections[table] = value if isinstance(value, list) else []

    def _mirror(self) -> None:
        """Write every workspace collection back to the local store."""
        for table, rows in self._collections.items():
            try:
                self.local_store.set(local_key(table), rows)
            except LocalStorageError as e:
                self.logger.error(f"Could not mirror {table}: {e.message}")
        if not self.gateway.is_configured:
            # Local mode has no refresh; the store re-reads what we wrote
            self.store.hydrate()

    def collection(self, table: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._collections.get(table, [])]

    @property
    def products(self) -> List[Dict[str, Any]]:
        return self.collection("products")

    @property
    def categories(self) -> List[Dict[str, Any]]:
        return self.collection("categories")

    @property
    def subcategories(self) -> List[Dict[str, Any]]:
        return self.collection("subcategories")

    @property
    def slides(self) -> List[Dict[str, Any]]:
        return self.collection("carousel_slides")

    @property
    def enquiries(self) -> List[Dict[str, Any]]:
        return self.collection("enquiries")

    @property
    def admins(self) -> List[Dict[str, Any]]:
        return self.collection("admin_users")

    @property
    def stats(self) -> List[Dict[str, Any]]:
        return self.collection("product_stats")

    @property
    def orders(self) -> List[Dict[str, Any]]:
        return self.collection("orders")

    @property
    def articles(self) -> List[Dict[str, Any]]:
        return self.collection("articles")

    @property
    def training_modules(self) -> List[Dict[str, Any]]:
        return self.collection("training_modules")

    def _find(self, table: str, record_id: Any) -> Optional[Dict[str, Any]]:
        field_name = key_field(table)
        return next((r for r in self._collections[table] if r.get(field_name) == record_id), None)

    def _new_id(self, table: str) -> str:
        """Millisecond timestamp id, bumped past ids already in ``table``."""
        taken = {str(r.get("id")) for r in self._collections.get(table, [])}
        stamp = now_ms()
        while str(stamp) in taken:
            stamp += 1
        return str(stamp)

    def load(self) -> Dict[str, ServiceResult]:
        """
        Pull the admin tables from the gateway.

        Tables that fail to load keep their local rows. Without a remote
        backend nothing is fetched.
        """
        results: Dict[str, ServiceResult] = {}
        if not self.gateway.is_configured:
            return results

        self._read_local()
        for table in LOADED_TABLES:
            result = self.gateway.fetch_all(table)
            results[table] = result
            if result.reached_remote and result.data is not None:
                self._collections[table] = list(result.data)
            elif not result.success:
                self.logger.warning(f"Admin load of {table} failed: {result.error}")

        self._mirror()
        return results

    # =========================================================================
    # SAVE HELPERS
    # =========================================================================

    def _require(self, permission_id: str) -> None:
        if not self.session.can(permission_id):
            raise AuthenticationError(
                "You do not have permission to perform this action.", area=ADMIN_AREA
            )

    def _begin(self, permission_id: str) -> None:
        """Permission check, then pick up rows other writers mirrored locally."""
        self._require(permission_id)
        self._read_local()

    def _run(
        self,
        local_action: Callable[[], None],
        table: str,
        record: Optional[Dict[str, Any]] = None,
        delete_id: Any = None,
        remote_record: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        def action():
            local_action()
            self._mirror()

        saved = self.mutator.perform_save(
            action,
            table,
            remote_record if remote_record is not None else record,
            delete_id=delete_id,
        )
        if saved:
            return ServiceResult.ok(record)
        return ServiceResult.fail(
            self.mutator.last_error or "Save failed", ResultCode.REMOTE_ERROR, data=record
        )

    def _save_record(
        self,
        table: str,
        data: Dict[str, Any],
        editing_id: Optional[str] = None,
        prepend: bool = False,
        private_fields: tuple = (),
    ) -> ServiceResult:
        rows = self._collections[table]
        if editing_id is not None:
            existing = self._find(table, editing_id)
            if existing is None:
                return ServiceResult.fail(f"{table} record {editing_id} not found", ResultCode.NOT_FOUND)
            record = {**existing, **data, "id": editing_id}
        else:
            record = {**data, "id": data.get("id") or self._new_id(table), "createdAt": data.get("createdAt") or now_ms()}

        def apply():
            if editing_id is not None:
                self._collections[table] = [record if r.get("id") == editing_id else r for r in rows]
            elif prepend:
                self._collections[table] = [record] + rows
            else:
                self._collections[table] = rows + [record]

        remote_record = None
        if private_fields:
            remote_record = {k: v for k, v in record.items() if k not in private_fields}
        return self._run(apply, table, record, remote_record=remote_record)

    def _delete_record(self, table: str, record_id: Any) -> ServiceResult:
        field_name = key_field(table)

        def apply():
            self._collections[table] = [
                r for r in self._collections[table] if r.get(field_name) != record_id
            ]

        return self._run(apply, table, delete_id=record_id)

    # =========================================================================
    # CATALOGUE
    # =========================================================================

    def save_product(self, data: Dict[str, Any], editing_id: Optional[str] = None) -> ServiceResult:
        """Create (newest first) or edit a product; edits merge into the existing row."""
        self._begin("catalog.products.edit" if editing_id else "catalog.products.create")
        return self._save_record("products", data, editing_id, prepend=True)

    def delete_product(self, product_id: str) -> ServiceResult:
        self._begin("catalog.products.delete")
        return self._delete_record("products", product_id)

    def save_category(self, data: Dict[str, Any], editing_id: Optional[str] = None) -> ServiceResult:
        self._begin("catalog.categories.manage")
        return self._save_record("categories", data, editing_id)

    def delete_category(self, category_id: str) -> ServiceResult:
        self._begin("catalog.categories.manage")
        return self._delete_record("categories", category_id)

    def add_subcategory(self, category_id: str, name: str) -> ServiceResult:
        self._begin("catalog.subcategories.manage")
        name = (name or "").strip()
        if not name:
            return ServiceResult.fail("Sub-category name is required", ResultCode.VALIDATION)
        sub = {"id": self._new_id("subcategories"), "categoryId": category_id, "name": name}
        rows = self._collections["subcategories"]
        return self._run(lambda: self._collections.update(subcategories=rows + [sub]), "subcategories", sub)

    def delete_subcategory(self, subcategory_id: str) -> ServiceResult:
        self._begin("catalog.subcategories.manage")
        return self._delete_record("subcategories", subcategory_id)

    def save_slide(self, data: Dict[str, Any], editing_id: Optional[str] = None) -> ServiceResult:
        self._begin("content.hero")
        return self._save_record("carousel_slides", data, editing_id)

    def delete_slide(self, slide_id: str) -> ServiceResult:
        self._begin("content.hero")
        return self._delete_record("carousel_slides", slide_id)

    def delete_review(self, product_id: str, review_id: str) -> ServiceResult:
        """Drop one review from a product; the whole product row is upserted."""
        self._begin("catalog.reviews.moderate")
        product = self._find("products", product_id)
        if product is None:
            return ServiceResult.fail(f"Product {product_id} not found", ResultCode.NOT_FOUND)
        reviews = product.get("reviews") or []
        remaining = [r for r in reviews if r.get("id") != review_id]
        if len(remaining) == len(reviews):
            return ServiceResult.fail(f"Review {review_id} not found", ResultCode.NOT_FOUND)
        return self._save_record("products", {"reviews": remaining}, editing_id=product_id)

    # =========================================================================
    # ORDERS
    # =========================================================================

    def update_order_status(self, order_id: str, status: str) -> ServiceResult:
        """Move an order to any ``OrderStatus`` value."""
        self._begin("orders.status")
        try:
            status = OrderStatus(status).value
        except ValueError:
            return ServiceResult.fail(f"Unknown order status '{status}'", ResultCode.VALIDATION)
        if self._find("orders", order_id) is None:
            return ServiceResult.fail(f"Order {order_id} not found", ResultCode.NOT_FOUND)
        return self._save_record("orders", {"status": status}, editing_id=order_id)

    def save_tracking(self, order_id: str, courier: str, tracking_number: str) -> ServiceResult:
        """Record courier and tracking number; the order becomes shipped."""
        self._begin("orders.fulfil")
        tracking_number = (tracking_number or "").strip()
        if not tracking_number:
            return ServiceResult.fail("Tracking number is required", ResultCode.VALIDATION)
        if self._find("orders", order_id) is None:
            return ServiceResult.fail(f"Order {order_id} not found", ResultCode.NOT_FOUND)
        update = {
            "courierName": (courier or "").strip(),
            "trackingNumber": tracking_number,
            "status": OrderStatus.SHIPPED.value,
        }
        return self._save_record("orders", update, editing_id=order_id)

    # =========================================================================
    # JOURNAL AND TRAINING
    # =========================================================================

    def save_article(self, data: Dict[str, Any], editing_id: Optional[str] = None) -> ServiceResult:
        """New articles are dated now and credited to the company unless given an author."""
        self._begin("content.articles")
        if editing_id is None:
            data = {
                **data,
                "date": data.get("date") or now_ms(),
                "author": data.get("author") or self.store.settings.get("companyName"),
            }
        return self._save_record("articles", data, editing_id, prepend=True)

    def delete_article(self, article_id: str) -> ServiceResult:
        self._begin("content.articles")
        return self._delete_record("articles", article_id)

    def save_training_module(self, data: Dict[str, Any], editing_id: Optional[str] = None) -> ServiceResult:
        self._begin("content.training")
        if editing_id is None:
            me = self.session.current_user or {}
            data = {**data, "createdBy": data.get("createdBy") or me.get("id")}
        return self._save_record("training_modules", data, editing_id)

    def delete_training_module(self, module_id: str) -> ServiceResult:
        self._begin("content.training")
        return self._delete_record("training_modules", module_id)

    # =========================================================================
    # INBOX
    # =========================================================================

    def _set_enquiry_status(self, enquiry_id: str, status: str) -> ServiceResult:
        enquiry = self._find("enquiries", enquiry_id)
        if enquiry is None:
            return ServiceResult.fail(f"Enquiry {enquiry_id} not found", ResultCode.NOT_FOUND)
        return self._save_record("enquiries", {"status": status}, editing_id=enquiry_id)

    def toggle_enquiry_status(self, enquiry_id: str) -> ServiceResult:
        """read <-> unread (archived enquiries become read)."""
        self._begin("sales.status")
        enquiry = self._find("enquiries", enquiry_id) or {}
        status = EnquiryStatus.UNREAD if enquiry.get("status") == EnquiryStatus.READ.value else EnquiryStatus.READ
        return self._set_enquiry_status(enquiry_id, status.value)

    def archive_enquiry(self, enquiry_id: str) -> ServiceResult:
        self._begin("sales.status")
        return self._set_enquiry_status(enquiry_id, EnquiryStatus.ARCHIVED.value)

    def delete_enquiry(self, enquiry_id: str) -> ServiceResult:
        self._begin("sales.delete")
        return self._delete_record("enquiries", enquiry_id)

    def filter_enquiries(self, search: str = "", status: str = "all") -> List[Dict[str, Any]]:
        """Enquiries whose name, email or subject contains ``search``."""
        self._read_local()
        needle = (search or "").lower()
        matches = []
        for enquiry in self._collections["enquiries"]:
            haystack = [enquiry.get(f) or "" for f in ("name", "email", "subject")]
            if needle and not any(needle in value.lower() for value in haystack):
                continue
            if status != "all" and enquiry.get("status") != status:
                continue
            matches.append(dict(enquiry))
        return matches

    def export_enquiries_csv(self, path: Optional[str] = None) -> str:
        """
        Enquiries as CSV (Name, Email, Subject, Message, Date).

        Args:
            path: Also write the CSV to this file when given

        Returns:
            The CSV text
        """
        self._begin("sales.export")
        enquiries = self._collections["enquiries"]
        df = pd.DataFrame(
            {
                "Name": [e.get("name", "") for e in enquiries],
                "Email": [e.get("email", "") for e in enquiries],
                "Subject": [e.get("subject", "") for e in enquiries],
                "Message": [e.get("message", "") for e in enquiries],
                "Date": pd.to_datetime(
                    [e.get("createdAt") for e in enquiries], unit="ms", errors="coerce"
                ).strftime("%Y-%m-%d"),
            },
            columns=ENQUIRY_CSV_COLUMNS,
        )
        df["Date"] = df["Date"].fillna("")
        csv_text = df.to_csv(index=False)
        if path:
            with open(path, "w", encoding="utf-8", newline="") as fh:
                fh.write(csv_text)
            self.logger.info(f"Exported {len(df)} enquiries to {path}")
        return csv_text

    # =========================================================================
    # TEAM
    # =========================================================================

    def save_admin(self, data: Dict[str, Any], editing_id: Optional[str] = None) -> ServiceResult:
        """
        Create or edit a team member.

        New members need an email and password. With a remote backend the
        member is signed up first; a rejected sign-up aborts the save.
        Passwords are only ever stored as bcrypt hashes, and only locally.
        """
        self._begin("system.team.manage")
        email = (data.get("email") or "").strip().lower()
        password = data.get("password") or ""
        if editing_id is None and (not email or not password):
            return ServiceResult.fail("Email and password are required for new members", ResultCode.VALIDATION)

        member = {k: v for k, v in data.items() if k != "password"}
        if email:
            member["email"] = email
        role = member.get("role") or AdminRole.ADMIN.value
        member["role"] = role
        if role == AdminRole.OWNER.value:
            member["permissions"] = ["*"]
        else:
            member.setdefault("permissions", [])
        if password:
            member["password"] = hash_password(password)

        if editing_id is None and self.gateway.is_configured:
            try:
                response = self.gateway.client.auth.sign_up({
                    "email": email,
                    "password": password,
                    "options": {"data": {"name": member.get("name"), "role": role}},
                })
            except Exception as e:
                self.logger.error(f"Error saving member: {e}")
                self.mutator.tracker.set(SaveStatus.ERROR)
                return ServiceResult.fail(f"Error saving member: {e}", ResultCode.AUTH_ERROR)
            user = getattr(response, "user", None)
            if user is not None and getattr(user, "id", None):
                member["id"] = user.id

        result = self._save_record("admin_users", member, editing_id, private_fields=("password",))
        if result.data:
            result.data = {k: v for k, v in result.data.items() if k != "password"}
        return result

    def delete_admin(self, admin_id: str) -> ServiceResult:
        """Remove a team member (never the signed-in admin)."""
        self._begin("system.team.delete")
        me = self.session.current_user or {}
        target = self._find("admin_users", admin_id) or {}
        if admin_id == me.get("id") or (target.get("email") and target.get("email") == me.get("email")):
            return ServiceResult.fail("You cannot remove your own account.", ResultCode.VALIDATION)
        return self._delete_record("admin_users", admin_id)

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def backup(self) -> str:
        """JSON snapshot of the workspace plus the current site settings."""
        self._require("dashboard.export")
        snapshot = {
            "products": self._collections["products"],
            "categories": self._collections["categories"],
            "subCategories": self._collections["subcategories"],
            "heroSlides": self._collections["carousel_slides"],
            "enquiries": self._collections["enquiries"],
            "admins": [
                {k: v for k, v in a.items() if k != "password"} for a in self._collections["admin_users"]
            ],
            "settings": self.store.get(SETTINGS_TABLE)[0],
            "stats": self._collections["product_stats"],
        }
        return json.dumps(snapshot, indent=2, default=str)

    def factory_reset(self) -> None:
        """
        Wipe every locally stored key. Remote data is untouched.

        Owner only.
        """
        if self.session.current_role() != AdminRole.OWNER:
            raise AuthenticationError("Only the owner can reset local data.", area=ADMIN_AREA)
        self.local_store.clear()
        self._collections = {table: [] for table in WORKSPACE_TABLES}
        self.store.hydrate()
        self.logger.warning("Factory reset: local data cleared")

    def stats_summary(self, sort_by: str = "clicks") -> pd.DataFrame:
        """Engagement per product from the workspace's stats rows."""
        return engagement_frame(self._collections["products"], self._collections["product_stats"], sort_by)
