# =============================================================================
# bridge_core/services/storefront_service.py
# Customer-facing writes: enquiries, newsletter, reviews
# =============================================================================

from __future__ import annotations
import uuid
from typing import TYPE_CHECKING, Any, Dict, Optional

from bridge_core.errors import CONNECTION_MESSAGE
from bridge_core.models import EnquiryStatus, Review, now_ms
from bridge_core.services.base_service import BaseService, ResultCode, ServiceResult

if TYPE_CHECKING:
    from bridge_core.offline.sync_store import SyncStore


def average_rating(product: Optional[Dict[str, Any]]) -> int:
    """Mean review rating rounded half up; 0 without reviews."""
    reviews = (product or {}).get("reviews") or []
    if not reviews:
        return 0
    mean = sum(r.get("rating", 0) for r in reviews) / len(reviews)
    return int(mean + 0.5)


class StorefrontService(BaseService):
    """Writes coming from the public storefront pages."""

    def __init__(self, store: SyncStore):
        super().__init__()
        self.store = store

    def submit_enquiry(
        self,
        name: str,
        email: str,
        message: str,
        subject: str = "",
        whatsapp: str = "",
    ) -> ServiceResult:
        """Contact form submission; stored as an unread enquiry."""
        if not name or not email or not message:
            return ServiceResult.fail("Please fill in your name, email and message.", ResultCode.VALIDATION)

        enquiry = {
            "id": str(now_ms()),
            "name": name.strip(),
            "email": email.strip(),
            "whatsapp": whatsapp,
            "subject": subject,
            "message": message,
            "createdAt": now_ms(),
            "status": EnquiryStatus.UNREAD.value,
        }
        saved = self.store.update_data("enquiries", enquiry)
        if not saved:
            self.logger.warning(f"Enquiry {enquiry['id']} kept locally only")
        return ServiceResult.ok(enquiry, metadata={"synced": saved})

    def subscribe_newsletter(self, email: str) -> ServiceResult:
        """Add a subscriber unless the email is already on the list."""
        email = (email or "").strip()
        if not email or "@" not in email:
            return ServiceResult.fail("Please enter a valid email address.", ResultCode.VALIDATION)

        existing = next(
            (s for s in self.store.get("subscribers") if (s.get("email") or "").lower() == email.lower()),
            None,
        )
        if existing is not None:
            return ServiceResult.ok(existing, metadata={"duplicate": True})

        subscriber = {"id": str(now_ms()), "email": email, "createdAt": now_ms()}
        saved = self.store.update_data("subscribers", subscriber)
        return ServiceResult.ok(subscriber, metadata={"duplicate": False, "synced": saved})

    def submit_review(
        self,
        product_id: str,
        rating: int,
        comment: str,
        user_name: str = "",
    ) -> ServiceResult:
        """
        Prepend a review to the product and upsert the whole product row,
        then refresh the catalogue so every reader sees it.
        """
        product = self.store.find("products", product_id)
        if product is None:
            return ServiceResult.fail(f"Product {product_id} not found", ResultCode.NOT_FOUND)

        review = Review(
            id=uuid.uuid4().hex[:12],
            productId=product_id,
            userName=user_name or "Guest",
            rating=max(1, min(5, int(rating))),
            comment=comment,
        )
        product["reviews"] = [review.to_record()] + list(product.get("reviews") or [])

        if not self.store.update_data("products", product):
            return ServiceResult.fail(CONNECTION_MESSAGE, ResultCode.REMOTE_ERROR)

        if self.store.gateway.is_configured:
            self.store.refresh_all_data(["products"])
        return ServiceResult.ok(review.to_record())
