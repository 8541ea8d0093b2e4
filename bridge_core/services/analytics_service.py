# =============================================================================
# bridge_core/services/analytics_service.py
# Product engagement counters and summaries
# =============================================================================
"""
Analytics Service - per-product views/clicks/shares and traffic summaries.

Counters live in ``product_stats`` (keyed by productId) and are upserted
incrementally; summaries are computed with pandas for the admin dashboard.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import numpy as np
import pandas as pd

from bridge_core.models import ProductStats, now_ms
from bridge_core.services.base_service import BaseService

if TYPE_CHECKING:
    from bridge_core.offline.sync_store import SyncStore

TRACKED_KINDS = ("view", "click", "share")

SUMMARY_COLUMNS = [
    "productId", "name", "views", "clicks", "shares", "totalViewTime", "ctr", "avgViewTime",
]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class EngagementKPIs:
    """Headline numbers for the analytics panel."""
    total_views: int = 0
    total_clicks: int = 0
    total_shares: int = 0
    total_view_time: float = 0.0
    global_ctr: float = 0.0             # clicks / views, percent
    top_product: Optional[str] = None   # most clicked product name
    page_views: int = 0                 # traffic log "view" events


def engagement_frame(
    products: List[Dict[str, Any]],
    stats: List[Dict[str, Any]],
    sort_by: str = "clicks",
) -> pd.DataFrame:
    """
    One row per product with counters, CTR (%) and average view time.

    Products without stats appear with zero counters.
    """
    products_df = pd.DataFrame(products)
    stats_df = pd.DataFrame(stats)

    if products_df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    products_df = products_df.rename(columns={"id": "productId"})[["productId", "name"]].copy()
    if stats_df.empty:
        stats_df = pd.DataFrame(columns=["productId", "views", "clicks", "shares", "totalViewTime"])

    products_df["productId"] = products_df["productId"].astype(str)
    stats_df["productId"] = stats_df["productId"].astype(str)

    df = products_df.merge(stats_df, on="productId", how="left")
    for col in ("views", "clicks", "shares", "totalViewTime"):
        if col not in df.columns:
            df[col] = 0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)

    views = df["views"].to_numpy(dtype=float)
    safe_views = np.where(views > 0, views, 1)
    df["ctr"] = np.where(views > 0, df["clicks"] / safe_views * 100, 0.0)
    df["avgViewTime"] = np.where(views > 0, df["totalViewTime"] / safe_views, 0.0)

    df = df[SUMMARY_COLUMNS]
    if sort_by in df.columns:
        df = df.sort_values(sort_by, ascending=False, kind="stable")
    return df.reset_index(drop=True)


class AnalyticsService(BaseService):
    """
    Product engagement tracking.

    Usage:
        analytics = AnalyticsService(store)
        analytics.track("p1", "view", view_seconds=12.5)
        df = analytics.summary(sort_by="ctr")
    """

    def __init__(self, store: SyncStore):
        super().__init__()
        self.store = store

    def track(self, product_id: str, kind: str, view_seconds: float = 0) -> Dict[str, Any]:
        """
        Increment a product's counter and upsert its stats row.

        Args:
            product_id: Product being viewed/clicked/shared
            kind: "view", "click" or "share"
            view_seconds: Time on page, added to totalViewTime for views

        Returns:
            The updated stats record
        """
        if kind not in TRACKED_KINDS:
            raise ValueError(f"Unknown engagement kind: {kind}")

        existing = self.store.find("product_stats", product_id)
        stats = ProductStats.from_record(existing) if existing else ProductStats(productId=product_id)

        if kind == "view":
            stats.views += 1
            stats.totalViewTime += max(0.0, float(view_seconds))
        elif kind == "click":
            stats.clicks += 1
        else:
            stats.shares += 1
        stats.lastUpdated = now_ms()

        record = stats.to_record()
        if not self.store.update_data("product_stats", record):
            self.logger.debug(f"Stats for {product_id} kept locally")
        return record

    def summary(self, sort_by: str = "clicks") -> pd.DataFrame:
        """Engagement frame for the store's products."""
        return engagement_frame(self.store.get("products"), self.store.get("product_stats"), sort_by)

    def kpis(self) -> EngagementKPIs:
        """Totals across every product plus page views from the traffic log."""
        df = self.summary()
        traffic = self.store.get("traffic_logs")
        page_views = sum(1 for event in traffic if event.get("type") == "view")

        if df.empty:
            return EngagementKPIs(page_views=page_views)

        total_views = int(df["views"].sum())
        total_clicks = int(df["clicks"].sum())
        top = df.sort_values("clicks", ascending=False, kind="stable").iloc[0]

        return EngagementKPIs(
            total_views=total_views,
            total_clicks=total_clicks,
            total_shares=int(df["shares"].sum()),
            total_view_time=float(df["totalViewTime"].sum()),
            global_ctr=(total_clicks / total_views * 100) if total_views else 0.0,
            top_product=top["name"] if top["clicks"] > 0 else None,
            page_views=page_views,
        )
